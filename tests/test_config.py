"""Tests for connection settings."""

import json
import os
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from rqlite_client import ConfigError, ConnectOptions, RqliteError, Scheme
from rqlite_client.config import substitute_env_vars


@pytest.fixture
def sample_options_dict():
    """Sample connection settings."""
    return {
        "host": "db.example.com",
        "port": 4443,
        "scheme": "https",
        "user": "root",
        "password": "${TEST_RQLITE_PASSWORD}",
        "accept_invalid_cert": True,
    }


class TestEnvSubstitution:
    """Tests for environment variable substitution."""

    def test_substitute_string(self):
        """Test substituting a string value."""
        os.environ["TEST_VAR"] = "hello"
        result = substitute_env_vars("${TEST_VAR}")
        assert result == "hello"

    def test_substitute_in_dict(self):
        """Test substituting values in a dictionary."""
        os.environ["TEST_KEY"] = "secret"
        data = {"key": "${TEST_KEY}", "other": "value"}
        result = substitute_env_vars(data)
        assert result == {"key": "secret", "other": "value"}

    def test_substitute_in_list(self):
        """Test substituting values in a list."""
        os.environ["TEST_ITEM"] = "item1"
        result = substitute_env_vars(["${TEST_ITEM}", "item2"])
        assert result == ["item1", "item2"]

    def test_non_strings_untouched(self):
        """Numbers and booleans are returned as-is."""
        assert substitute_env_vars({"port": 4001, "tls": False}) == {"port": 4001, "tls": False}

    def test_missing_env_var_raises(self):
        """Test that missing env vars raise ConfigError."""
        os.environ.pop("NONEXISTENT_VAR", None)
        with pytest.raises(ConfigError, match="NONEXISTENT_VAR"):
            substitute_env_vars("${NONEXISTENT_VAR}")


class TestConnectOptions:
    """Tests for ConnectOptions."""

    def test_defaults(self):
        """Defaults describe a plain local node without credentials."""
        options = ConnectOptions()
        assert options.host == "127.0.0.1"
        assert options.port == 4001
        assert options.scheme is Scheme.HTTP
        assert options.user is None
        assert options.password is None
        assert options.accept_invalid_cert is False
        assert options.timeout is None

    def test_urls(self):
        """base_url and host_header follow scheme, host and port."""
        options = ConnectOptions(host="my.node.local", port=4003, scheme=Scheme.HTTPS)
        assert options.base_url == "https://my.node.local:4003"
        assert options.host_header == "my.node.local:4003"

    def test_has_credentials(self):
        """Both user and password are needed."""
        assert ConnectOptions(user="u", password="p").has_credentials
        assert not ConnectOptions(user="u").has_credentials
        assert not ConnectOptions(password="p").has_credentials

    def test_password_not_in_repr(self):
        """The password is kept out of repr."""
        assert "hunter2" not in repr(ConnectOptions(user="u", password="hunter2"))

    def test_frozen(self):
        """Options cannot change once built."""
        options = ConnectOptions()
        with pytest.raises(ValidationError):
            options.port = 4002  # type: ignore[misc]

    @pytest.mark.parametrize("port", [0, -1, 65536])
    def test_invalid_port(self, port):
        """Ports outside 1..65535 are rejected."""
        with pytest.raises(ValidationError):
            ConnectOptions(port=port)

    def test_invalid_consistency(self):
        """Only rqlite's consistency levels are accepted."""
        with pytest.raises(ValidationError):
            ConnectOptions(consistency="eventual")


class TestOptionsLoading:
    """Tests for loading options from dicts and files."""

    def test_from_dict(self, sample_options_dict, monkeypatch):
        """Test loading options from a dictionary."""
        monkeypatch.setenv("TEST_RQLITE_PASSWORD", "s3cret")
        options = ConnectOptions.from_dict(sample_options_dict)
        assert options.host == "db.example.com"
        assert options.scheme is Scheme.HTTPS
        assert options.password == "s3cret"
        assert options.accept_invalid_cert is True

    def test_from_dict_missing_variable(self, sample_options_dict, monkeypatch):
        """An unset variable is reported as a client configuration error."""
        monkeypatch.delenv("TEST_RQLITE_PASSWORD", raising=False)

        with pytest.raises(RqliteError, match="TEST_RQLITE_PASSWORD") as exc_info:
            ConnectOptions.from_dict(sample_options_dict)
        assert isinstance(exc_info.value, ConfigError)

    def test_from_yaml_file(self, sample_options_dict, monkeypatch, tmp_path: Path):
        """Test loading options from a YAML file."""
        monkeypatch.setenv("TEST_RQLITE_PASSWORD", "from-yaml")
        path = tmp_path / "rqlite.yaml"
        path.write_text(yaml.dump(sample_options_dict))

        options = ConnectOptions.from_file(path)
        assert options.port == 4443
        assert options.password == "from-yaml"

    def test_from_json_file(self, sample_options_dict, monkeypatch, tmp_path: Path):
        """Test loading options from a JSON file."""
        monkeypatch.setenv("TEST_RQLITE_PASSWORD", "from-json")
        path = tmp_path / "rqlite.json"
        path.write_text(json.dumps(sample_options_dict))

        options = ConnectOptions.from_file(str(path))
        assert options.user == "root"
        assert options.password == "from-json"

    def test_empty_yaml_uses_defaults(self, tmp_path: Path):
        """An empty file yields default options."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert ConnectOptions.from_file(path) == ConnectOptions()
