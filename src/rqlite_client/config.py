"""Connection settings with environment variable substitution."""

import json
import os
import re
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

from rqlite_client.exceptions import ConfigError

if TYPE_CHECKING:
    import httpx

    from rqlite_client.connection import Connection

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")


def substitute_env_vars(value: Any) -> Any:
    """Replace ``${NAME}`` in every string of a loaded settings tree.

    Raises:
        ConfigError: If a referenced variable is not set
    """
    if isinstance(value, dict):
        return {key: substitute_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    if not isinstance(value, str):
        return value

    def lookup(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in os.environ:
            raise ConfigError(f"Environment variable {name} is not set")
        return os.environ[name]

    return ENV_VAR_PATTERN.sub(lookup, value)


class Scheme(str, Enum):
    """Connection scheme."""

    HTTP = "http"
    HTTPS = "https"


class ConnectOptions(BaseModel):
    """Settings for a connection to one rqlite node.

    Example:
        options = ConnectOptions(host="my.node.local", scheme=Scheme.HTTPS,
                                 user="root", password="root")
        conn = await options.connect()
    """

    model_config = ConfigDict(frozen=True)

    host: str = "127.0.0.1"
    port: int = Field(default=4001, ge=1, le=65535)
    scheme: Scheme = Scheme.HTTP
    user: str | None = None
    password: str | None = Field(default=None, repr=False)
    # Disables both chain and hostname verification
    accept_invalid_cert: bool = False
    ca_cert: str | None = None
    timeout: float | None = Field(default=None, gt=0)
    consistency: Literal["none", "weak", "strong"] | None = None

    @property
    def base_url(self) -> str:
        """Root URL of the node."""
        return f"{self.scheme.value}://{self.host}:{self.port}"

    @property
    def host_header(self) -> str:
        """Value sent in the Host header."""
        return f"{self.host}:{self.port}"

    @property
    def has_credentials(self) -> bool:
        """True when both user and password are set."""
        return self.user is not None and self.password is not None

    async def connect(
        self, transport: "httpx.AsyncBaseTransport | None" = None
    ) -> "Connection":
        """Establish a connection to the node described by these options."""
        from rqlite_client.connection import connect

        return await connect(self, transport=transport)

    @classmethod
    def from_file(cls, path: str | Path) -> "ConnectOptions":
        """Load connection settings from a YAML (``.yaml``, ``.yml``) or JSON file.

        An empty file yields the defaults.
        """
        path = Path(path)
        with path.open() as f:
            data = yaml.safe_load(f) if path.suffix in (".yaml", ".yml") else json.load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConnectOptions":
        """Build settings from a plain mapping, expanding ``${VAR}`` references."""
        return cls.model_validate(substitute_env_vars(data))
