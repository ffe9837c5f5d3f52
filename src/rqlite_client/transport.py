"""Plain and TLS transports for a node connection."""

import ssl

import httpx

from rqlite_client.config import ConnectOptions, Scheme
from rqlite_client.exceptions import ConfigError


def build_ssl_context(options: ConnectOptions) -> ssl.SSLContext:
    """Build the TLS context for an HTTPS connection.

    Raises:
        ConfigError: If the CA bundle cannot be loaded
    """
    try:
        context = ssl.create_default_context(cafile=options.ca_cert)
    except (OSError, ssl.SSLError) as e:
        raise ConfigError(f"Cannot build TLS context: {e}") from e

    if options.accept_invalid_cert:
        # check_hostname must be cleared before verify_mode can be relaxed
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def build_transport(options: ConnectOptions) -> httpx.AsyncBaseTransport:
    """Pick the transport matching the connection scheme."""
    if options.scheme is Scheme.HTTPS:
        return httpx.AsyncHTTPTransport(verify=build_ssl_context(options))
    return httpx.AsyncHTTPTransport()
