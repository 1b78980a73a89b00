"""Resolve a ClientConfig into the endpoint and credentials used for every call."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bitcoin_rpc.config.schema import (
    DEFAULT_HOST,
    DEFAULT_PROTOCOL,
    DEFAULT_TIMEOUT_MS,
    NETWORK_PORTS,
    ClientConfig,
    Network,
    Protocol,
)
from bitcoin_rpc.rpc.auth import Credentials, resolve_credentials

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedEndpoint:
    """Where and how long to talk to the node.

    Attributes:
        host: Node host name or address.
        port: Node RPC port.
        protocol: "http" or "https".
        timeout: Default per-call timeout in milliseconds.
    """

    host: str
    port: int
    protocol: Protocol
    timeout: int

    @property
    def url(self) -> str:
        """The JSON-RPC endpoint URL."""
        host = self.host
        # Bare IPv6 literals need brackets inside a URL
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        return f"{self.protocol}://{host}:{self.port}/"


@dataclass(frozen=True)
class ResolvedConfig:
    """Fully resolved client configuration, derived once per client."""

    endpoint: ResolvedEndpoint
    credentials: Credentials


def resolve_endpoint(config: ClientConfig) -> ResolvedEndpoint:
    """Apply defaults for host, port, protocol and timeout.

    The port comes from the network table (mainnet when no network is set)
    unless an explicit port is configured.
    """
    network = config.network or Network.MAINNET
    return ResolvedEndpoint(
        host=config.host or DEFAULT_HOST,
        port=config.port or NETWORK_PORTS[network],
        protocol=config.protocol or DEFAULT_PROTOCOL,
        timeout=config.timeout or DEFAULT_TIMEOUT_MS,
    )


def resolve_config(config: ClientConfig) -> ResolvedConfig:
    """Resolve credentials and endpoint.

    Raises:
        AuthConfigError: If no credentials can be resolved.
        CookieFileError: If the configured cookie file cannot be used.
    """
    credentials = resolve_credentials(
        username=config.username,
        password=config.password,
        cookie=config.cookie,
    )
    endpoint = resolve_endpoint(config)
    logger.debug(
        "Resolved RPC endpoint: url=%s, timeout=%sms, user=%s",
        endpoint.url, endpoint.timeout, credentials.username,
    )
    return ResolvedConfig(endpoint=endpoint, credentials=credentials)
