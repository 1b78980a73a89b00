"""Configuration models, loading and resolution."""

from bitcoin_rpc.config.loader import build_config, load_config
from bitcoin_rpc.config.resolver import (
    ResolvedConfig,
    ResolvedEndpoint,
    resolve_config,
    resolve_endpoint,
)
from bitcoin_rpc.config.schema import (
    DEFAULT_HOST,
    DEFAULT_TIMEOUT_MS,
    NETWORK_PORTS,
    ClientConfig,
    Network,
    Protocol,
)

__all__ = [
    "ClientConfig",
    "Network",
    "Protocol",
    "NETWORK_PORTS",
    "DEFAULT_HOST",
    "DEFAULT_TIMEOUT_MS",
    "ResolvedConfig",
    "ResolvedEndpoint",
    "build_config",
    "load_config",
    "resolve_config",
    "resolve_endpoint",
]
