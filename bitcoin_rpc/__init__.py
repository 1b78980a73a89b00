"""bitcoin_rpc - a thin async client for the Bitcoin Core JSON-RPC interface."""

from bitcoin_rpc.client import RPCClient
from bitcoin_rpc.config import ClientConfig, Network, load_config
from bitcoin_rpc.core import (
    AuthConfigError,
    AuthenticationError,
    BitcoinRPCError,
    CancellationToken,
    ConfigError,
    CookieFileError,
    HTTPStatusError,
    MalformedResponseError,
    RPCCancelledError,
    RPCConnectionError,
    RPCProtocolError,
    RPCTimeoutError,
    TransportError,
)
from bitcoin_rpc.rpc import BatchCall

__version__ = "0.4.0"

__all__ = [
    "RPCClient",
    "ClientConfig",
    "Network",
    "load_config",
    "BatchCall",
    "CancellationToken",
    "BitcoinRPCError",
    "ConfigError",
    "AuthConfigError",
    "CookieFileError",
    "TransportError",
    "RPCConnectionError",
    "RPCTimeoutError",
    "RPCCancelledError",
    "HTTPStatusError",
    "AuthenticationError",
    "RPCProtocolError",
    "MalformedResponseError",
]
