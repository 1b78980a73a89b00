"""Core types: errors and cancellation."""

from bitcoin_rpc.core.cancel import CancellationToken
from bitcoin_rpc.core.errors import (
    AuthConfigError,
    AuthenticationError,
    BitcoinRPCError,
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

__all__ = [
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
