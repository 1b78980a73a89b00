"""Typed exception hierarchy for bitcoin_rpc."""

from __future__ import annotations

import json
from typing import Any

# Cap on how much of a raw payload is kept in error messages
MAX_PAYLOAD_PREVIEW = 2000


class BitcoinRPCError(Exception):
    """Base class for all bitcoin_rpc errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# === Configuration errors (raised at construction, no call is attempted) ===


class ConfigError(BitcoinRPCError):
    """Raised for configuration issues (invalid network, bad values, config file)."""


class AuthConfigError(ConfigError):
    """Raised when no usable username/password can be resolved."""


class CookieFileError(ConfigError):
    """Raised when the cookie file is missing, unreadable or malformed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


# === Per-call errors ===


class TransportError(BitcoinRPCError):
    """Raised when the HTTP round trip itself fails."""


class RPCConnectionError(TransportError):
    """Raised when the node cannot be reached."""


class RPCTimeoutError(TransportError):
    """Raised when a call exceeds its timeout."""


class RPCCancelledError(TransportError):
    """Raised when a call is aborted through its cancellation token."""


class HTTPStatusError(TransportError):
    """Raised for a non-200 response that carries no parseable RPC error."""

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(detail)


class AuthenticationError(BitcoinRPCError):
    """Raised when the node rejects the credentials (HTTP 401)."""


class RPCProtocolError(BitcoinRPCError):
    """Raised when a response envelope carries an error object.

    Attributes:
        code: Remote JSON-RPC error code.
        rpc_message: Remote error message, verbatim.
        data: Optional auxiliary error data.
        http_status: HTTP status of the response when it was not 200.
    """

    def __init__(
        self,
        code: int,
        message: str,
        data: Any = None,
        http_status: int | None = None,
    ) -> None:
        self.code = code
        self.rpc_message = message
        self.data = data
        self.http_status = http_status
        super().__init__(f"Code: {code}, {message}")


class MalformedResponseError(BitcoinRPCError):
    """Raised when a JSON response matches no accepted envelope shape."""

    def __init__(self, payload: Any, reason: str = "") -> None:
        self.payload = payload
        raw = _preview(payload)
        message = f"Received invalid RPC response: {raw}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


def _preview(payload: Any) -> str:
    """Serialize a payload for diagnostics, truncated to MAX_PAYLOAD_PREVIEW."""
    try:
        raw = json.dumps(payload, separators=(",", ":"))
    except (TypeError, ValueError):
        raw = repr(payload)
    if len(raw) > MAX_PAYLOAD_PREVIEW:
        return raw[:MAX_PAYLOAD_PREVIEW] + "..."
    return raw
