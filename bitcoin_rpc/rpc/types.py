"""JSON-RPC types for node requests and responses."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

# JSON values as produced by json.loads
JSONValue = bool | int | float | str | list[Any] | dict[str, Any] | None
JSONParams = list[Any] | dict[str, Any]

RequestId = str | int

# RPC methods wrapped by RPCClient
MethodName = Literal[
    "getnetworkinfo",
    "getmempoolinfo",
    "getbestblockhash",
    "getblockcount",
    "getblockheader",
    "getrawtransaction",
    "getrawmempool",
    "getblock",
    "getblockhash",
    "getblocktemplate",
    "getblockchaininfo",
    "scantxoutset",
    "sendrawtransaction",
    "uptime",
]

GetBlockVerbosity = Literal[0, 1]
ScanAction = Literal["start", "abort", "status"]


class EnvelopeFormat(str, Enum):
    """Response envelope flavours returned by the node."""

    LEGACY = "legacy"  # {"id", "result", "error"} with error null on success
    JSONRPC2 = "2.0"  # {"jsonrpc": "2.0", "id", "result" | "error"}


@dataclass
class Request:
    """JSON-RPC 2.0 request.

    Attributes:
        method: Name of the method to invoke.
        params: Named (object) or positional (array) parameters.
        id: Correlation id echoed back by the node.
        jsonrpc: Protocol version, always "2.0".
    """

    method: str
    params: JSONParams = field(default_factory=list)
    id: RequestId | None = None
    jsonrpc: str = "2.0"

    def to_dict(self) -> dict[str, Any]:
        """Wire representation of the request."""
        return {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "method": self.method,
            "params": self.params,
        }


@dataclass(frozen=True)
class ErrorObject:
    """Error member of a response envelope."""

    code: int
    message: str
    data: Any = None


@dataclass(frozen=True)
class Response:
    """A decoded response envelope of either format.

    Attributes:
        format: Which envelope shape the node used.
        id: Request identifier from the original request.
        result: Result of the method call (meaningless when error is set).
        error: Error object if the method failed.
    """

    format: EnvelopeFormat
    id: RequestId | None
    result: Any = None
    error: ErrorObject | None = None

    @property
    def ok(self) -> bool:
        """True when the envelope carries a result rather than an error."""
        return self.error is None


@dataclass(frozen=True)
class BatchCall:
    """One entry of a batch request. A None id is replaced by "{timestamp}-{index}"."""

    method: str
    params: JSONParams = field(default_factory=list)
    id: RequestId | None = None

    @classmethod
    def coerce(cls, call: "BatchCall | Mapping[str, Any]") -> "BatchCall":
        """Accept a BatchCall or a mapping with method/params/id keys."""
        if isinstance(call, BatchCall):
            return call
        if not isinstance(call, Mapping) or "method" not in call:
            raise TypeError(f"batch entries need a 'method', got: {call!r}")
        return cls(
            method=call["method"],
            params=call.get("params", []),
            id=call.get("id"),
        )


@dataclass(frozen=True)
class HttpResponse:
    """Raw transport result."""

    status_code: int
    headers: Mapping[str, str]
    text: str

    @property
    def content_type(self) -> str:
        """Media type without parameters, lowercased (e.g. "application/json")."""
        value = self.headers.get("content-type", "")
        return value.split(";", 1)[0].strip().lower()
