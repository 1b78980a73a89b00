"""JSON-RPC envelope construction and response normalization.

The node answers in one of two envelope shapes:

    legacy: {"id": ..., "result": ..., "error": null | {"code": int, "message": str}}
    2.0:    {"jsonrpc": "2.0", "id": ..., "result": ...}
            {"jsonrpc": "2.0", "id": ..., "error": {"code", "message", "data"?}}

decode_envelope() is the only place these shapes are inspected; everything
else works on the normalized Response.
"""

import json
import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any

from bitcoin_rpc.core.errors import (
    AuthenticationError,
    HTTPStatusError,
    MalformedResponseError,
    RPCProtocolError,
    TransportError,
)
from bitcoin_rpc.rpc.types import (
    BatchCall,
    EnvelopeFormat,
    ErrorObject,
    HttpResponse,
    JSONParams,
    Request,
    Response,
)

logger = logging.getLogger(__name__)

# Cap on error body text carried into HTTPStatusError
MAX_ERROR_BODY_SIZE = 10 * 1024

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


# === Request side ===


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def make_request_id(suffix: str | int | None = None, now_ms: int | None = None) -> str:
    """Generate a correlation id from the current time.

    Args:
        suffix: Optional disambiguator appended as "-{suffix}".
        now_ms: Timestamp override in epoch milliseconds.

    Returns:
        "{ms}" or "{ms}-{suffix}".
    """
    stamp = _now_ms() if now_ms is None else now_ms
    if suffix is None:
        return str(stamp)
    return f"{stamp}-{suffix}"


def build_request(
    method: str,
    params: JSONParams | None = None,
    suffix: str | int | None = None,
) -> Request:
    """Build a single-call request envelope.

    Args:
        method: RPC method name.
        params: Named or positional parameters. Defaults to [].
        suffix: Optional id suffix to keep ids unique within a millisecond.
    """
    return Request(
        method=method,
        params=[] if params is None else params,
        id=make_request_id(suffix),
    )


def build_batch(calls: Iterable[BatchCall | Mapping[str, Any]]) -> list[Request]:
    """Build the request envelopes of a batch.

    Entries without an id get "{timestamp}-{index}", all sharing one
    timestamp. Caller supplied ids are kept verbatim.

    Raises:
        ValueError: If the batch is empty.
        TypeError: If an entry has no method.
    """
    now = _now_ms()
    requests = []
    for index, entry in enumerate(calls):
        call = BatchCall.coerce(entry)
        request_id = call.id if call.id is not None else make_request_id(index, now_ms=now)
        requests.append(Request(method=call.method, params=call.params, id=request_id))
    if not requests:
        raise ValueError("Batch must contain at least one request")
    return requests


def serialize_request(request: Request | list[Request]) -> str:
    """Serialize a request or a batch to compact JSON."""
    if isinstance(request, list):
        return json.dumps([r.to_dict() for r in request], separators=(",", ":"))
    return json.dumps(request.to_dict(), separators=(",", ":"))


# === Response side ===


def classify_envelope(data: Any) -> EnvelopeFormat | None:
    """Tell which envelope shape a decoded JSON value has.

    An object whose "jsonrpc" member equals "2.0" and that carries a result
    or a non-null error is a 2.0 envelope. Otherwise an object with "id",
    "result" and "error" members is a legacy envelope.

    Returns:
        The format, or None if the value matches neither shape.
    """
    if not isinstance(data, dict):
        return None
    if data.get("jsonrpc") == "2.0":
        if "result" in data or data.get("error") is not None:
            return EnvelopeFormat.JSONRPC2
        return None
    if "id" in data and "result" in data and "error" in data:
        return EnvelopeFormat.LEGACY
    return None


def _decode_error(data: dict[str, Any], error: Any) -> ErrorObject:
    if not isinstance(error, dict):
        raise MalformedResponseError(data, f"error must be an object, got {type(error).__name__}")
    code = error.get("code")
    message = error.get("message")
    if not isinstance(code, int) or isinstance(code, bool) or not isinstance(message, str):
        raise MalformedResponseError(data, "error must have integer 'code' and string 'message'")
    return ErrorObject(code=code, message=message, data=error.get("data"))


def decode_envelope(data: Any) -> Response:
    """Normalize a legacy or 2.0 envelope into a Response.

    Args:
        data: A decoded JSON value.

    Returns:
        The normalized Response, with error set when the envelope carries one.

    Raises:
        MalformedResponseError: If the value matches neither envelope shape or
            its error member is not a {code, message} object.
    """
    envelope_format = classify_envelope(data)
    if envelope_format is None:
        raise MalformedResponseError(data)

    error = data.get("error")
    if error is not None:
        return Response(
            format=envelope_format,
            id=data.get("id"),
            error=_decode_error(data, error),
        )
    return Response(format=envelope_format, id=data.get("id"), result=data.get("result"))


def unwrap(envelope: Response | Mapping[str, Any]) -> Any:
    """Return the result of an envelope or raise its error.

    Accepts a decoded Response or a raw envelope dict, such as one item of
    a batch outcome.

    Raises:
        RPCProtocolError: If the envelope carries an error object.
        MalformedResponseError: If a raw envelope matches neither shape.
    """
    response = envelope if isinstance(envelope, Response) else decode_envelope(envelope)
    if response.error is not None:
        raise RPCProtocolError(
            response.error.code,
            response.error.message,
            data=response.error.data,
        )
    return response.result


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise TransportError(f"Invalid JSON in response body: {e}") from e


def parse_response(text: str) -> Any:
    """Decode a single-call response body into its result.

    Raises:
        TransportError: If the body is not JSON.
        MalformedResponseError: If the JSON matches no envelope shape.
        RPCProtocolError: If the envelope carries an error object.
    """
    return unwrap(decode_envelope(_loads(text)))


def parse_batch_response(text: str) -> list[dict[str, Any]]:
    """Decode a batch response body.

    Every element must be a legacy or a 2.0 envelope; the two may be mixed.
    Elements are returned unmodified so the caller can correlate by id and
    handle partial failures per item.

    Raises:
        TransportError: If the body is not JSON.
        MalformedResponseError: If the body is not an array or an element
            matches neither envelope shape.
    """
    data = _loads(text)
    if not isinstance(data, list):
        raise MalformedResponseError(data, "batch response must be an array")
    for index, item in enumerate(data):
        if classify_envelope(item) is None:
            raise MalformedResponseError(data, f"batch item {index} matches no envelope shape")
    return data


def check_http_status(response: HttpResponse) -> None:
    """Raise for a non-200 transport response.

    401 always means bad credentials. For other statuses a JSON body is
    inspected: a well formed error object becomes an RPCProtocolError (the
    node answers RPC errors with HTTP 500 in legacy mode), any other error
    value or the raw body text becomes the detail of an HTTPStatusError.

    Raises:
        AuthenticationError: On HTTP 401.
        RPCProtocolError: On a non-200 status with an RPC error object.
        HTTPStatusError: On any other non-200 status.
    """
    status = response.status_code
    if status == 200:
        return
    if status == 401:
        raise AuthenticationError("Invalid credentials")

    text = response.text[:MAX_ERROR_BODY_SIZE]
    detail: Any = text
    if response.content_type == "application/json":
        try:
            body = json.loads(response.text)
        except json.JSONDecodeError:
            body = None
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            try:
                parsed = _decode_error(body, error)
            except MalformedResponseError:
                parsed = None
            if parsed is not None:
                raise RPCProtocolError(
                    parsed.code, parsed.message, data=parsed.data, http_status=status
                )
        if error:
            detail = error if isinstance(error, str) else json.dumps(error)

    logger.debug("RPC HTTP %d: %s", status, str(detail)[:200])
    raise HTTPStatusError(status, detail or f"HTTP {status}")
