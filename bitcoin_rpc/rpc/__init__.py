"""JSON-RPC protocol support for talking to a Bitcoin node.

Envelope construction and normalization live in protocol, credential
handling in auth, and the HTTP round trip in transport.

Example usage:
    request = build_request("getblockcount")
    body = serialize_request(request)
    # ... POST body to the node ...
    height = parse_response(response_text)
"""

from bitcoin_rpc.rpc.auth import (
    Credentials,
    basic_auth_header,
    read_cookie_file,
    resolve_credentials,
)
from bitcoin_rpc.rpc.protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    build_batch,
    build_request,
    check_http_status,
    classify_envelope,
    decode_envelope,
    make_request_id,
    parse_batch_response,
    parse_response,
    serialize_request,
    unwrap,
)
from bitcoin_rpc.rpc.types import (
    BatchCall,
    EnvelopeFormat,
    ErrorObject,
    HttpResponse,
    MethodName,
    Request,
    Response,
)

__all__ = [
    # Types
    "BatchCall",
    "EnvelopeFormat",
    "ErrorObject",
    "HttpResponse",
    "MethodName",
    "Request",
    "Response",
    # Credentials
    "Credentials",
    "basic_auth_header",
    "read_cookie_file",
    "resolve_credentials",
    # Request side
    "build_request",
    "build_batch",
    "make_request_id",
    "serialize_request",
    # Response side
    "classify_envelope",
    "decode_envelope",
    "unwrap",
    "parse_response",
    "parse_batch_response",
    "check_http_status",
    # Error codes
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
]
