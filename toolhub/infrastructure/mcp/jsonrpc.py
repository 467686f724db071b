"""
JSON-RPC 2.0 envelopes used by every MCP transport.

Requests carry a fresh unique id; notifications carry none. Incoming bytes are
classified by :func:`parse_envelope`, which never raises: anything that is not
a well-formed envelope comes back as ``EnvelopeKind.MALFORMED``.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

RequestId = Union[str, int]


def new_request_id() -> str:
    return uuid.uuid4().hex


@dataclass
class JsonRpcRequest:
    """JSON-RPC 2.0 request."""

    method: str
    params: Optional[dict[str, Any]] = None
    id: RequestId = field(default_factory=new_request_id)

    def to_dict(self) -> dict[str, Any]:
        message: dict[str, Any] = {
            "jsonrpc": JSONRPC_VERSION,
            "id": self.id,
            "method": self.method,
        }
        if self.params is not None:
            message["params"] = self.params
        return message

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


@dataclass
class JsonRpcNotification:
    """JSON-RPC 2.0 notification (no id, no response expected)."""

    method: str
    params: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        message: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": self.method}
        if self.params is not None:
            message["params"] = self.params
        return message

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


class EnvelopeKind(Enum):
    REQUEST = "request"
    RESPONSE = "response"
    ERROR = "error"
    NOTIFICATION = "notification"
    MALFORMED = "malformed"


@dataclass
class Envelope:
    """A parsed incoming message."""

    kind: EnvelopeKind
    id: Optional[RequestId] = None
    method: Optional[str] = None
    params: Optional[dict[str, Any]] = None
    result: Any = None
    error_code: Optional[int] = None
    error_message: Optional[str] = None
    raw: Any = None

    @property
    def is_malformed(self) -> bool:
        return self.kind is EnvelopeKind.MALFORMED


def build_request(method: str, params: Optional[dict[str, Any]] = None) -> JsonRpcRequest:
    return JsonRpcRequest(method=method, params=params)


def build_notification(
    method: str, params: Optional[dict[str, Any]] = None
) -> JsonRpcNotification:
    return JsonRpcNotification(method=method, params=params)


def build_response(request_id: Optional[RequestId], result: Any) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def build_error(request_id: Optional[RequestId], code: int, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {"code": code, "message": message},
    }


def _malformed(raw: Any, reason: str) -> Envelope:
    logger.warning("Dropping malformed JSON-RPC message (%s): %.200r", reason, raw)
    return Envelope(kind=EnvelopeKind.MALFORMED, raw=raw)


def classify(message: Any) -> Envelope:
    """Classify an already-decoded JSON value."""
    if not isinstance(message, dict):
        return _malformed(message, "not an object")

    request_id = message.get("id")
    if request_id is not None and (
        isinstance(request_id, bool) or not isinstance(request_id, (str, int, float))
    ):
        return _malformed(message, "invalid id")

    method = message.get("method")
    params = message.get("params")
    if params is not None and not isinstance(params, dict):
        params = None

    if method is not None:
        if not isinstance(method, str):
            return _malformed(message, "method is not a string")
        kind = EnvelopeKind.NOTIFICATION if request_id is None else EnvelopeKind.REQUEST
        return Envelope(kind=kind, id=request_id, method=method, params=params, raw=message)

    if "error" in message:
        error = message["error"]
        if isinstance(error, dict):
            code = error.get("code")
            text = error.get("message")
        else:
            code, text = None, None
        return Envelope(
            kind=EnvelopeKind.ERROR,
            id=request_id,
            error_code=code if isinstance(code, int) else INTERNAL_ERROR,
            error_message=text if isinstance(text, str) else "Unknown RPC error",
            raw=message,
        )

    if request_id is not None:
        # A response with neither result nor error resolves to an empty result
        return Envelope(
            kind=EnvelopeKind.RESPONSE,
            id=request_id,
            result=message.get("result", {}),
            raw=message,
        )

    return _malformed(message, "no id, method, result or error")


def parse_envelope(data: Union[str, bytes]) -> Envelope:
    """Decode one JSON document and classify it."""
    try:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        message = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        return _malformed(data, f"invalid JSON: {e}")
    return classify(message)


def encode_line(message: Union[JsonRpcRequest, JsonRpcNotification, dict[str, Any]]) -> bytes:
    """Frame a message as one UTF-8 line for the stdio transport."""
    if isinstance(message, dict):
        text = json.dumps(message, separators=(",", ":"))
    else:
        text = message.to_json()
    return (text + "\n").encode("utf-8")
