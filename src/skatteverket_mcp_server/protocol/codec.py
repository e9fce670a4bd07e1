"""
JSON-RPC envelope codec.

Decodes a frame into a request, notification or response envelope and
encodes outgoing messages into compact UTF-8 JSON.
"""

import json
import math
from typing import Any, Dict, Optional, Union

from .schemas import (
    InvalidRequestError,
    MCPMessage,
    MCPNotification,
    MCPRequest,
    MCPResponse,
    MCPValidationError,
    ParseError,
    RequestIdValue,
)

Envelope = Union[MCPRequest, MCPNotification, MCPResponse]


def extract_request_id(message: Dict[str, Any]) -> Optional[RequestIdValue]:
    """
    Pull the request id out of a decoded message.

    Strings and finite numbers are ids; integral floats come back as
    ints. Anything else (absent, null, boolean, object, array, NaN or
    infinity) means there is no id.
    """
    raw_id = message.get("id")
    if isinstance(raw_id, bool):
        return None
    if isinstance(raw_id, (int, str)):
        return raw_id
    if isinstance(raw_id, float) and math.isfinite(raw_id):
        return int(raw_id) if raw_id.is_integer() else raw_id
    return None


def decode_frame(frame: bytes) -> Envelope:
    """
    Decode one frame into an envelope.

    Raises:
        ParseError: Frame is not UTF-8 JSON
        InvalidRequestError: JSON is not a JSON-RPC envelope
        MCPValidationError: ``params`` is present but not an object
    """
    try:
        message = json.loads(frame.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(f"Parse error: {e}")

    if not isinstance(message, dict):
        raise InvalidRequestError("Request must be a JSON object")

    request_id = extract_request_id(message)

    if "method" not in message:
        if request_id is not None and ("result" in message or "error" in message):
            return MCPResponse(
                id=request_id,
                result=message.get("result") if isinstance(message.get("result"), dict) else None,
            )
        raise InvalidRequestError("Missing method property", request_id=request_id)

    method = message["method"]
    if not isinstance(method, str) or not method:
        raise InvalidRequestError("Invalid method", request_id=request_id)

    params = message.get("params")
    if params is not None and not isinstance(params, dict):
        raise MCPValidationError("params must be an object", request_id=request_id)

    if request_id is None:
        return MCPNotification(method=method, params=params)
    return MCPRequest(id=request_id, method=method, params=params)


def encode_message(message: Union[MCPMessage, Dict[str, Any]]) -> bytes:
    """Serialize a message to compact UTF-8 JSON (no trailing newline)."""
    payload = message.to_dict() if isinstance(message, MCPMessage) else message
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
