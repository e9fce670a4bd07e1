"""MCP protocol engine: framing, envelope codec, dispatch and transport."""

from .capabilities import PROTOCOL_VERSION, CapabilityNegotiator
from .codec import decode_frame, encode_message
from .framing import FramingError, LineFramer
from .handlers import MCPDispatcher, MethodSpec
from .schemas import ErrorCode, MCPError, MCPNotification, MCPRequest, MCPResponse
from .session import ServerSession, SessionState
from .transport import StdioTransport, TransportError

__all__ = [
    "PROTOCOL_VERSION",
    "CapabilityNegotiator",
    "decode_frame",
    "encode_message",
    "FramingError",
    "LineFramer",
    "MCPDispatcher",
    "MethodSpec",
    "ErrorCode",
    "MCPError",
    "MCPNotification",
    "MCPRequest",
    "MCPResponse",
    "ServerSession",
    "SessionState",
    "StdioTransport",
    "TransportError",
]
