"""
MCP Protocol message schemas and data structures.

Defines the JSON-RPC 2.0 message formats for the Model Context Protocol,
the closed error-code enumeration, and the typed parameter models each
method decodes its ``params`` into.
"""

from enum import IntEnum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr

JSONRPC_VERSION = "2.0"

RequestId = Union[StrictInt, StrictStr, StrictFloat]
RequestIdValue = Union[int, float, str]


class ErrorCode(IntEnum):
    """JSON-RPC and MCP error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # MCP-specific
    MCP_ERROR = -32000
    TOOL_EXECUTION_ERROR = -32001
    RESOURCE_NOT_FOUND = -32002
    PROMPT_NOT_FOUND = -32003


class MCPError(Exception):
    """Base exception for MCP protocol errors."""

    def __init__(
        self,
        message: str,
        code: int = ErrorCode.MCP_ERROR,
        data: Optional[Any] = None,
        request_id: Optional[RequestIdValue] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = int(code)
        self.data = data
        self.request_id = request_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to JSON-RPC error format."""
        error_dict: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            error_dict["data"] = self.data
        return error_dict


class ParseError(MCPError):
    """Frame was not valid UTF-8 JSON."""

    def __init__(self, message: str = "Parse error"):
        super().__init__(message, code=ErrorCode.PARSE_ERROR)


class InvalidRequestError(MCPError):
    """Frame was JSON but not a usable JSON-RPC envelope."""

    def __init__(self, message: str, request_id: Optional[RequestIdValue] = None):
        super().__init__(message, code=ErrorCode.INVALID_REQUEST, request_id=request_id)


class MCPValidationError(MCPError):
    """Error for invalid request parameters."""

    def __init__(
        self,
        message: str,
        data: Optional[Any] = None,
        request_id: Optional[RequestIdValue] = None,
    ):
        super().__init__(message, code=ErrorCode.INVALID_PARAMS, data=data, request_id=request_id)


class MCPMethodNotFoundError(MCPError):
    """Error for unknown method calls."""

    def __init__(self, method: str):
        super().__init__(f"Unknown method: {method}", code=ErrorCode.METHOD_NOT_FOUND)


class MCPInternalError(MCPError):
    """Error for internal server issues."""

    def __init__(self, message: str, data: Optional[Any] = None):
        super().__init__(message, code=ErrorCode.INTERNAL_ERROR, data=data)


class NotInitializedError(MCPError):
    """Method called before a successful initialize."""

    def __init__(self):
        super().__init__("Server not initialized", code=ErrorCode.MCP_ERROR)


class MCPToolExecutionError(MCPError):
    """Tool collaborator produced something that is not a tool result."""

    def __init__(self, message: str, data: Optional[Any] = None):
        super().__init__(message, code=ErrorCode.TOOL_EXECUTION_ERROR, data=data)


class ResourceNotFoundError(MCPError):
    """Unknown resource URI or missing record."""

    def __init__(self, message: str):
        super().__init__(message, code=ErrorCode.RESOURCE_NOT_FOUND)


class PromptNotFoundError(MCPError):
    """Unknown prompt name."""

    def __init__(self, name: str):
        super().__init__(f"Unknown prompt: {name}", code=ErrorCode.PROMPT_NOT_FOUND)


# Envelopes
class MCPMessage(BaseModel):
    """Base class for all MCP messages."""

    jsonrpc: str = Field(default=JSONRPC_VERSION, description="JSON-RPC version")

    model_config = ConfigDict(extra="ignore")

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: top-level fields holding None are left out."""
        return {key: value for key, value in self.model_dump().items() if value is not None}


class MCPRequest(MCPMessage):
    """Request expecting exactly one response."""

    id: RequestId = Field(description="Request ID")
    method: str = Field(description="Method name")
    params: Optional[Dict[str, Any]] = Field(default=None, description="Method parameters")


class MCPNotification(MCPMessage):
    """Notification; never answered."""

    method: str = Field(description="Method name")
    params: Optional[Dict[str, Any]] = Field(default=None, description="Method parameters")


class ErrorObject(BaseModel):
    """JSON-RPC error member."""

    code: int
    message: str
    data: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        error_dict: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error_dict["data"] = self.data
        return error_dict


class MCPResponse(MCPMessage):
    """Response carrying either a result or an error."""

    id: Optional[RequestId] = Field(default=None, description="Request ID")
    result: Optional[Dict[str, Any]] = Field(default=None, description="Response result")
    error: Optional[ErrorObject] = Field(default=None, description="Error information")

    @classmethod
    def success(cls, request_id: Optional[RequestIdValue], result: Dict[str, Any]) -> "MCPResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Optional[RequestIdValue], error: MCPError) -> "MCPResponse":
        return cls(
            id=request_id,
            error=ErrorObject(code=error.code, message=error.message, data=error.data),
        )

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-RPC 2.0: a response has either result or error, never both."""
        message: Dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.id is not None:
            message["id"] = self.id
        if self.error is not None:
            message["error"] = self.error.to_dict()
        else:
            message["result"] = self.result if self.result is not None else {}
        return message


# Client and server info
class ClientInfo(BaseModel):
    """Information about the MCP client."""

    name: str = Field(default="", description="Client name")
    version: str = Field(default="", description="Client version")

    model_config = ConfigDict(extra="allow")


class ServerInfo(BaseModel):
    """Information about the MCP server."""

    name: str = Field(default="Skatteverket MCP Server", description="Server name")
    version: str = Field(default="1.0.0", description="Server version")


# Tool structures
class ToolParameter(BaseModel):
    """Tool parameter definition."""

    type: str = Field(description="Parameter type")
    description: Optional[str] = Field(default=None, description="Parameter description")
    enum: Optional[List[str]] = Field(default=None, description="Allowed values")


class ToolSchema(BaseModel):
    """Tool input schema definition."""

    type: str = Field(default="object", description="Schema type")
    properties: Dict[str, ToolParameter] = Field(default_factory=dict)
    required: Optional[List[str]] = Field(default=None, description="Required parameters")


class Tool(BaseModel):
    """Tool definition."""

    name: str = Field(description="Tool name")
    description: str = Field(description="Tool description")
    inputSchema: ToolSchema = Field(description="Tool input schema")


# Resource structures
class Resource(BaseModel):
    """Resource listing entry."""

    uri: str
    name: str
    description: Optional[str] = None
    mimeType: Optional[str] = None


class ResourceContent(BaseModel):
    """Content of a read resource."""

    uri: str
    mimeType: str = "application/json"
    text: Optional[str] = None
    blob: Optional[str] = None


# Prompt structures
class PromptArgument(BaseModel):
    """Prompt argument definition."""

    name: str
    description: Optional[str] = None
    required: bool = False


class Prompt(BaseModel):
    """Prompt definition."""

    name: str
    description: Optional[str] = None
    arguments: Optional[List[PromptArgument]] = None


class TextContent(BaseModel):
    """Text content block."""

    type: str = "text"
    text: str


class PromptMessage(BaseModel):
    """One message of a rendered prompt."""

    role: str
    content: TextContent


# Typed method parameters
class InitializeParams(BaseModel):
    """Parameters of ``initialize``; accepted but not used to alter behavior."""

    protocolVersion: Optional[str] = None
    capabilities: Dict[str, Any] = Field(default_factory=dict)
    clientInfo: Optional[ClientInfo] = None

    model_config = ConfigDict(extra="allow")


class CallToolParams(BaseModel):
    """Parameters of ``tools/call``."""

    name: StrictStr = Field(min_length=1)
    arguments: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="allow")


class ReadResourceParams(BaseModel):
    """Parameters of ``resources/read``."""

    uri: StrictStr = Field(min_length=1)

    model_config = ConfigDict(extra="allow")


class GetPromptParams(BaseModel):
    """Parameters of ``prompts/get``."""

    name: StrictStr = Field(min_length=1)
    arguments: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="allow")
