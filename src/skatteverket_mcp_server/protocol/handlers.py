"""
MCP Protocol message handlers.

Implements the dispatcher: the initialize state machine, method routing
through a fixed method table, and the mapping of handler outcomes onto
JSON-RPC success and error responses.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    Type,
    TypeVar,
    Union,
    runtime_checkable,
)

import structlog
from pydantic import BaseModel, ValidationError

from .capabilities import CapabilityNegotiator
from .schemas import (
    CallToolParams,
    ErrorCode,
    GetPromptParams,
    InitializeParams,
    MCPError,
    MCPInternalError,
    MCPMethodNotFoundError,
    MCPNotification,
    MCPRequest,
    MCPResponse,
    MCPToolExecutionError,
    MCPValidationError,
    NotInitializedError,
    ReadResourceParams,
)
from .session import ServerSession

logger = structlog.get_logger(__name__)

ParamsT = TypeVar("ParamsT", bound=BaseModel)
MethodHandler = Callable[[Optional[Dict[str, Any]]], Awaitable[Dict[str, Any]]]


@runtime_checkable
class ToolCallResult(Protocol):
    """What a tool hands back from ``tools/call``."""

    content: List[Dict[str, Any]]
    is_error: bool

    def to_dict(self) -> Dict[str, Any]: ...


@dataclass(frozen=True)
class MethodSpec:
    """Entry of the method table."""

    handler: MethodHandler
    requires_initialization: bool = True


class MCPDispatcher:
    """
    Routes decoded envelopes to method handlers.

    The method table is built once here and exposed read-only. Session
    state is passed in rather than owned, so the state machine can be
    driven directly in tests.
    """

    def __init__(
        self,
        session: ServerSession,
        negotiator: CapabilityNegotiator,
        tools: Any,
        resources: Any,
        prompts: Any,
    ):
        """
        Initialize the dispatcher.

        Args:
            session: Shared handshake state
            negotiator: Builds the initialize result
            tools: Flat tool table (``definitions()`` / ``get(name)``)
            resources: Resource collaborator (``list_resources()`` / ``read_resource(uri)``)
            prompts: Prompt collaborator (``list_prompts()`` / ``get_prompt(name, arguments)``)
        """
        self.session = session
        self.negotiator = negotiator
        self.tools = tools
        self.resources = resources
        self.prompts = prompts

        self._methods = MappingProxyType(
            {
                "initialize": MethodSpec(self._handle_initialize, requires_initialization=False),
                "initialized": MethodSpec(self._handle_initialized, requires_initialization=False),
                "ping": MethodSpec(self._handle_ping, requires_initialization=False),
                "tools/list": MethodSpec(self._handle_list_tools),
                "tools/call": MethodSpec(self._handle_call_tool),
                "resources/list": MethodSpec(self._handle_list_resources),
                "resources/read": MethodSpec(self._handle_read_resource),
                "prompts/list": MethodSpec(self._handle_list_prompts),
                "prompts/get": MethodSpec(self._handle_get_prompt),
            }
        )

    @property
    def methods(self) -> "MappingProxyType[str, MethodSpec]":
        return self._methods

    async def dispatch(self, envelope: Union[MCPRequest, MCPNotification]) -> MCPResponse:
        """
        Handle one request or notification.

        Always returns a response object; the transport decides whether it
        goes on the wire (it never does for notifications).

        Args:
            envelope: Decoded request or notification

        Returns:
            Success or error response carrying the request id
        """
        request_id = envelope.id if isinstance(envelope, MCPRequest) else None

        logger.debug(
            "Handling message",
            method=envelope.method,
            request_id=request_id,
        )

        try:
            spec = self._methods.get(envelope.method)
            if spec is None:
                raise MCPMethodNotFoundError(envelope.method)

            if spec.requires_initialization and not self.session.initialized:
                raise NotInitializedError()

            result = await spec.handler(envelope.params)
            return MCPResponse.success(request_id, result)

        except MCPError as e:
            logger.warning(
                "MCP error handling message",
                method=envelope.method,
                request_id=request_id,
                error_code=e.code,
                error_message=e.message,
            )
            return MCPResponse.failure(request_id, e)

        except Exception as e:
            logger.error(
                "Unexpected error handling message",
                method=envelope.method,
                request_id=request_id,
                error=str(e),
                exc_info=True,
            )
            return MCPResponse.failure(request_id, MCPInternalError(str(e)))

    # Parameter decoding

    @staticmethod
    def _decode_params(model: Type[ParamsT], params: Optional[Dict[str, Any]]) -> ParamsT:
        """Validate raw params into a typed model; every failure is InvalidParams."""
        try:
            return model.model_validate(params or {})
        except ValidationError as e:
            problems = [
                f"{'.'.join(str(part) for part in error['loc']) or 'params'}: {error['msg']}"
                for error in e.errors()
            ]
            raise MCPValidationError(
                f"Invalid params: {'; '.join(problems)}",
                data={"errors": problems},
            )

    # Lifecycle

    async def _handle_initialize(self, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        try:
            init_params = self._decode_params(InitializeParams, params)
        except MCPValidationError as e:
            # Client details are informational only
            logger.warning("Ignoring malformed initialize params", error=e.message)
            init_params = InitializeParams()

        logger.info(
            "Initializing MCP session",
            protocol_version=init_params.protocolVersion,
            client_info=init_params.clientInfo.model_dump() if init_params.clientInfo else None,
            reinitialize=self.session.initialized,
        )

        result = self.negotiator.negotiate(init_params)
        self.session.mark_initialized(
            client_info=init_params.clientInfo,
            client_capabilities=init_params.capabilities,
            client_protocol_version=init_params.protocolVersion,
        )
        return result

    async def _handle_initialized(self, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        logger.info("Client initialization complete")
        return {}

    async def _handle_ping(self, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        return {}

    # Tools

    async def _handle_list_tools(self, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        definitions = self.tools.definitions()
        logger.info("Listing tools", tool_count=len(definitions))
        return {"tools": [tool.model_dump(exclude_none=True) for tool in definitions]}

    async def _handle_call_tool(self, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        call = self._decode_params(CallToolParams, params)

        tool = self.tools.get(call.name)
        if tool is None:
            raise MCPError(f"Unknown tool: {call.name}", code=ErrorCode.METHOD_NOT_FOUND)

        logger.info("Calling tool", tool_name=call.name)
        result = await tool(call.arguments or {})

        if not isinstance(result, ToolCallResult):
            raise MCPToolExecutionError(
                f"Tool {call.name} returned {type(result).__name__}, expected a tool result"
            )

        logger.info(
            "Tool execution completed",
            tool_name=call.name,
            success=not result.is_error,
        )
        return result.to_dict()

    # Resources

    async def _handle_list_resources(self, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        resources = await self.resources.list_resources()
        return {"resources": [resource.model_dump(exclude_none=True) for resource in resources]}

    async def _handle_read_resource(self, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        read = self._decode_params(ReadResourceParams, params)
        content = await self.resources.read_resource(read.uri)
        return {"contents": [content.model_dump(exclude_none=True)]}

    # Prompts

    async def _handle_list_prompts(self, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        prompts = self.prompts.list_prompts()
        return {"prompts": [prompt.model_dump(exclude_none=True) for prompt in prompts]}

    async def _handle_get_prompt(self, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        get = self._decode_params(GetPromptParams, params)
        messages = self.prompts.get_prompt(get.name, get.arguments or {})
        return {"messages": [message.model_dump() for message in messages]}
