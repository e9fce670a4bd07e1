"""
Base classes for MCP tools.

Provides common functionality and interfaces for all Skatteverket tools,
including argument validation, error handling, and result formatting.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

import structlog
from pydantic import BaseModel, ValidationError

from ..protocol.schemas import Tool, ToolSchema

logger = structlog.get_logger(__name__)


class ToolError(Exception):
    """Base exception for tool execution errors."""

    def __init__(
        self, message: str, code: str = "tool_error", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ToolValidationError(ToolError):
    """Error for invalid tool arguments."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="validation_error", details=details)


class ToolExecutionError(ToolError):
    """Error during tool execution."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="execution_error", details=details)


def render_json(payload: Any) -> str:
    """Pretty-print a payload for inclusion in text content."""
    return json.dumps(payload, indent=2, ensure_ascii=False)


class ToolResult:
    """Standardized tool result format."""

    def __init__(self, content: List[Dict[str, Any]], is_error: bool = False):
        self.content = content
        self.is_error = is_error

    @classmethod
    def success(cls, text: str) -> "ToolResult":
        """Create a successful result with text content."""
        return cls(content=[{"type": "text", "text": text}], is_error=False)

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        """Create an error result."""
        return cls(content=[{"type": "text", "text": f"Error: {message}"}], is_error=True)

    @classmethod
    def data(cls, description: str, payload: Any) -> "ToolResult":
        """Create a result whose text is a heading line followed by indented JSON."""
        return cls.success(f"{description}\n{render_json(payload)}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format for MCP response."""
        return {
            "content": self.content,
            "isError": self.is_error,
        }


class NoArguments(BaseModel):
    """Argument model for tools that take none; extra keys are ignored."""


class BaseTool(ABC):
    """
    Base class for all MCP tools.

    Subclasses set ``name``, ``description`` and ``arguments_model`` (a
    pydantic model the raw arguments are validated into) and implement
    ``get_schema`` and ``execute``.
    """

    name: str = ""
    description: str = ""
    arguments_model: Type[BaseModel] = NoArguments

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize tool with configuration.

        Args:
            config: Tool-specific configuration
        """
        self.config = config or {}
        self._setup_logging()

    def _setup_logging(self) -> None:
        """Set up tool-specific logging."""
        self.logger = logger.bind(tool=self.name)

    @abstractmethod
    def get_schema(self) -> Tool:
        """
        Get the tool schema definition.

        Returns:
            Tool schema for MCP protocol
        """
        pass

    @abstractmethod
    async def execute(self, arguments: Any) -> ToolResult:
        """
        Execute the tool with validated arguments.

        Args:
            arguments: Instance of ``arguments_model``

        Returns:
            Tool execution result

        Raises:
            ToolError: If execution fails
        """
        pass

    async def __call__(self, arguments: Dict[str, Any]) -> ToolResult:
        """
        Validate, execute and shape the outcome.

        Every failure comes back as an error result rather than an
        exception.

        Args:
            arguments: Raw tool arguments from ``tools/call``

        Returns:
            Tool result
        """
        try:
            self.logger.info("Executing tool", arguments=arguments)

            validated = self._validate_arguments(arguments)
            result = await self.execute(validated)

            self.logger.info("Tool execution completed", success=not result.is_error)
            return result

        except ToolError as e:
            self.logger.warning(
                "Tool execution failed",
                error_code=e.code,
                error_message=e.message,
                details=e.details,
            )
            return ToolResult.error(e.message)

        except Exception as e:
            self.logger.error("Unexpected tool error", error=str(e), exc_info=True)
            return ToolResult.error(str(e) or type(e).__name__)

    def _validate_arguments(self, arguments: Dict[str, Any]) -> Any:
        """
        Validate tool arguments against ``arguments_model``.

        Raises:
            ToolValidationError: If validation fails
        """
        try:
            return self.arguments_model.model_validate(arguments or {})
        except ValidationError as e:
            first = e.errors()[0]
            param = ".".join(str(part) for part in first["loc"])
            if first["type"] == "missing":
                message = f"Missing required argument: {param}"
            else:
                message = f"Invalid argument '{param}': {first['msg']}"
            raise ToolValidationError(message, details={"parameter": param})

    def _create_parameter(
        self,
        param_type: str,
        description: str,
        enum: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Helper to create JSON Schema parameter definitions."""
        param: Dict[str, Any] = {
            "type": param_type,
            "description": description,
        }
        if enum is not None:
            param["enum"] = enum
        return param

    def _create_schema(
        self,
        parameters: Dict[str, Any],
        required: Optional[List[str]] = None,
    ) -> Tool:
        """Helper to create tool schema with proper JSON Schema format."""
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=ToolSchema(
                type="object",
                properties=parameters,
                required=required or None,
            ),
        )
