"""
Skatteverket MCP tools implementation.

This module provides the tool implementations that expose the
Skatteverket VAT API through the MCP protocol.
"""

from .base import BaseTool, ToolError, ToolExecutionError, ToolResult, ToolValidationError
from .draft_tools import (
    CreateVatDraftTool,
    DeleteVatDraftTool,
    GetVatDraftsTool,
    GetVatDraftTool,
    LockVatDraftTool,
    UnlockVatDraftTool,
    ValidateVatDraftTool,
)
from .registry import ToolRegistry, build_tool_registry
from .submission_tools import (
    GetVatDecisionsTool,
    GetVatDecisionTool,
    GetVatSubmissionsTool,
    GetVatSubmissionTool,
    HealthCheckTool,
)

__all__ = [
    "BaseTool",
    "ToolError",
    "ToolExecutionError",
    "ToolResult",
    "ToolValidationError",
    "ToolRegistry",
    "build_tool_registry",
    "GetVatDraftsTool",
    "GetVatDraftTool",
    "CreateVatDraftTool",
    "DeleteVatDraftTool",
    "ValidateVatDraftTool",
    "LockVatDraftTool",
    "UnlockVatDraftTool",
    "GetVatSubmissionsTool",
    "GetVatSubmissionTool",
    "GetVatDecisionsTool",
    "GetVatDecisionTool",
    "HealthCheckTool",
]
