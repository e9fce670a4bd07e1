"""
Flat tool table consulted by ``tools/list`` and ``tools/call``.
"""

from typing import Dict, Iterator, List, Optional

import structlog

from ..client.skatteverket_client import SkatteverketClient
from ..config.settings import ToolsConfig
from ..protocol.schemas import Tool
from .base import BaseTool
from .draft_tools import DRAFT_TOOLS
from .submission_tools import SUBMISSION_TOOLS

logger = structlog.get_logger(__name__)


class ToolRegistry:
    """Name to tool mapping; names are unique across all groups."""

    def __init__(self) -> None:
        self._tools: Dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """
        Add a tool.

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Duplicate tool name: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[BaseTool]:
        return self._tools.get(name)

    def definitions(self) -> List[Tool]:
        """Tool definitions in registration order."""
        return [tool.get_schema() for tool in self._tools.values()]

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


def build_tool_registry(
    client: SkatteverketClient, tools_config: Optional[ToolsConfig] = None
) -> ToolRegistry:
    """
    Instantiate the enabled tools against one client.

    Args:
        client: Shared Skatteverket API client
        tools_config: Group switches and individually disabled tools
    """
    tools_config = tools_config or ToolsConfig()
    registry = ToolRegistry()

    groups = []
    if tools_config.drafts_enabled:
        groups.extend(DRAFT_TOOLS)
    if tools_config.submissions_enabled:
        groups.extend(SUBMISSION_TOOLS)

    for tool_class in groups:
        if tool_class.name in tools_config.disabled_tools:
            logger.info("Tool disabled by configuration", tool=tool_class.name)
            continue
        registry.register(tool_class(client))

    logger.info("Tools registered", tool_count=len(registry), tools=registry.names())
    return registry
