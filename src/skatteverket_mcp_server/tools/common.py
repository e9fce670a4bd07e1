"""
Shared pieces of the Skatteverket tools: argument models and the base
class that maps client failures onto tool errors.
"""

from abc import abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from ..client.skatteverket_client import SkatteverketClient, SkatteverketClientError
from .base import BaseTool, ToolExecutionError, ToolResult

REDOVISARE_DESCRIPTION = "The tax reporter ID (personnummer/organisationsnummer)"
PERIOD_DESCRIPTION = "The reporting period (e.g., '2024-01' for January 2024)"


class DraftKeyArguments(BaseModel):
    """Reporter and period identifying one declaration."""

    redovisare: StrictStr = Field(min_length=1)
    period: StrictStr = Field(min_length=1)

    model_config = ConfigDict(extra="ignore")


class CreateDraftArguments(DraftKeyArguments):
    momsinkomst: Optional[float] = None
    utgaendeMoms: Optional[float] = None
    ingaendeMoms: Optional[float] = None


class SkatteverketTool(BaseTool):
    """A tool backed by the Skatteverket API client."""

    def __init__(self, client: SkatteverketClient, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            client: Skatteverket API client
            config: Tool configuration
        """
        super().__init__(config)
        self.client = client

    def _key_parameters(self, short: bool = False) -> Dict[str, Any]:
        return {
            "redovisare": self._create_parameter(
                "string", "The tax reporter ID" if short else REDOVISARE_DESCRIPTION
            ),
            "period": self._create_parameter(
                "string", "The reporting period" if short else PERIOD_DESCRIPTION
            ),
        }

    async def execute(self, arguments: Any) -> ToolResult:
        try:
            return await self.run(arguments)
        except SkatteverketClientError as e:
            raise ToolExecutionError(e.message, details={"status": e.status})

    @abstractmethod
    async def run(self, arguments: Any) -> ToolResult:
        """Perform the API call and shape its result."""
        pass
