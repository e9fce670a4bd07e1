"""
Submission, decision and health tools.

Read-only views of submitted declarations (inlamnat), tax decisions
(beslutat) and API health.
"""

from ..protocol.schemas import Tool
from .base import ToolResult
from .common import DraftKeyArguments, SkatteverketTool


class GetVatSubmissionsTool(SkatteverketTool):
    name = "get_vat_submissions"
    description = "Retrieve all submitted VAT declarations for the authenticated user"

    def get_schema(self) -> Tool:
        return self._create_schema(parameters={})

    async def run(self, arguments) -> ToolResult:
        submissions = await self.client.get_submissions()
        return ToolResult.data(
            f"Retrieved {submissions.total} VAT submissions:", submissions.to_wire()
        )


class GetVatSubmissionTool(SkatteverketTool):
    name = "get_vat_submission"
    description = "Get a specific submitted VAT declaration by redovisare and period"
    arguments_model = DraftKeyArguments

    def get_schema(self) -> Tool:
        return self._create_schema(
            parameters=self._key_parameters(short=True),
            required=["redovisare", "period"],
        )

    async def run(self, arguments: DraftKeyArguments) -> ToolResult:
        key = f"{arguments.redovisare}/{arguments.period}"
        submission = await self.client.get_submission(arguments.redovisare, arguments.period)
        if submission is None:
            return ToolResult.success(f"No submission found for {key}")
        return ToolResult.data(f"VAT submission for {key}:", submission.to_wire())


class GetVatDecisionsTool(SkatteverketTool):
    name = "get_vat_decisions"
    description = "Retrieve all tax decisions for the authenticated user"

    def get_schema(self) -> Tool:
        return self._create_schema(parameters={})

    async def run(self, arguments) -> ToolResult:
        decisions = await self.client.get_decisions()
        return ToolResult.data(f"Retrieved {decisions.total} VAT decisions:", decisions.to_wire())


class GetVatDecisionTool(SkatteverketTool):
    name = "get_vat_decision"
    description = "Get a specific tax decision by redovisare and period"
    arguments_model = DraftKeyArguments

    def get_schema(self) -> Tool:
        return self._create_schema(
            parameters=self._key_parameters(short=True),
            required=["redovisare", "period"],
        )

    async def run(self, arguments: DraftKeyArguments) -> ToolResult:
        key = f"{arguments.redovisare}/{arguments.period}"
        decision = await self.client.get_decision(arguments.redovisare, arguments.period)
        if decision is None:
            return ToolResult.success(f"No decision found for {key}")
        return ToolResult.data(f"VAT decision for {key}:", decision.to_wire())


class HealthCheckTool(SkatteverketTool):
    """Ping the API and report what it answered."""

    name = "health_check"
    description = "Check connectivity and health status of Skatteverket API"

    def get_schema(self) -> Tool:
        return self._create_schema(parameters={})

    async def run(self, arguments) -> ToolResult:
        health = await self.client.ping()
        return ToolResult.data("Health check result:", health.to_wire())


SUBMISSION_TOOLS = (
    GetVatSubmissionsTool,
    GetVatSubmissionTool,
    GetVatDecisionsTool,
    GetVatDecisionTool,
    HealthCheckTool,
)
