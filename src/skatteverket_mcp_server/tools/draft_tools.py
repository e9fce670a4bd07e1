"""
VAT draft tools.

Listing, reading, creating, deleting, checking, locking and unlocking
VAT declaration drafts (momsdeklarationsutkast).
"""

from ..client.models import VatDraftRequest
from ..protocol.schemas import Tool
from .base import ToolResult
from .common import CreateDraftArguments, DraftKeyArguments, SkatteverketTool


class GetVatDraftsTool(SkatteverketTool):
    """List every draft visible to the authenticated user."""

    name = "get_vat_drafts"
    description = "Retrieve all VAT declaration drafts for the authenticated user"

    def get_schema(self) -> Tool:
        return self._create_schema(parameters={})

    async def run(self, arguments) -> ToolResult:
        drafts = await self.client.get_drafts()
        return ToolResult.data(f"Retrieved {drafts.total} VAT drafts:", drafts.to_wire())


class GetVatDraftTool(SkatteverketTool):
    name = "get_vat_draft"
    description = "Get a specific VAT declaration draft by redovisare (reporter ID) and period"
    arguments_model = DraftKeyArguments

    def get_schema(self) -> Tool:
        return self._create_schema(
            parameters=self._key_parameters(),
            required=["redovisare", "period"],
        )

    async def run(self, arguments: DraftKeyArguments) -> ToolResult:
        key = f"{arguments.redovisare}/{arguments.period}"
        draft = await self.client.get_draft(arguments.redovisare, arguments.period)
        if draft is None:
            return ToolResult.success(f"No draft found for {key}")
        return ToolResult.data(f"VAT draft for {key}:", draft.to_wire())


class CreateVatDraftTool(SkatteverketTool):
    """
    Create or update a draft.

    Amounts that are left out are sent as absent, so the API keeps (or
    computes) its own values for them.
    """

    name = "create_vat_draft"
    description = "Create or update a VAT declaration draft with financial data"
    arguments_model = CreateDraftArguments

    def get_schema(self) -> Tool:
        parameters = self._key_parameters()
        parameters.update(
            {
                "momsinkomst": self._create_parameter("number", "VAT income amount (optional)"),
                "utgaendeMoms": self._create_parameter(
                    "number", "Outgoing VAT amount (optional)"
                ),
                "ingaendeMoms": self._create_parameter(
                    "number", "Incoming VAT amount (optional)"
                ),
            }
        )
        return self._create_schema(parameters=parameters, required=["redovisare", "period"])

    async def run(self, arguments: CreateDraftArguments) -> ToolResult:
        request = VatDraftRequest(
            momsinkomst=arguments.momsinkomst,
            utgaendeMoms=arguments.utgaendeMoms,
            ingaendeMoms=arguments.ingaendeMoms,
        )
        draft = await self.client.create_or_update_draft(
            arguments.redovisare, arguments.period, request
        )
        return ToolResult.data("Successfully created/updated VAT draft:", draft.to_wire())


class DeleteVatDraftTool(SkatteverketTool):
    name = "delete_vat_draft"
    description = "Delete a VAT declaration draft"
    arguments_model = DraftKeyArguments

    def get_schema(self) -> Tool:
        return self._create_schema(
            parameters=self._key_parameters(short=True),
            required=["redovisare", "period"],
        )

    async def run(self, arguments: DraftKeyArguments) -> ToolResult:
        key = f"{arguments.redovisare}/{arguments.period}"
        deleted = await self.client.delete_draft(arguments.redovisare, arguments.period)
        if deleted:
            return ToolResult.success(f"Successfully deleted VAT draft for {key}")
        return ToolResult.success(f"No draft found for {key}")


class ValidateVatDraftTool(SkatteverketTool):
    name = "validate_vat_draft"
    description = "Validate a VAT declaration draft and check for errors"
    arguments_model = DraftKeyArguments

    def get_schema(self) -> Tool:
        return self._create_schema(
            parameters=self._key_parameters(short=True),
            required=["redovisare", "period"],
        )

    async def run(self, arguments: DraftKeyArguments) -> ToolResult:
        key = f"{arguments.redovisare}/{arguments.period}"
        validation = await self.client.validate_draft(arguments.redovisare, arguments.period)
        return ToolResult.data(f"Validation result for {key}:", validation.to_wire())


class LockVatDraftTool(SkatteverketTool):
    name = "lock_vat_draft"
    description = "Lock a VAT draft for signing (prevents further modifications)"
    arguments_model = DraftKeyArguments

    def get_schema(self) -> Tool:
        return self._create_schema(
            parameters=self._key_parameters(short=True),
            required=["redovisare", "period"],
        )

    async def run(self, arguments: DraftKeyArguments) -> ToolResult:
        await self.client.lock_draft(arguments.redovisare, arguments.period)
        return ToolResult.success(
            f"Successfully locked VAT draft for {arguments.redovisare}/{arguments.period}"
        )


class UnlockVatDraftTool(SkatteverketTool):
    name = "unlock_vat_draft"
    description = "Unlock a VAT draft to allow modifications"
    arguments_model = DraftKeyArguments

    def get_schema(self) -> Tool:
        return self._create_schema(
            parameters=self._key_parameters(short=True),
            required=["redovisare", "period"],
        )

    async def run(self, arguments: DraftKeyArguments) -> ToolResult:
        await self.client.unlock_draft(arguments.redovisare, arguments.period)
        return ToolResult.success(
            f"Successfully unlocked VAT draft for {arguments.redovisare}/{arguments.period}"
        )


DRAFT_TOOLS = (
    GetVatDraftsTool,
    GetVatDraftTool,
    CreateVatDraftTool,
    DeleteVatDraftTool,
    ValidateVatDraftTool,
    LockVatDraftTool,
    UnlockVatDraftTool,
)
