"""
Unit tests for MCP tools.
"""

import json

import pytest

from skatteverket_mcp_server.client.models import VatDraftRequest
from skatteverket_mcp_server.client.skatteverket_client import SkatteverketClientError
from skatteverket_mcp_server.config.settings import ToolsConfig
from skatteverket_mcp_server.tools.base import BaseTool, ToolResult
from skatteverket_mcp_server.tools.draft_tools import (
    CreateVatDraftTool,
    DeleteVatDraftTool,
    GetVatDraftsTool,
    GetVatDraftTool,
    LockVatDraftTool,
    UnlockVatDraftTool,
    ValidateVatDraftTool,
)
from skatteverket_mcp_server.tools.registry import ToolRegistry, build_tool_registry
from skatteverket_mcp_server.tools.submission_tools import (
    GetVatDecisionTool,
    GetVatSubmissionsTool,
    GetVatSubmissionTool,
    HealthCheckTool,
)

KEY = {"redovisare": "5567891234", "period": "2024-01"}


def text_of(result: ToolResult) -> str:
    assert len(result.content) == 1
    assert result.content[0]["type"] == "text"
    return result.content[0]["text"]


class TestToolResult:
    def test_success(self):
        assert ToolResult.success("done").to_dict() == {
            "content": [{"type": "text", "text": "done"}],
            "isError": False,
        }

    def test_error(self):
        result = ToolResult.error("nope")

        assert result.is_error
        assert text_of(result) == "Error: nope"

    def test_data_appends_indented_json(self):
        result = ToolResult.data("Heading:", {"a": 1})

        assert text_of(result) == 'Heading:\n{\n  "a": 1\n}'


class TestDraftTools:
    """Test the draft tool group."""

    async def test_get_vat_drafts(self, mock_client):
        result = await GetVatDraftsTool(mock_client)({})

        assert not result.is_error
        text = text_of(result)
        assert text.startswith("Retrieved 1 VAT drafts:\n")
        payload = json.loads(text.split("\n", 1)[1])
        assert payload["total"] == 1
        assert payload["drafts"][0]["utgaendeMoms"] == 25000
        assert "skapad" not in payload["drafts"][0]

    async def test_get_vat_draft(self, mock_client):
        result = await GetVatDraftTool(mock_client)(KEY)

        assert text_of(result).startswith("VAT draft for 5567891234/2024-01:\n")
        mock_client.get_draft.assert_awaited_once_with("5567891234", "2024-01")

    async def test_get_vat_draft_missing_is_not_an_error(self, mock_client):
        mock_client.get_draft.return_value = None

        result = await GetVatDraftTool(mock_client)(KEY)

        assert not result.is_error
        assert text_of(result) == "No draft found for 5567891234/2024-01"

    async def test_missing_required_argument(self, mock_client):
        result = await GetVatDraftTool(mock_client)({"redovisare": "5567891234"})

        assert result.is_error
        assert text_of(result) == "Error: Missing required argument: period"
        mock_client.get_draft.assert_not_called()

    async def test_wrong_argument_type(self, mock_client):
        result = await GetVatDraftTool(mock_client)({"redovisare": 5567891234, "period": "2024-01"})

        assert result.is_error
        assert text_of(result).startswith("Error: Invalid argument 'redovisare'")

    async def test_create_vat_draft(self, mock_client):
        result = await CreateVatDraftTool(mock_client)(
            {**KEY, "momsinkomst": 100000, "utgaendeMoms": 25000.5}
        )

        assert text_of(result).startswith("Successfully created/updated VAT draft:\n")
        redovisare, period, request = mock_client.create_or_update_draft.await_args.args
        assert (redovisare, period) == ("5567891234", "2024-01")
        assert isinstance(request, VatDraftRequest)
        assert request.to_wire() == {"momsinkomst": 100000.0, "utgaendeMoms": 25000.5}

    async def test_delete_vat_draft(self, mock_client):
        deleted = await DeleteVatDraftTool(mock_client)(KEY)
        mock_client.delete_draft.return_value = False
        missing = await DeleteVatDraftTool(mock_client)(KEY)

        assert text_of(deleted) == "Successfully deleted VAT draft for 5567891234/2024-01"
        assert text_of(missing) == "No draft found for 5567891234/2024-01"

    async def test_validate_vat_draft(self, mock_client):
        result = await ValidateVatDraftTool(mock_client)(KEY)

        assert text_of(result) == 'Validation result for 5567891234/2024-01:\n{\n  "valid": true\n}'

    async def test_lock_and_unlock(self, mock_client):
        locked = await LockVatDraftTool(mock_client)(KEY)
        unlocked = await UnlockVatDraftTool(mock_client)(KEY)

        assert text_of(locked) == "Successfully locked VAT draft for 5567891234/2024-01"
        assert text_of(unlocked) == "Successfully unlocked VAT draft for 5567891234/2024-01"

    async def test_client_failure_is_error_result(self, mock_client):
        mock_client.lock_draft.side_effect = SkatteverketClientError(
            "Failed to lock VAT draft for 5567891234/2024-01: HTTP 409: locked", status=409
        )

        result = await LockVatDraftTool(mock_client)(KEY)

        assert result.is_error
        assert text_of(result) == (
            "Error: Failed to lock VAT draft for 5567891234/2024-01: HTTP 409: locked"
        )

    async def test_unexpected_exception_is_error_result(self, mock_client):
        mock_client.get_drafts.side_effect = RuntimeError("socket gone")

        result = await GetVatDraftsTool(mock_client)({})

        assert result.is_error
        assert text_of(result) == "Error: socket gone"

    def test_schemas(self, mock_client):
        schema = CreateVatDraftTool(mock_client).get_schema()

        assert schema.name == "create_vat_draft"
        assert schema.inputSchema.required == ["redovisare", "period"]
        assert schema.inputSchema.properties["momsinkomst"].type == "number"
        assert GetVatDraftsTool(mock_client).get_schema().inputSchema.required is None


class TestSubmissionTools:
    """Test the submission, decision and health tools."""

    async def test_get_vat_submissions(self, mock_client):
        result = await GetVatSubmissionsTool(mock_client)({})

        assert text_of(result).startswith("Retrieved 1 VAT submissions:\n")
        assert '"kvittonummer": "KV-42"' in text_of(result)

    async def test_missing_submission_and_decision(self, mock_client):
        submission = await GetVatSubmissionTool(mock_client)(KEY)
        decision = await GetVatDecisionTool(mock_client)(KEY)

        assert text_of(submission) == "No submission found for 5567891234/2024-01"
        assert text_of(decision) == "No decision found for 5567891234/2024-01"
        assert not submission.is_error and not decision.is_error

    async def test_health_check(self, mock_client):
        result = await HealthCheckTool(mock_client)({})

        assert text_of(result) == (
            'Health check result:\n{\n  "status": "ok",\n  "version": "1.2.3"\n}'
        )


class TestToolRegistry:
    def test_all_tools_registered(self, mock_client):
        registry = build_tool_registry(mock_client)

        assert registry.names() == [
            "get_vat_drafts",
            "get_vat_draft",
            "create_vat_draft",
            "delete_vat_draft",
            "validate_vat_draft",
            "lock_vat_draft",
            "unlock_vat_draft",
            "get_vat_submissions",
            "get_vat_submission",
            "get_vat_decisions",
            "get_vat_decision",
            "health_check",
        ]
        assert [tool.name for tool in registry.definitions()] == registry.names()
        assert isinstance(registry.get("health_check"), BaseTool)
        assert registry.get("missing") is None

    def test_groups_and_disabled_tools(self, mock_client):
        registry = build_tool_registry(
            mock_client,
            ToolsConfig(drafts_enabled=False, disabled_tools=["health_check"]),
        )

        assert registry.names() == [
            "get_vat_submissions",
            "get_vat_submission",
            "get_vat_decisions",
            "get_vat_decision",
        ]

    def test_duplicate_name_is_rejected(self, mock_client):
        registry = ToolRegistry()
        registry.register(HealthCheckTool(mock_client))

        with pytest.raises(ValueError, match="Duplicate tool name: health_check"):
            registry.register(HealthCheckTool(mock_client))
