"""
Unit tests for VAT prompts.
"""

import pytest

from skatteverket_mcp_server.prompts.vat_prompts import PromptArgumentError, VatPrompts
from skatteverket_mcp_server.protocol.schemas import ErrorCode, PromptNotFoundError


@pytest.fixture
def prompts():
    return VatPrompts()


class TestVatPrompts:
    def test_list_prompts(self, prompts):
        listed = prompts.list_prompts()

        assert [prompt.name for prompt in listed] == [
            "create_monthly_vat",
            "review_draft",
            "check_status",
            "submission_checklist",
        ]
        check_status = listed[2]
        assert [(arg.name, arg.required) for arg in check_status.arguments] == [
            ("redovisare", False)
        ]

    def test_create_monthly_vat(self, prompts):
        (message,) = prompts.get_prompt(
            "create_monthly_vat", {"redovisare": "5567891234", "period": "2024-01"}
        )

        assert message.role == "user"
        assert message.content.type == "text"
        assert "- Redovisare: 5567891234\n- Period: 2024-01" in message.content.text
        assert "Outgoing VAT (utgående moms)" in message.content.text

    def test_review_draft(self, prompts):
        (message,) = prompts.get_prompt("review_draft", {"redovisare": "X", "period": "2024-02"})

        assert message.content.text.startswith("Please review my VAT draft for X/2024-02:")

    def test_check_status_defaults_to_all_reporters(self, prompts):
        (message,) = prompts.get_prompt("check_status", {})

        assert "VAT declarations for all reporters:" in message.content.text

    def test_check_status_with_reporter(self, prompts):
        (message,) = prompts.get_prompt("check_status", {"redovisare": "5567891234"})

        assert "VAT declarations for 5567891234:" in message.content.text

    def test_submission_checklist(self, prompts):
        (message,) = prompts.get_prompt(
            "submission_checklist", {"redovisare": "X", "period": "2024-03"}
        )

        assert "for X/2024-03." in message.content.text
        assert "✓ Draft is locked and ready for signing" in message.content.text

    def test_non_string_argument_is_rendered(self, prompts):
        (message,) = prompts.get_prompt("review_draft", {"redovisare": 5567891234, "period": 202401})

        assert "5567891234/202401" in message.content.text

    def test_missing_argument(self, prompts):
        with pytest.raises(PromptArgumentError) as exc_info:
            prompts.get_prompt("create_monthly_vat", {"redovisare": "5567891234"})

        assert exc_info.value.code == ErrorCode.INVALID_PARAMS
        assert exc_info.value.message == "Missing required argument: period"

    def test_unknown_prompt(self, prompts):
        with pytest.raises(PromptNotFoundError) as exc_info:
            prompts.get_prompt("file_taxes_for_me", {})

        assert exc_info.value.code == ErrorCode.PROMPT_NOT_FOUND
