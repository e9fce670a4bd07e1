"""
Prompt templates for common VAT workflows.
"""

from typing import Any, Callable, Dict, List, Mapping

import structlog

from ..protocol.schemas import (
    MCPValidationError,
    Prompt,
    PromptArgument,
    PromptMessage,
    PromptNotFoundError,
    TextContent,
)

logger = structlog.get_logger(__name__)

CREATE_MONTHLY_VAT_TEMPLATE = """I need to create a monthly VAT declaration for:
- Redovisare: {redovisare}
- Period: {period}

Please guide me through the following steps:
1. Check if a draft already exists
2. Gather the required information:
   - Total sales subject to VAT (momsinkomst)
   - Outgoing VAT (utgående moms)
   - Incoming VAT (ingående moms)
3. Create or update the draft
4. Validate the draft
5. Show me a summary

Can you help me with this process?"""

REVIEW_DRAFT_TEMPLATE = """Please review my VAT draft for {redovisare}/{period}:

1. Retrieve the current draft
2. Validate it for errors
3. Check the calculations:
   - Are the VAT amounts correct?
   - Is the net amount to pay/receive calculated correctly?
4. Provide a summary of any issues or confirm it's ready for submission

Please conduct this review and let me know if anything needs attention."""

CHECK_STATUS_TEMPLATE = """Please check the status of my VAT declarations for {redovisare}:

1. Show me all current drafts
2. Show me recent submissions
3. Show me any pending decisions
4. Highlight any deadlines or actions needed

Provide a clear overview of my VAT declaration status."""

SUBMISSION_CHECKLIST_TEMPLATE = """I'm preparing to submit my VAT declaration for {redovisare}/{period}.

Please help me with this pre-submission checklist:

✓ Draft exists and is complete
✓ All required fields are filled
✓ Validation passes without errors
✓ Calculations are correct:
  - Outgoing VAT matches sales
  - Incoming VAT is properly documented
  - Net amount is calculated correctly
✓ Supporting documentation is ready
✓ Draft is locked and ready for signing

Please verify each item and let me know if I'm ready to submit or if anything needs attention."""


class PromptArgumentError(MCPValidationError):
    """A required prompt argument is missing."""

    def __init__(self, prompt: str, argument: str):
        super().__init__(
            f"Missing required argument: {argument}",
            data={"prompt": prompt, "argument": argument},
        )


def _reporter_period_arguments(detailed: bool) -> List[PromptArgument]:
    return [
        PromptArgument(
            name="redovisare",
            description=(
                "Tax reporter ID (personnummer/organisationsnummer)" if detailed else "Tax reporter ID"
            ),
            required=True,
        ),
        PromptArgument(
            name="period",
            description="Reporting period (e.g., '2024-01')" if detailed else "Reporting period",
            required=True,
        ),
    ]


class VatPrompts:
    """Prompt collaborator: four fixed workflow prompts."""

    def __init__(self) -> None:
        self._definitions = [
            Prompt(
                name="create_monthly_vat",
                description="Guided workflow to create a monthly VAT declaration",
                arguments=_reporter_period_arguments(detailed=True),
            ),
            Prompt(
                name="review_draft",
                description="Review and validate a VAT draft before submission",
                arguments=_reporter_period_arguments(detailed=False),
            ),
            Prompt(
                name="check_status",
                description="Check the status of VAT declarations and submissions",
                arguments=[
                    PromptArgument(
                        name="redovisare",
                        description="Tax reporter ID (optional - shows all if not provided)",
                        required=False,
                    )
                ],
            ),
            Prompt(
                name="submission_checklist",
                description="Pre-submission checklist for VAT declaration",
                arguments=_reporter_period_arguments(detailed=False),
            ),
        ]
        self._renderers: Dict[str, Callable[[Mapping[str, Any]], str]] = {
            "create_monthly_vat": self._render_create_monthly_vat,
            "review_draft": self._render_review_draft,
            "check_status": self._render_check_status,
            "submission_checklist": self._render_submission_checklist,
        }

    def list_prompts(self) -> List[Prompt]:
        return list(self._definitions)

    def get_prompt(self, name: str, arguments: Mapping[str, Any]) -> List[PromptMessage]:
        """
        Render a prompt.

        Raises:
            PromptNotFoundError: Unknown prompt name
            PromptArgumentError: A required argument is missing
        """
        renderer = self._renderers.get(name)
        if renderer is None:
            raise PromptNotFoundError(name)

        logger.info("Rendering prompt", prompt=name)
        text = renderer(arguments)
        return [PromptMessage(role="user", content=TextContent(text=text))]

    @staticmethod
    def _require(prompt: str, arguments: Mapping[str, Any], name: str) -> str:
        value = arguments.get(name)
        if value is None:
            raise PromptArgumentError(prompt, name)
        return str(value)

    def _render_create_monthly_vat(self, arguments: Mapping[str, Any]) -> str:
        return CREATE_MONTHLY_VAT_TEMPLATE.format(
            redovisare=self._require("create_monthly_vat", arguments, "redovisare"),
            period=self._require("create_monthly_vat", arguments, "period"),
        )

    def _render_review_draft(self, arguments: Mapping[str, Any]) -> str:
        return REVIEW_DRAFT_TEMPLATE.format(
            redovisare=self._require("review_draft", arguments, "redovisare"),
            period=self._require("review_draft", arguments, "period"),
        )

    def _render_check_status(self, arguments: Mapping[str, Any]) -> str:
        redovisare = arguments.get("redovisare")
        return CHECK_STATUS_TEMPLATE.format(
            redovisare="all reporters" if redovisare is None else str(redovisare)
        )

    def _render_submission_checklist(self, arguments: Mapping[str, Any]) -> str:
        return SUBMISSION_CHECKLIST_TEMPLATE.format(
            redovisare=self._require("submission_checklist", arguments, "redovisare"),
            period=self._require("submission_checklist", arguments, "period"),
        )
