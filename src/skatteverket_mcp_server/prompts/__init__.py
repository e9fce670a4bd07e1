"""VAT workflow prompts."""

from .vat_prompts import PromptArgumentError, VatPrompts

__all__ = ["VatPrompts", "PromptArgumentError"]
