"""VAT resources."""

from .vat_resources import InvalidResourceURIError, VatResources, draft_uri

__all__ = ["VatResources", "InvalidResourceURIError", "draft_uri"]
