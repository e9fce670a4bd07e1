"""Skatteverket VAT API client and payload models."""

from .models import (
    HealthResponse,
    ValidationError,
    ValidationWarning,
    VatDecision,
    VatDecisionList,
    VatDraft,
    VatDraftList,
    VatDraftRequest,
    VatSubmission,
    VatSubmissionList,
    VatValidationResponse,
)
from .skatteverket_client import SkatteverketClient, SkatteverketClientError, retry_with_backoff

__all__ = [
    "SkatteverketClient",
    "SkatteverketClientError",
    "retry_with_backoff",
    "HealthResponse",
    "ValidationError",
    "ValidationWarning",
    "VatDecision",
    "VatDecisionList",
    "VatDraft",
    "VatDraftList",
    "VatDraftRequest",
    "VatSubmission",
    "VatSubmissionList",
    "VatValidationResponse",
]
