"""
Data models for the Skatteverket VAT declaration API.

Field names follow the API's wire format (Swedish, camelCase). Unknown
fields are ignored so additions on the API side never break decoding.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    """Base for API payloads."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict in API field names, null fields left out."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class VatDraft(ApiModel):
    """A VAT declaration draft (momsdeklarationsutkast)."""

    redovisare: str = ""
    period: str = ""
    momsinkomst: Optional[float] = None
    utgaende_moms: Optional[float] = Field(default=None, alias="utgaendeMoms")
    ingaende_moms: Optional[float] = Field(default=None, alias="ingaendeMoms")
    att_betala: Optional[float] = Field(default=None, alias="attBetala")
    att_faa_tillbaka: Optional[float] = Field(default=None, alias="attFaaTillbaka")
    status: Optional[str] = None
    skapad: Optional[datetime] = None
    uppdaterad: Optional[datetime] = None
    metadata: Optional[Dict[str, Any]] = None


class VatDraftRequest(ApiModel):
    """Body of a create-or-update draft call."""

    momsinkomst: Optional[float] = None
    utgaende_moms: Optional[float] = Field(default=None, alias="utgaendeMoms")
    ingaende_moms: Optional[float] = Field(default=None, alias="ingaendeMoms")
    metadata: Optional[Dict[str, Any]] = None


class ValidationError(ApiModel):
    field: str = ""
    message: str = ""
    code: Optional[str] = None


class ValidationWarning(ApiModel):
    field: str = ""
    message: str = ""


class VatValidationResponse(ApiModel):
    """Result of a draft check (kontrollera)."""

    valid: bool = False
    errors: Optional[List[ValidationError]] = None
    warnings: Optional[List[ValidationWarning]] = None


class VatDraftList(ApiModel):
    drafts: List[VatDraft] = Field(default_factory=list)
    total: int = 0


class VatSubmission(ApiModel):
    """A submitted declaration (inlämnad)."""

    redovisare: str = ""
    period: str = ""
    inlamningsdatum: Optional[datetime] = None
    status: str = ""
    kvittonummer: Optional[str] = None
    belopp: Optional[float] = None


class VatSubmissionList(ApiModel):
    submissions: List[VatSubmission] = Field(default_factory=list)
    total: int = 0


class VatDecision(ApiModel):
    """A tax decision (beslutad)."""

    redovisare: str = ""
    period: str = ""
    beslutsdatum: Optional[datetime] = None
    status: str = ""
    belopp: Optional[float] = None
    beskrivning: Optional[str] = None


class VatDecisionList(ApiModel):
    decisions: List[VatDecision] = Field(default_factory=list)
    total: int = 0


class HealthResponse(ApiModel):
    status: str = ""
    timestamp: Optional[datetime] = None
    version: Optional[str] = None
