# =============================================================================
# core/models/signature.py - E-Signature Schemas
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class SignatureStatus(str, Enum):
    """State of one signer."""
    PENDING = "pending"
    SIGNED = "signed"
    DECLINED = "declined"


class SignerCreate(BaseModel):
    """Add a signer to a proposal."""
    signer_name: str = Field(..., min_length=1, max_length=255)
    signer_email: str = Field(..., min_length=3, max_length=320)


class SignRequest(BaseModel):
    """
    Capture a signature.

    Exactly one of signature_data (a drawn PNG data URL) or typed_name
    (rendered to an image server-side) must be given.

    Example:
        {"typed_name": "Jane Doe"}
    """
    signature_data: str | None = Field(default=None, description="data:image/png;base64,... from a canvas")
    typed_name: str | None = Field(default=None, min_length=1, max_length=120)

    @model_validator(mode="after")
    def _one_source(self) -> "SignRequest":
        if bool(self.signature_data) == bool(self.typed_name):
            raise ValueError("Provide either signature_data or typed_name")
        if self.signature_data and not self.signature_data.startswith("data:image/"):
            raise ValueError("signature_data must be an image data URL")
        return self


class SignatureResponse(BaseModel):
    """A signer record."""
    id: UUID
    proposal_id: UUID
    signer_name: str
    signer_email: str
    status: SignatureStatus
    signature_data: str | None = None
    signed_at: datetime | None = None
    ip_address: str | None = None
    created_at: datetime | None = None
    order: int = Field(default=1, ge=1, description="1-based position in signing order")


class SignatureSummary(BaseModel):
    """Signing progress for a proposal."""
    signers: list[SignatureResponse]
    signed: int
    total: int
    percent: int = Field(..., ge=0, le=100)
    all_signed: bool
