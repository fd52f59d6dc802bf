# =============================================================================
# core/models/proposal.py - Proposal Schemas
# =============================================================================
# These models define the API contract for proposal operations:
# - ProposalStatus: Enum for proposal lifecycle states
# - ProposalCreate / ProposalUpdate: Input for create and edit
# - SectionUpdate: Edit one field of one content section
# - ProposalResponse: Output when returning proposals to clients
#
# A proposal's content is free-form JSON; see lib/content_renderer.py for
# the shapes it may take.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class ProposalStatus(str, Enum):
    """
    Lifecycle of a proposal.

    Flow: draft -> sent -> viewed -> accepted | rejected | signed
    """
    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    SIGNED = "signed"


class ProposalCreate(BaseModel):
    """
    Schema for creating a proposal.

    When template_id is set and content is omitted, the template's sections
    seed the content.

    Example:
        {
            "title": "Website Redesign",
            "client_name": "Acme Corp",
            "client_email": "cto@acme.test",
            "worth": 12000,
            "template_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """
    title: str = Field(..., min_length=1, max_length=255, description="Proposal title")
    client_name: str | None = Field(default=None, max_length=255, description="Client or company name")
    client_email: str | None = Field(default=None, max_length=320, description="Client contact email")
    worth: float | None = Field(default=None, ge=0, description="Total proposal value")
    content: dict[str, Any] | list[Any] | None = Field(default=None, description="Section content")
    template_id: UUID | None = Field(default=None, description="Template to start from")
    brand_kit_id: UUID | None = Field(default=None, description="Brand kit to style the proposal")
    requires_signature: bool = Field(default=False, description="Whether the client must sign")


class ProposalUpdate(BaseModel):
    """Partial update; only fields that are set are written."""
    title: str | None = Field(default=None, min_length=1, max_length=255)
    client_name: str | None = Field(default=None, max_length=255)
    client_email: str | None = Field(default=None, max_length=320)
    worth: float | None = Field(default=None, ge=0)
    content: dict[str, Any] | list[Any] | None = None
    status: ProposalStatus | None = None
    brand_kit_id: UUID | None = None
    requires_signature: bool | None = None
    sharing_enabled: bool | None = None


class SectionUpdate(BaseModel):
    """
    Update a single field of the first section with a given type.

    Example:
        {"section_type": "executive_summary", "field": "content", "value": "We will..."}
    """
    section_type: str = Field(..., min_length=1, max_length=64)
    field: str = Field(..., min_length=1, max_length=64)
    value: Any = None


class ProposalResponse(BaseModel):
    """
    Schema for returning a proposal.

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "title": "Website Redesign",
            "status": "draft",
            "content": {"sections": [...]},
            "created_at": "2024-01-15T10:30:00Z"
        }
    """
    id: UUID
    user_id: UUID
    title: str
    client_name: str | None = None
    client_email: str | None = None
    worth: float | None = None
    status: ProposalStatus = ProposalStatus.DRAFT
    content: Any = None
    template_id: UUID | None = None
    brand_kit_id: UUID | None = None
    requires_signature: bool = False
    sharing_enabled: bool = False
    sent_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ProposalList(BaseModel):
    """Paginated proposal listing."""
    proposals: list[ProposalResponse]
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
