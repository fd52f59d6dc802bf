# =============================================================================
# core/models/share.py - Secure Share Schemas
# =============================================================================
# Models for token-addressable, expiring proposal links:
# - SharePermissions: What an anonymous holder of the link may do
# - ShareCreate / ShareEmailRequest: Owner inputs
# - ShareResponse: Owner-facing share record with its public URL
# - SharedProposalView: What an anonymous visitor receives
# =============================================================================

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from lib.content_renderer import RenderedSection


class SharePermissions(BaseModel):
    """
    Permissions granted by a share link.

    Stored in secure_proposal_shares.permissions as a JSON string with
    camelCase keys, matching what the web client writes.
    """
    allow_comments: bool = Field(default=False, alias="allowComments")
    track_views: bool = Field(default=True, alias="trackViews")
    require_signature: bool = Field(default=False, alias="requireSignature")

    model_config = {"populate_by_name": True}


class ShareCreate(BaseModel):
    """
    Create a secure share for a proposal.

    Example:
        {"expires_in_days": 14, "permissions": {"trackViews": true}, "snapshot": true}
    """
    expires_in_days: int | None = Field(default=None, ge=1, le=365, description="Days until expiry (default 30)")
    permissions: SharePermissions = Field(default_factory=SharePermissions)
    snapshot: bool = Field(default=False, description="Freeze the current content into the share")


class ShareEmailRequest(ShareCreate):
    """Create a share and email its link to a recipient."""
    recipient_email: str = Field(..., min_length=3, max_length=320)
    recipient_name: str | None = Field(default=None, max_length=255)
    message: str | None = Field(default=None, max_length=2000)


class ShareResponse(BaseModel):
    """A share as seen by the proposal owner."""
    id: UUID
    proposal_id: UUID
    share_url: str
    permissions: SharePermissions
    expires_at: datetime | None = None
    accessed_count: int = 0
    last_accessed_at: datetime | None = None
    created_at: datetime | None = None


class SharedSigner(BaseModel):
    """Signer details exposed on a public share."""
    id: UUID
    signer_name: str
    signer_email: str | None = None
    status: str
    signed_at: datetime | None = None
    order: int


class SharedProposalView(BaseModel):
    """
    Public view of a shared proposal.

    Sensitive owner fields (user_id, brand kit ids) are omitted.
    """
    proposal: dict[str, Any]
    sections: list[RenderedSection]
    signers: list[SharedSigner] = Field(default_factory=list)
    permissions: SharePermissions
    expires_at: datetime | None = None
