# =============================================================================
# app/routers/shares.py - Secure Share Management Endpoints
# =============================================================================
# Owner-side share links: create, list, revoke, and send by email.
# The anonymous side lives in shared.py.
# =============================================================================

import logging
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from app.auth import get_current_user, AuthUser
from app.events import queue_share_email
from core.models.share import ShareCreate, ShareEmailRequest, ShareResponse
from core.services.share_service import ShareService, parse_permissions

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class ShareEmailResponse(BaseModel):
    """Response when emailing a share link."""
    share: ShareResponse
    email_queued: bool = Field(..., description="Whether the email task was queued")
    message: str = Field(default="Share link created")


class ShareRevokeResponse(BaseModel):
    share_id: str
    message: str = Field(default="Share link revoked")


def to_share_response(row: dict[str, Any]) -> ShareResponse:
    """Convert a share row (permissions stored as JSON text) to its response."""
    return ShareResponse(
        id=row["id"],
        proposal_id=row["proposal_id"],
        share_url=row["share_url"],
        permissions=parse_permissions(row.get("permissions")),
        expires_at=row.get("expires_at"),
        accessed_count=row.get("accessed_count") or 0,
        last_accessed_at=row.get("last_accessed_at"),
        created_at=row.get("created_at"),
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.post(
    "/proposals/{proposal_id}/shares",
    response_model=ShareResponse,
    status_code=201,
)
async def create_share(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    user: AuthUser = Depends(get_current_user),
    request: ShareCreate | None = None,
):
    """
    Create a secure share link for a proposal.

    The link expires after expires_in_days (default 30).
    """
    share = ShareService.create_share(proposal_id, user.id, request or ShareCreate())
    return to_share_response(share)


@router.get("/proposals/{proposal_id}/shares", response_model=list[ShareResponse])
async def list_shares(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """List a proposal's share links, newest first."""
    return [to_share_response(s) for s in ShareService.list_shares(proposal_id, user.id)]


@router.delete("/shares/{share_id}", response_model=ShareRevokeResponse)
async def revoke_share(
    share_id: Annotated[UUID, Path(description="Share UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Revoke a share link. The token stops resolving immediately."""
    ShareService.revoke_share(share_id, user.id)
    return ShareRevokeResponse(share_id=str(share_id))


@router.post(
    "/proposals/{proposal_id}/shares/email",
    response_model=ShareEmailResponse,
    status_code=201,
)
async def email_share(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    request: ShareEmailRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create a share link and email it to a recipient.

    The email is sent by a background worker; email_queued reports whether
    it was handed off.
    """
    from core.services.analytics_service import AnalyticsService
    from core.services.company_profile_service import CompanyProfileService
    from core.services.proposal_service import ProposalService

    proposal = ProposalService.get_proposal(proposal_id, user_id=user.id)
    share = ShareService.create_share(proposal_id, user.id, request)

    profile = CompanyProfileService.get_profile(user.id)
    sender_name = profile.get("company_name") or user.email or "ProposalKraft"

    queued = queue_share_email(
        recipient_email=request.recipient_email,
        proposal_title=proposal.get("title") or "Proposal",
        sender_name=sender_name,
        share_url=share["share_url"],
        message=request.message,
        recipient_name=request.recipient_name,
    )

    try:
        AnalyticsService.insert_event(
            proposal_id=proposal["id"],
            event_type="share",
            metadata={"share_id": share["id"], "recipient_email": request.recipient_email},
        )
    except Exception as e:
        logger.warning(f"Failed to record share event for {proposal['id']}: {e}")

    return ShareEmailResponse(share=to_share_response(share), email_queued=queued)
