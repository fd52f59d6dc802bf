# =============================================================================
# app/routers/shared.py - Public Shared Proposal Endpoints
# =============================================================================
# Anonymous access through a share token. No authentication: the token is
# the credential, and what a visitor may do is limited by the share's
# permissions.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Request
from pydantic import BaseModel

from app.dependencies import client_ip, client_user_agent
from app.events import emit_event
from app.routers.signatures import SignResult, signing_result
from core.models.analytics import AnalyticsEventCreate
from core.models.share import SharedProposalView
from core.models.signature import SignRequest
from core.services.share_service import ShareService
from core.services.signature_service import SignatureService

router = APIRouter()

TokenPath = Annotated[str, Path(min_length=8, max_length=256, description="Share token from the URL")]


class EventRecorded(BaseModel):
    recorded: bool = True
    event_id: str | None = None


@router.get("/{token}", response_model=SharedProposalView)
async def view_shared_proposal(
    token: TokenPath,
    request: Request,
    visitor_id: Annotated[str | None, Query(max_length=128, description="Client-generated visitor id")] = None,
):
    """
    Open a shared proposal.

    Returns 404 for an unknown token and 410 once the link has expired.
    When the share tracks views the visit is recorded and the owner's
    proposal.viewed webhooks fire.
    """
    result = ShareService.resolve_share(
        token,
        ip_address=client_ip(request),
        user_agent=client_user_agent(request),
        visitor_id=visitor_id,
    )

    if result["tracked"]:
        proposal = result["proposal"]
        emit_event(proposal["user_id"], "proposal.viewed", {
            "proposal_id": proposal["id"],
            "title": proposal.get("title"),
            "visitor_id": visitor_id,
        })

    return result["view"]


@router.post("/{token}/events", response_model=EventRecorded, status_code=201)
async def record_event(
    token: TokenPath,
    body: AnalyticsEventCreate,
    request: Request,
):
    """Record an engagement event (section view, comment, download...)."""
    from core.services.analytics_service import AnalyticsService

    row = AnalyticsService.record_shared_event(
        token,
        body,
        ip_address=client_ip(request),
        user_agent=client_user_agent(request),
    )
    return EventRecorded(event_id=str(row["id"]) if row.get("id") else None)


@router.post("/{token}/signatures/{signature_id}/sign", response_model=SignResult)
async def sign_shared(
    token: TokenPath,
    signature_id: Annotated[UUID, Path(description="Signature UUID")],
    body: SignRequest,
    request: Request,
):
    """
    Sign as a visitor. The share must grant requireSignature.
    """
    result = SignatureService.sign(
        signature_id,
        body,
        ip_address=client_ip(request),
        user_agent=client_user_agent(request),
        share_token=token,
    )
    return signing_result(result)


@router.post("/{token}/signatures/{signature_id}/decline", response_model=SignResult)
async def decline_shared(
    token: TokenPath,
    signature_id: Annotated[UUID, Path(description="Signature UUID")],
):
    """Decline to sign as a visitor."""
    signer = SignatureService.decline(signature_id, share_token=token)
    return SignResult(signature_id=str(signer["id"]), status=signer.get("status"))
