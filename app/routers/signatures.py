# =============================================================================
# app/routers/signatures.py - E-Signature Endpoints (Owner)
# =============================================================================
# Manage a proposal's signers and sign on their behalf in person.
# Anonymous signing through a share link is in shared.py.
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Request
from pydantic import BaseModel, Field

from app.auth import get_current_user, AuthUser
from app.dependencies import client_ip, client_user_agent
from app.events import emit_event
from core.models.signature import SignatureResponse, SignatureSummary, SignerCreate, SignRequest
from core.services.signature_service import SignatureService

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class SignResult(BaseModel):
    """Outcome of a sign or decline call."""
    signature_id: str
    status: str
    signed_at: str | None = None
    all_signed: bool = False
    proposal_status: str | None = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "signature_id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                "status": "signed",
                "signed_at": "2024-01-15T10:30:00Z",
                "all_signed": True,
                "proposal_status": "signed",
            }
        }
    }


class SignerRemoveResponse(BaseModel):
    signature_id: str
    message: str = Field(default="Signer removed")


def signing_result(result: dict[str, Any]) -> SignResult:
    """
    Build the response for a completed signature and emit proposal.signed
    when it was the last one.
    """
    signature = result["signature"]
    proposal = result["proposal"]
    if result["all_signed"]:
        emit_event(proposal["user_id"], "proposal.signed", {
            "proposal_id": proposal["id"],
            "title": proposal.get("title"),
            "client_name": proposal.get("client_name"),
            "signed_at": signature.get("signed_at"),
        })
    return SignResult(
        signature_id=str(signature["id"]),
        status=signature.get("status"),
        signed_at=signature.get("signed_at"),
        all_signed=result["all_signed"],
        proposal_status=proposal.get("status"),
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/proposals/{proposal_id}/signatures", response_model=list[SignatureResponse])
async def list_signers(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """List signers in signing order."""
    return [SignatureResponse(**s) for s in SignatureService.list_signers(proposal_id, user.id)]


@router.post(
    "/proposals/{proposal_id}/signatures",
    response_model=SignatureResponse,
    status_code=201,
)
async def add_signer(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    request: SignerCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Add a pending signer to a proposal."""
    return SignatureResponse(**SignatureService.add_signer(proposal_id, user.id, request))


@router.get("/proposals/{proposal_id}/signatures/summary", response_model=SignatureSummary)
async def signature_summary(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Signing progress: signed count, total, percent and all_signed."""
    return SignatureService.get_summary(proposal_id, user.id)


@router.delete("/signatures/{signature_id}", response_model=SignerRemoveResponse)
async def remove_signer(
    signature_id: Annotated[UUID, Path(description="Signature UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Remove a signer."""
    SignatureService.remove_signer(signature_id, user.id)
    return SignerRemoveResponse(signature_id=str(signature_id))


@router.post("/signatures/{signature_id}/sign", response_model=SignResult)
async def sign(
    signature_id: Annotated[UUID, Path(description="Signature UUID")],
    body: SignRequest,
    request: Request,
    user: AuthUser = Depends(get_current_user),
):
    """
    Record a signature for one of the owner's signers.

    Send either a drawn signature (PNG data URL) or a typed name.
    """
    result = SignatureService.sign(
        signature_id,
        body,
        ip_address=client_ip(request),
        user_agent=client_user_agent(request),
        user_id=user.id,
    )
    return signing_result(result)
