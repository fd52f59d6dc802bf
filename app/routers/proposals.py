# =============================================================================
# app/routers/proposals.py - Proposal CRUD Endpoints
# =============================================================================
# Create, list, edit and export proposals.
# All endpoints require authentication; users only see their own proposals.
# =============================================================================

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import Response
from pydantic import BaseModel, Field

from app.auth import get_current_user, AuthUser
from app.dependencies import SubscribedUser
from app.events import emit_event
from core.models.proposal import (
    ProposalCreate,
    ProposalList,
    ProposalResponse,
    ProposalStatus,
    ProposalUpdate,
    SectionUpdate,
)
from core.services.proposal_service import ProposalService

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class ProposalDeleteResponse(BaseModel):
    """Response when deleting a proposal."""
    proposal_id: str = Field(..., example="550e8400-e29b-41d4-a716-446655440000")
    message: str = Field(default="Proposal deleted successfully")


# =============================================================================
# Endpoints
# =============================================================================

@router.post("", response_model=ProposalResponse, status_code=201)
async def create_proposal(
    request: ProposalCreate,
    user: SubscribedUser,
):
    """
    Create a proposal.

    Starts from a template when template_id is set and no content is given.
    Emits a proposal.created webhook event.
    """
    proposal = ProposalService.create_proposal(user.id, request)
    emit_event(user.id, "proposal.created", {
        "proposal_id": proposal["id"],
        "title": proposal.get("title"),
        "client_name": proposal.get("client_name"),
        "status": proposal.get("status"),
    })
    return ProposalResponse(**proposal)


@router.get("", response_model=ProposalList)
async def list_proposals(
    user: AuthUser = Depends(get_current_user),
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    page_size: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 10,
    status: Annotated[ProposalStatus | None, Query(description="Filter by status")] = None,
):
    """List the user's proposals, newest first."""
    proposals, total = ProposalService.list_proposals(
        user.id,
        page=page,
        page_size=page_size,
        status=status,
    )
    return ProposalList(
        proposals=[ProposalResponse(**p) for p in proposals],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{proposal_id}", response_model=ProposalResponse)
async def get_proposal(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Get a proposal by ID."""
    proposal = ProposalService.get_proposal(proposal_id, user_id=user.id)
    return ProposalResponse(**proposal)


@router.patch("/{proposal_id}", response_model=ProposalResponse)
async def update_proposal(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    request: ProposalUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Update proposal fields. Only fields present in the body are changed."""
    proposal = ProposalService.update_proposal(proposal_id, request, user_id=user.id)
    return ProposalResponse(**proposal)


@router.patch("/{proposal_id}/sections", response_model=ProposalResponse)
async def update_section(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    request: SectionUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Update one field of a content section.

    Targets the first section whose type matches section_type.
    """
    proposal = ProposalService.update_section(
        proposal_id,
        section_type=request.section_type,
        field=request.field,
        value=request.value,
        user_id=user.id,
    )
    return ProposalResponse(**proposal)


@router.delete("/{proposal_id}", response_model=ProposalDeleteResponse)
async def delete_proposal(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Delete a proposal and everything attached to it."""
    ProposalService.delete_proposal(proposal_id, user_id=user.id)
    return ProposalDeleteResponse(proposal_id=str(proposal_id))


@router.get("/{proposal_id}/export")
async def export_proposal(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    user: AuthUser = Depends(get_current_user),
    format: Annotated[Literal["pdf", "html"], Query(description="Output format")] = "pdf",
    sections: Annotated[
        str | None,
        Query(description='Comma-separated section types; add "cover" for the cover block'),
    ] = None,
):
    """
    Export a proposal as a PDF or standalone HTML document.

    Returns the file as an attachment. Omit sections to export everything.
    """
    from core.services.export_service import ExportService

    include = [s.strip() for s in sections.split(",") if s.strip()] if sections else None
    document = ExportService.export_proposal(proposal_id, user.id, fmt=format, include=include)
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )
