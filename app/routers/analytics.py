# =============================================================================
# app/routers/analytics.py - Proposal Analytics Endpoints
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import get_current_user, AuthUser
from core.models.analytics import AnalyticsSummary
from core.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("/proposals/{proposal_id}/analytics", response_model=AnalyticsSummary)
async def get_analytics(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Engagement summary for a proposal.

    Views, unique viewers, average view time, top sections, the last seven
    days of views and the device split.
    """
    return AnalyticsService.get_summary(proposal_id, user.id)
