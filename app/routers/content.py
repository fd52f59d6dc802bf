# =============================================================================
# app/routers/content.py - AI Content and Research Endpoints
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import get_current_user, AuthUser
from app.dependencies import SubscribedUser
from core.models.template import (
    CompanyResearch,
    CompanyResearchRequest,
    ContentGenerateRequest,
    ContentGenerateResponse,
)
from core.services.content_service import ContentService
from core.services.research_service import ResearchService

router = APIRouter()


@router.post("/generate", response_model=ContentGenerateResponse)
async def generate_content(
    request: ContentGenerateRequest,
    user: SubscribedUser,
):
    """
    Draft copy for a proposal section.

    Uses OpenAI when configured and falls back to built-in templates
    otherwise; source tells which one produced the text. Upstream rate
    limits return 429 and exhausted credits 402.
    """
    return ContentService.generate(request.section, request.context)


@router.post("/research", response_model=CompanyResearch)
async def research_company(
    request: CompanyResearchRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Heuristic industry, size and talking points for a prospect."""
    return ResearchService.research_company(request.company_name, request.website)
