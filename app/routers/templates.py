# =============================================================================
# app/routers/templates.py - Template Marketplace Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.auth import get_current_user, AuthUser
from core.models.template import TemplateResponse
from core.services.template_service import TemplateService

router = APIRouter()


class SeedResponse(BaseModel):
    seeded: int
    templates: list[TemplateResponse]


@router.get("", response_model=list[TemplateResponse])
async def list_templates(
    category: Annotated[str | None, Query(max_length=64, description="Filter by category")] = None,
    industry: Annotated[str | None, Query(max_length=64, description="Filter by industry")] = None,
):
    """List public templates ordered by name."""
    return [TemplateResponse(**t) for t in TemplateService.list_templates(category, industry)]


@router.post("/seed", response_model=SeedResponse)
async def seed_templates(user: AuthUser = Depends(get_current_user)):
    """Replace the public templates with the built-in set."""
    templates = TemplateService.seed_templates()
    return SeedResponse(seeded=len(templates), templates=[TemplateResponse(**t) for t in templates])
