# =============================================================================
# core/models/template.py - Template and Content Generation Schemas
# =============================================================================
# - TemplateResponse: A public proposal template
# - ContentGenerateRequest / ContentGenerateResponse: AI section drafting
# - CompanyResearchRequest / CompanyResearch: Prospect research summary
# =============================================================================

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field


class TemplateResponse(BaseModel):
    """A proposal template from the marketplace."""
    id: UUID
    name: str
    description: str | None = None
    category: str | None = None
    industry: str | None = None
    tags: list[str] = Field(default_factory=list)
    preview_color: str | None = None
    is_public: bool = True
    template_data: dict[str, Any] = Field(default_factory=dict)


class ContentGenerateRequest(BaseModel):
    """
    Draft copy for one proposal section.

    Example:
        {"section": "executive_summary", "context": "Shopify migration for a boutique retailer"}
    """
    section: str = Field(..., min_length=1, max_length=64)
    context: str | None = Field(default=None, max_length=4000)


class ContentGenerateResponse(BaseModel):
    """Generated section copy and where it came from."""
    content: str
    source: Literal["ai", "template"]


class CompanyResearchRequest(BaseModel):
    """Research a prospect before writing a proposal."""
    company_name: str = Field(..., min_length=1, max_length=255)
    website: str | None = Field(default=None, max_length=2048)


class CompanyResearch(BaseModel):
    """Heuristic research summary for a prospect."""
    company_name: str
    website: str
    industry: str
    size: str
    pain_points: list[str]
    opportunities: list[str]
    challenges: list[str]
    recommendations: list[str]
    last_updated: str | None = None
