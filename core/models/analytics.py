# =============================================================================
# core/models/analytics.py - Proposal Analytics Schemas
# =============================================================================
# Engagement events recorded against a proposal and the summary computed
# from them for the owner's dashboard.
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class AnalyticsEventType(str, Enum):
    """Kinds of engagement events."""
    VIEW = "view"
    SECTION_VIEW = "section_view"
    COMMENT = "comment"
    SHARE = "share"
    DOWNLOAD = "download"


class AnalyticsEventCreate(BaseModel):
    """
    Record an engagement event.

    Example:
        {"event_type": "section_view", "section_id": "pricing", "duration": 42, "visitor_id": "v-123"}
    """
    event_type: AnalyticsEventType
    section_id: str | None = Field(default=None, max_length=128)
    duration: int | None = Field(default=None, ge=0, description="Seconds spent")
    visitor_id: str | None = Field(default=None, max_length=128)
    metadata: dict[str, Any] = Field(default_factory=dict)


class SectionStat(BaseModel):
    """Views and time spent on one section."""
    section_id: str
    views: int
    time_spent: int = Field(..., description="Total seconds across views")


class DailyViews(BaseModel):
    """View count for one calendar day (UTC)."""
    date: str
    views: int


class AnalyticsSummary(BaseModel):
    """
    Aggregated engagement for one proposal.

    Example:
        {
            "total_views": 12,
            "unique_viewers": 4,
            "avg_view_time": 95.5,
            "device_types": {"Desktop": 9, "Mobile": 3, "Tablet": 0}
        }
    """
    total_views: int = 0
    unique_viewers: int = 0
    avg_view_time: float = 0.0
    comments: int = 0
    shares: int = 0
    downloads: int = 0
    last_viewed: str | None = None
    top_sections: list[SectionStat] = Field(default_factory=list)
    views_by_day: list[DailyViews] = Field(default_factory=list)
    device_types: dict[str, int] = Field(default_factory=dict)
