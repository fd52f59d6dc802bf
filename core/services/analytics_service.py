# =============================================================================
# core/services/analytics_service.py - Proposal Engagement Analytics
# =============================================================================
# Records engagement events and aggregates them into the owner's summary.
# Aggregation runs in pandas over the proposal's proposal_analytics rows.
# =============================================================================

import logging
from datetime import timedelta
from typing import Any
from uuid import UUID

import pandas as pd

from core.models.analytics import (
    AnalyticsEventCreate,
    AnalyticsSummary,
    DailyViews,
    SectionStat,
)
from core.services.proposal_service import ProposalService
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now

logger = logging.getLogger(__name__)

DEVICE_TYPES = ("Desktop", "Mobile", "Tablet")
TOP_SECTIONS_LIMIT = 5
VIEWS_BY_DAY_WINDOW = 7


def classify_device(user_agent: str | None) -> str:
    """
    Bucket a user agent into Mobile, Tablet or Desktop.

    Example:
        classify_device("Mozilla/5.0 (iPhone; ...) Mobile/15E148")  # "Mobile"
        classify_device("Mozilla/5.0 (iPad; ...) Mobile/15E148")    # "Tablet"
    """
    ua = (user_agent or "").lower()
    # iPad Safari also sends "Mobile/..."
    if "tablet" in ua or "ipad" in ua:
        return "Tablet"
    if "mobile" in ua or "android" in ua or "iphone" in ua:
        return "Mobile"
    return "Desktop"


class AnalyticsService:
    """Service for recording and summarizing proposal engagement."""

    @staticmethod
    def insert_event(
        proposal_id: str | UUID,
        event_type: str,
        section_id: str | None = None,
        duration: int | None = None,
        visitor_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Insert one analytics event.

        Returns:
            Inserted row
        """
        client = SupabaseClient.get_client()
        row = {
            "proposal_id": normalize_uuid(proposal_id),
            "event_type": event_type,
            "section_id": section_id,
            "duration": duration,
            "visitor_id": visitor_id,
            "ip_address": ip_address,
            "user_agent": user_agent,
            "metadata": metadata or {},
        }
        response = client.table("proposal_analytics").insert(row).execute()
        logger.debug(f"Recorded {event_type} for proposal {row['proposal_id']}")
        return response.data[0] if response.data else row

    @staticmethod
    def record_shared_event(
        raw_token: str,
        event: AnalyticsEventCreate,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> dict[str, Any]:
        """
        Record an event from an anonymous share visitor.

        Raises:
            ShareNotFoundError / ShareExpiredError: For bad tokens
            ShareForbiddenError: If the share doesn't track views and the
                event is view-related
        """
        from core.services.share_service import ShareService

        share = ShareService.get_valid_share(raw_token)
        if event.event_type.value in ("view", "section_view"):
            ShareService.require_permission(share, "track_views")
        if event.event_type.value == "comment":
            ShareService.require_permission(share, "allow_comments")

        return AnalyticsService.insert_event(
            proposal_id=share["proposal_id"],
            event_type=event.event_type.value,
            section_id=event.section_id,
            duration=event.duration,
            visitor_id=event.visitor_id,
            ip_address=ip_address,
            user_agent=user_agent,
            metadata={**event.metadata, "share_id": share["id"]},
        )

    @staticmethod
    def fetch_events(proposal_id: str | UUID) -> list[dict[str, Any]]:
        """Fetch all analytics rows for a proposal, oldest first."""
        client = SupabaseClient.get_client()
        response = (
            client.table("proposal_analytics")
            .select("*")
            .eq("proposal_id", normalize_uuid(proposal_id))
            .order("created_at")
            .execute()
        )
        return response.data or []

    @staticmethod
    def get_summary(
        proposal_id: str | UUID,
        user_id: UUID | str,
    ) -> AnalyticsSummary:
        """
        Summarize engagement for a proposal the user owns.

        Raises:
            ProposalNotFoundError: If proposal doesn't exist or user doesn't own it
        """
        proposal = ProposalService.get_proposal(proposal_id, user_id=user_id)
        events = AnalyticsService.fetch_events(proposal["id"])
        return summarize_events(events)


# =============================================================================
# Aggregation
# =============================================================================

def _empty_days(today) -> list[DailyViews]:
    return [
        DailyViews(date=(today - timedelta(days=offset)).isoformat(), views=0)
        for offset in range(VIEWS_BY_DAY_WINDOW - 1, -1, -1)
    ]


def summarize_events(events: list[dict[str, Any]], now=None) -> AnalyticsSummary:
    """
    Aggregate raw analytics rows.

    Args:
        events: proposal_analytics rows
        now: Reference time for the views-by-day window (default: now, UTC)

    Returns:
        AnalyticsSummary
    """
    today = (now or utc_now()).date()
    summary = AnalyticsSummary(
        views_by_day=_empty_days(today),
        device_types={device: 0 for device in DEVICE_TYPES},
    )
    if not events:
        return summary

    df = pd.DataFrame(events)
    for column in ("event_type", "section_id", "duration", "visitor_id", "user_agent", "created_at"):
        if column not in df.columns:
            df[column] = None
    df["duration"] = pd.to_numeric(df["duration"], errors="coerce").fillna(0)
    df["created_at"] = pd.to_datetime(df["created_at"], utc=True, errors="coerce")

    views = df[df["event_type"] == "view"]
    summary.total_views = int(len(views))
    summary.unique_viewers = int(views["visitor_id"].dropna().nunique())
    summary.avg_view_time = round(float(views["duration"].mean()), 1) if len(views) else 0.0
    summary.comments = int((df["event_type"] == "comment").sum())
    summary.shares = int((df["event_type"] == "share").sum())
    summary.downloads = int((df["event_type"] == "download").sum())

    if len(views) and views["created_at"].notna().any():
        summary.last_viewed = views["created_at"].max().isoformat()

    # Top sections
    section_views = df[(df["event_type"] == "section_view") & df["section_id"].notna()]
    if len(section_views):
        stats = (
            section_views.groupby("section_id")
            .agg(views=("section_id", "size"), time_spent=("duration", "sum"))
            .sort_values("views", ascending=False, kind="stable")
            .head(TOP_SECTIONS_LIMIT)
        )
        summary.top_sections = [
            SectionStat(section_id=str(section_id), views=int(row["views"]), time_spent=int(row["time_spent"]))
            for section_id, row in stats.iterrows()
        ]

    # Views by day
    if len(views):
        counts = views["created_at"].dropna().dt.date.value_counts()
        summary.views_by_day = [
            DailyViews(date=day.date, views=int(counts.get(pd.Timestamp(day.date).date(), 0)))
            for day in summary.views_by_day
        ]

    # Devices
    devices = views["user_agent"].map(classify_device).value_counts()
    summary.device_types = {device: int(devices.get(device, 0)) for device in DEVICE_TYPES}

    return summary
