# =============================================================================
# tests/test_analytics.py - Analytics Aggregation Tests
# =============================================================================

from datetime import datetime, timezone

import pytest

from core.services.analytics_service import classify_device, summarize_events

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)

IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile/15E148"
IPAD = "Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X) AppleWebKit/605.1.15 Version/17.0 Mobile/15E148 Safari/604.1"
MAC = "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0)"


def event(event_type, created_at="2024-03-10T09:00:00+00:00", **extra):
    return {"event_type": event_type, "created_at": created_at, **extra}


class TestClassifyDevice:

    @pytest.mark.parametrize("user_agent, expected", [
        (IPHONE, "Mobile"),
        (IPAD, "Tablet"),
        ("Something Tablet Browser", "Tablet"),
        ("mozilla/5.0 (ipad; cpu os 17_0)", "Tablet"),
        ("Mozilla/5.0 (Linux; Android 14; Pixel 8)", "Mobile"),
        ("some MOBILE browser", "Mobile"),
        (MAC, "Desktop"),
        (None, "Desktop"),
    ])
    def test_buckets(self, user_agent, expected):
        assert classify_device(user_agent) == expected


class TestSummarizeEvents:
    """pandas aggregation of proposal_analytics rows."""

    def test_empty(self):
        summary = summarize_events([], now=NOW)
        assert summary.total_views == 0
        assert summary.avg_view_time == 0.0
        assert len(summary.views_by_day) == 7
        assert summary.views_by_day[-1].date == "2024-03-10"
        assert summary.device_types == {"Desktop": 0, "Mobile": 0, "Tablet": 0}

    def test_view_counts(self):
        events = [
            event("view", visitor_id="a", duration=60, user_agent=MAC),
            event("view", visitor_id="a", duration=30, user_agent=IPHONE),
            event("view", visitor_id="b", duration=12, user_agent=IPAD, created_at="2024-03-08T10:00:00+00:00"),
            event("view", visitor_id=None, duration=None, user_agent=MAC),
            event("comment"),
            event("share"),
            event("share"),
            event("download"),
        ]
        summary = summarize_events(events, now=NOW)

        assert summary.total_views == 4
        assert summary.unique_viewers == 2
        assert summary.avg_view_time == 25.5
        assert summary.comments == 1
        assert summary.shares == 2
        assert summary.downloads == 1
        assert summary.device_types == {"Desktop": 2, "Mobile": 1, "Tablet": 1}
        assert summary.last_viewed.startswith("2024-03-10T09:00:00")

    def test_views_by_day_window(self):
        events = [
            event("view", created_at="2024-03-10T01:00:00+00:00"),
            event("view", created_at="2024-03-10T23:00:00+00:00"),
            event("view", created_at="2024-03-04T08:00:00+00:00"),
            event("view", created_at="2024-02-01T08:00:00+00:00"),
        ]
        days = {d.date: d.views for d in summarize_events(events, now=NOW).views_by_day}

        assert list(days)[0] == "2024-03-04"
        assert days["2024-03-10"] == 2
        assert days["2024-03-04"] == 1
        assert sum(days.values()) == 3

    def test_top_sections(self):
        events = (
            [event("section_view", section_id="pricing", duration=20)] * 3
            + [event("section_view", section_id="scope", duration=5)] * 2
            + [event("section_view", section_id=f"s{i}", duration=1) for i in range(5)]
            + [event("section_view", section_id=None, duration=100)]
        )
        top = summarize_events(events, now=NOW).top_sections

        assert len(top) == 5
        assert (top[0].section_id, top[0].views, top[0].time_spent) == ("pricing", 3, 60)
        assert (top[1].section_id, top[1].views, top[1].time_spent) == ("scope", 2, 10)


class TestAnalyticsApi:

    def test_summary_for_owner(self, client, fake_db, proposal):
        fake_db.seed("proposal_analytics", proposal_id=proposal["id"], event_type="view", visitor_id="v", duration=40)
        response = client.get(f"/api/v1/proposals/{proposal['id']}/analytics")
        assert response.status_code == 200
        assert response.json()["total_views"] == 1

    def test_other_users_proposal(self, client, fake_db):
        other = fake_db.seed("proposals", user_id="22222222-2222-4222-8222-222222222222", title="Theirs")
        response = client.get(f"/api/v1/proposals/{other['id']}/analytics")
        assert response.status_code == 404
