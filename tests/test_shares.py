# =============================================================================
# tests/test_shares.py - Secure Share Tests
# =============================================================================
# Token handling, share creation and the public resolve endpoint.
# =============================================================================

import json
from datetime import timedelta
from unittest.mock import patch
from urllib.parse import quote

import pytest

from app.exceptions import ShareExpiredError, ShareForbiddenError, ShareNotFoundError
from core.models.share import ShareCreate, SharePermissions
from core.services.share_service import (
    ShareService,
    build_share_url,
    generate_share_token,
    normalize_share_token,
    parse_permissions,
    to_url_token,
)
from lib.utils import utc_now

from tests.conftest import USER_ID, OTHER_USER_ID


def seed_share(fake_db, proposal, days=7, **permissions):
    token = generate_share_token()
    perms = {"allowComments": False, "trackViews": True, "requireSignature": False, **permissions}
    share = fake_db.seed(
        "secure_proposal_shares",
        proposal_id=proposal["id"],
        created_by=USER_ID,
        share_token=token,
        permissions=json.dumps(perms),
        expires_at=(utc_now() + timedelta(days=days)).isoformat(),
        content_snapshot=None,
        accessed_count=0,
    )
    return share, to_url_token(token)


# =============================================================================
# Token Helpers
# =============================================================================

class TestShareTokens:
    """Stored tokens are standard base64; URLs carry the URL-safe form."""

    def test_generated_token_shape(self):
        token = generate_share_token()
        assert len(token) == 44
        assert token.endswith("=")

    def test_url_form_round_trips(self):
        for _ in range(20):
            token = generate_share_token()
            assert normalize_share_token(to_url_token(token)) == token

    def test_percent_encoded_token(self):
        token = "ab+c/d=="
        assert normalize_share_token(quote(token, safe="")) == token

    def test_space_becomes_plus(self):
        assert normalize_share_token("ab c/d") == "ab+c/d=="

    def test_url_safe_alphabet(self):
        assert normalize_share_token("ab-c_d") == "ab+c/d=="

    def test_share_url(self):
        url = build_share_url("ab+c/d==")
        assert url == "https://app.proposalkraft.test/shared/ab-c_d"


class TestParsePermissions:

    def test_json_string(self):
        perms = parse_permissions('{"allowComments": true, "trackViews": false}')
        assert perms.allow_comments is True
        assert perms.track_views is False
        assert perms.require_signature is False

    def test_malformed_falls_back_to_defaults(self):
        assert parse_permissions("{not json") == SharePermissions()
        assert parse_permissions(None) == SharePermissions()


# =============================================================================
# Service
# =============================================================================

class TestShareService:

    def test_create_share_defaults(self, fake_db, proposal):
        share = ShareService.create_share(proposal["id"], USER_ID, ShareCreate())

        stored = fake_db.rows("secure_proposal_shares")[0]
        assert json.loads(stored["permissions"]) == {
            "allowComments": False,
            "trackViews": True,
            "requireSignature": False,
        }
        expires = stored["expires_at"]
        assert expires > (utc_now() + timedelta(days=29)).isoformat()
        assert share["share_url"].endswith(to_url_token(stored["share_token"]))
        assert fake_db.rows("proposals")[0]["sharing_enabled"] is True

    def test_snapshot_freezes_content(self, fake_db, proposal):
        ShareService.create_share(proposal["id"], USER_ID, ShareCreate(snapshot=True))
        assert fake_db.rows("secure_proposal_shares")[0]["content_snapshot"] == proposal["content"]

    def test_other_user_cannot_share(self, fake_db, proposal):
        from app.exceptions import ProposalNotFoundError

        with pytest.raises(ProposalNotFoundError):
            ShareService.create_share(proposal["id"], OTHER_USER_ID, ShareCreate())

    def test_unknown_token(self, fake_db):
        with pytest.raises(ShareNotFoundError):
            ShareService.get_valid_share("does-not-exist-token")

    def test_expired_token(self, fake_db, proposal):
        _, token = seed_share(fake_db, proposal, days=-1)
        with pytest.raises(ShareExpiredError):
            ShareService.get_valid_share(token)

    def test_require_permission(self, fake_db, proposal):
        share, _ = seed_share(fake_db, proposal, allowComments=False)
        with pytest.raises(ShareForbiddenError):
            ShareService.require_permission(share, "allow_comments")

    def test_resolve_prefers_snapshot(self, fake_db, proposal):
        share, token = seed_share(fake_db, proposal, trackViews=False)
        fake_db.rows("secure_proposal_shares")[0]["content_snapshot"] = [{"type": "notes", "content": "Frozen"}]

        result = ShareService.resolve_share(token)

        assert [s.text for s in result["view"].sections] == ["Frozen"]
        assert result["tracked"] is False
        assert "user_id" not in result["view"].proposal

    def test_tracked_visit_marks_sent_proposal_viewed(self, fake_db, proposal):
        fake_db.rows("proposals")[0]["status"] = "sent"
        share, token = seed_share(fake_db, proposal)

        result = ShareService.resolve_share(token, ip_address="203.0.113.7", user_agent="Mozilla/5.0 (iPhone) Mobile")

        assert result["tracked"] is True
        events = fake_db.rows("proposal_analytics")
        assert len(events) == 1
        assert events[0]["event_type"] == "view"
        assert fake_db.rows("secure_proposal_shares")[0]["accessed_count"] == 1
        assert fake_db.rows("proposals")[0]["status"] == "viewed"


# =============================================================================
# API
# =============================================================================

class TestShareApi:

    def test_create_and_list(self, client, proposal):
        created = client.post(f"/api/v1/proposals/{proposal['id']}/shares", json={"expires_in_days": 14})
        assert created.status_code == 201
        body = created.json()
        assert body["share_url"].startswith("https://app.proposalkraft.test/shared/")
        assert body["permissions"]["track_views"] is True

        listed = client.get(f"/api/v1/proposals/{proposal['id']}/shares")
        assert listed.status_code == 200
        assert [s["id"] for s in listed.json()] == [body["id"]]

    def test_revoke(self, client, fake_db, proposal):
        share, token = seed_share(fake_db, proposal)
        response = client.delete(f"/api/v1/shares/{share['id']}")
        assert response.status_code == 200
        assert client.get(f"/api/v1/shared/{token}").status_code == 404

    def test_email_share_queues_email(self, client, fake_db, proposal, queued):
        response = client.post(
            f"/api/v1/proposals/{proposal['id']}/shares/email",
            json={"recipient_email": "cto@acme.test", "recipient_name": "Sam", "message": "Take a look"},
        )
        assert response.status_code == 201
        assert response.json()["email_queued"] is True

        [(_, kwargs)] = queued["emails"]
        assert kwargs["recipient_email"] == "cto@acme.test"
        assert "/shared/" in kwargs["share_url"]
        assert kwargs["proposal_title"] == "Website Redesign"
        assert [e["event_type"] for e in fake_db.rows("proposal_analytics")] == ["share"]


class TestSharedApi:

    def test_unknown_token_is_404(self, anonymous_client, fake_db):
        response = anonymous_client.get("/api/v1/shared/unknown-token-value")
        assert response.status_code == 404
        assert response.json()["detail"] == "Invalid or expired share link"

    def test_expired_token_is_410(self, anonymous_client, fake_db, proposal):
        _, token = seed_share(fake_db, proposal, days=-2)
        response = anonymous_client.get(f"/api/v1/shared/{token}")
        assert response.status_code == 410
        assert response.json()["detail"] == "This share link has expired"

    def test_unusual_content_keys_still_render(self, anonymous_client, fake_db, proposal):
        _, token = seed_share(fake_db, proposal, trackViews=False)
        fake_db.rows("proposals")[0]["content"] = {"\u00b2": {"type": "objective", "content": "x"}}

        response = anonymous_client.get(f"/api/v1/shared/{token}")

        assert response.status_code == 200
        assert [s["type"] for s in response.json()["sections"]] == ["legacy"]

    def test_deleted_proposal_is_404(self, anonymous_client, fake_db, proposal):
        _, token = seed_share(fake_db, proposal)
        fake_db.rows("proposals").clear()
        response = anonymous_client.get(f"/api/v1/shared/{token}")
        assert response.status_code == 404
        assert response.json()["detail"].startswith("Proposal not found")

    def test_tracked_view_emits_event(self, anonymous_client, fake_db, proposal, queued):
        _, token = seed_share(fake_db, proposal)
        response = anonymous_client.get(f"/api/v1/shared/{token}", params={"visitor_id": "v-1"})

        assert response.status_code == 200
        body = response.json()
        assert body["proposal"]["title"] == "Website Redesign"
        assert [s["type"] for s in body["sections"]] == ["executive_summary", "scope_of_work", "pricing"]

        [(args, _)] = queued["webhooks"]
        assert args[0] == USER_ID
        assert args[1] == "proposal.viewed"

    def test_untracked_view_emits_nothing(self, anonymous_client, fake_db, proposal, queued):
        _, token = seed_share(fake_db, proposal, trackViews=False)
        assert anonymous_client.get(f"/api/v1/shared/{token}").status_code == 200
        assert queued["webhooks"] == []
        assert fake_db.rows("proposal_analytics") == []

    def test_failed_visit_emits_nothing(self, anonymous_client, fake_db, proposal, queued):
        _, token = seed_share(fake_db, proposal)

        with patch(
            "core.services.analytics_service.AnalyticsService.insert_event",
            side_effect=Exception("analytics table unavailable"),
        ):
            response = anonymous_client.get(f"/api/v1/shared/{token}")

        assert response.status_code == 200
        assert queued["webhooks"] == []
        assert fake_db.rows("secure_proposal_shares")[0]["accessed_count"] == 0

    def test_comment_requires_permission(self, anonymous_client, fake_db, proposal):
        _, token = seed_share(fake_db, proposal)
        response = anonymous_client.post(
            f"/api/v1/shared/{token}/events",
            json={"event_type": "comment", "metadata": {"text": "Looks good"}},
        )
        assert response.status_code == 403

    def test_section_view_recorded(self, anonymous_client, fake_db, proposal):
        _, token = seed_share(fake_db, proposal)
        response = anonymous_client.post(
            f"/api/v1/shared/{token}/events",
            json={"event_type": "section_view", "section_id": "pricing", "duration": 30},
        )
        assert response.status_code == 201
        [event] = fake_db.rows("proposal_analytics")
        assert event["section_id"] == "pricing"
        assert event["metadata"]["share_id"]
