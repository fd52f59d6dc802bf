# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the API schemas:
# - Valid data is accepted and parsed correctly
# - Invalid data raises ValidationError
# - Default values work as expected
# - Aliased fields serialize the way the web client stores them
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

from uuid import uuid4

import pytest
from pydantic import ValidationError

from core.models import (
    AnalyticsEventCreate,
    BrandKitCreate,
    BrandKitUpdate,
    PaymentLinkCreate,
    PaymentSettingsUpdate,
    ProposalCreate,
    ProposalList,
    ProposalResponse,
    ProposalStatus,
    ProposalUpdate,
    ShareCreate,
    ShareEmailRequest,
    SharePermissions,
    SignRequest,
    SubscriptionStatusResponse,
    WebhookConfigCreate,
    WebhookEvent,
)


# =============================================================================
# Proposal Model Tests
# =============================================================================

class TestProposalCreate:
    """Tests for ProposalCreate model."""

    def test_minimal(self):
        """Only a title is required."""
        proposal = ProposalCreate(title="Website Redesign")

        assert proposal.content is None
        assert proposal.template_id is None
        assert proposal.requires_signature is False

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            ProposalCreate(title="")

    def test_negative_worth_rejected(self):
        with pytest.raises(ValidationError):
            ProposalCreate(title="Audit", worth=-1)

    def test_content_accepts_list_or_object(self):
        assert ProposalCreate(title="A", content=[{"type": "pricing"}]).content == [{"type": "pricing"}]
        assert ProposalCreate(title="B", content={"sections": []}).content == {"sections": []}


class TestProposalUpdate:
    """Partial updates only carry the fields that were sent."""

    def test_unset_fields_are_excluded(self):
        update = ProposalUpdate(status="sent")
        assert update.model_dump(exclude_unset=True, mode="json") == {"status": "sent"}

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            ProposalUpdate(status="archived")


class TestProposalResponse:

    def test_defaults(self):
        response = ProposalResponse(id=uuid4(), user_id=uuid4(), title="Audit")

        assert response.status == ProposalStatus.DRAFT
        assert response.sharing_enabled is False

    def test_list_requires_positive_page(self):
        with pytest.raises(ValidationError):
            ProposalList(proposals=[], total=0, page=0, page_size=10)


# =============================================================================
# Share Model Tests
# =============================================================================

class TestSharePermissions:
    """Permissions use camelCase keys on the wire."""

    def test_defaults(self):
        permissions = SharePermissions()

        assert permissions.track_views is True
        assert permissions.allow_comments is False
        assert permissions.require_signature is False

    def test_accepts_aliases_and_names(self):
        assert SharePermissions(allowComments=True).allow_comments is True
        assert SharePermissions(allow_comments=True).allow_comments is True

    def test_dumps_by_alias(self):
        dumped = SharePermissions(requireSignature=True).model_dump(by_alias=True)
        assert dumped == {"allowComments": False, "trackViews": True, "requireSignature": True}


class TestShareCreate:

    def test_expiry_bounds(self):
        with pytest.raises(ValidationError):
            ShareCreate(expires_in_days=0)
        with pytest.raises(ValidationError):
            ShareCreate(expires_in_days=366)

    def test_email_request_requires_recipient(self):
        with pytest.raises(ValidationError):
            ShareEmailRequest()
        assert ShareEmailRequest(recipient_email="cto@acme.test").snapshot is False


# =============================================================================
# Signature Model Tests
# =============================================================================

class TestSignRequest:
    """Exactly one of signature_data or typed_name is required."""

    def test_drawn(self):
        request = SignRequest(signature_data="data:image/png;base64,iVBORw0KGgo=")
        assert request.typed_name is None

    def test_typed(self):
        assert SignRequest(typed_name="Jane Doe").typed_name == "Jane Doe"

    @pytest.mark.parametrize("data", [
        {},
        {"signature_data": "data:image/png;base64,AAAA", "typed_name": "Jane"},
        {"signature_data": "https://example.test/sig.png"},
    ])
    def test_invalid(self, data):
        with pytest.raises(ValidationError):
            SignRequest(**data)


# =============================================================================
# Branding, Analytics and Webhook Model Tests
# =============================================================================

class TestBrandKit:

    def test_defaults(self):
        kit = BrandKitCreate(name="Studio")
        assert (kit.primary_color, kit.font_primary) == ("#22c55e", "Inter")

    @pytest.mark.parametrize("color", ["green", "#12345", "22c55e"])
    def test_bad_color(self, color):
        with pytest.raises(ValidationError):
            BrandKitUpdate(primary_color=color)


class TestAnalyticsEventCreate:

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            AnalyticsEventCreate(event_type="view", duration=-3)

    def test_unknown_event_rejected(self):
        with pytest.raises(ValidationError):
            AnalyticsEventCreate(event_type="scroll")


class TestWebhookConfigCreate:

    def test_valid(self):
        config = WebhookConfigCreate(
            name="CRM",
            webhook_url="https://hooks.example.test/proposals",
            events=["proposal.signed", "payment.completed"],
        )
        assert config.events == [WebhookEvent.PROPOSAL_SIGNED, WebhookEvent.PAYMENT_COMPLETED]
        assert config.is_active is True

    def test_needs_an_event(self):
        with pytest.raises(ValidationError):
            WebhookConfigCreate(name="CRM", webhook_url="https://hooks.example.test", events=[])

    def test_bad_url(self):
        with pytest.raises(ValidationError):
            WebhookConfigCreate(name="CRM", webhook_url="not a url", events=["proposal.created"])


# =============================================================================
# Billing Model Tests
# =============================================================================

class TestBillingModels:

    def test_payment_link_defaults(self):
        link = PaymentLinkCreate(provider="stripe", amount=100)
        assert (link.currency, link.payment_type.value) == ("USD", "one_time")

    def test_unknown_provider(self):
        with pytest.raises(ValidationError):
            PaymentLinkCreate(provider="venmo", amount=100)

    def test_paypal_environment(self):
        assert PaymentSettingsUpdate(paypal_environment="live").paypal_environment == "live"
        with pytest.raises(ValidationError):
            PaymentSettingsUpdate(paypal_environment="prod")

    def test_subscription_status_default(self):
        status = SubscriptionStatusResponse(has_active_subscription=False)
        assert status.status == "none"
        assert status.plan_type is None
