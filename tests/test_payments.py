# =============================================================================
# tests/test_payments.py - Payment Link, Subscription and PayPal Client Tests
# =============================================================================

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.exceptions import (
    InvalidAmountError,
    InvalidPlanError,
    InvalidRequestError,
    PaymentProviderError,
    PaymentSettingsMissingError,
)
from core.models.payment import PaymentLinkCreate
from core.models.subscription import PlanPaymentCreate, SubscriptionCreate
from core.services.payment_service import (
    PaymentLinkService,
    PaymentSettingsService,
    format_amount,
    mask_secret,
    paypal_me_url,
)
from core.services.subscription_service import SubscriptionService
from lib.paypal_client import PayPalClient, PayPalClientError

from tests.conftest import USER_ID

ORDER = {
    "id": "ORDER-1",
    "status": "CREATED",
    "links": [
        {"rel": "self", "href": "https://api-m.sandbox.paypal.com/v2/checkout/orders/ORDER-1"},
        {"rel": "approve", "href": "https://www.sandbox.paypal.com/checkoutnow?token=ORDER-1"},
    ],
}


def http_response(status_code: int, payload: dict) -> httpx.Response:
    return httpx.Response(status_code, json=payload, request=httpx.Request("POST", "https://paypal.test"))


# =============================================================================
# Helpers
# =============================================================================

class TestHelpers:

    @pytest.mark.parametrize("amount, expected", [(1500.0, "1500"), (12.5, "12.50"), (99, "99")])
    def test_format_amount(self, amount, expected):
        assert format_amount(amount) == expected

    def test_paypal_me_url(self):
        assert paypal_me_url("acme", 250, "usd") == "https://www.paypal.com/paypalme/acme/250USD"

    def test_mask_secret(self):
        assert mask_secret("sk_test_abcdef1234") == "****1234"
        assert mask_secret("abc") == "****"
        assert mask_secret(None) is None


# =============================================================================
# Payment Settings
# =============================================================================

class TestPaymentSettings:

    def test_unconfigured(self, fake_db):
        result = PaymentSettingsService.get_settings(USER_ID)
        assert result.stripe_configured is False
        assert result.paypal_configured is False
        assert result.paypal_environment == "sandbox"

    def test_secrets_are_masked(self, client):
        response = client.put("/api/v1/payment-settings", json={
            "stripe_secret_key": "sk_test_supersecret9876",
            "paypal_merchant_id": "acme",
        })

        body = response.json()
        assert response.status_code == 200
        assert body["stripe_configured"] is True
        assert body["stripe_secret_key_hint"] == "****9876"
        assert "sk_test_supersecret9876" not in response.text
        assert body["paypal_configured"] is True

    def test_invalid_environment(self, client):
        response = client.put("/api/v1/payment-settings", json={"paypal_environment": "staging"})
        assert response.status_code == 422


# =============================================================================
# Payment Links
# =============================================================================

class TestPaymentLinks:

    @pytest.mark.parametrize("amount", [0, -5, float("nan"), float("inf"), float("-inf")])
    def test_non_positive_amount_rejected_first(self, fake_db, amount):
        with patch("core.services.payment_service.SupabaseClient.fetch_payment_settings") as fetch:
            with pytest.raises(InvalidAmountError):
                PaymentLinkService.create_link(
                    "00000000-0000-4000-8000-000000000000",
                    USER_ID,
                    PaymentLinkCreate(provider="stripe", amount=amount),
                )
        fetch.assert_not_called()

    def test_missing_settings(self, proposal):
        with pytest.raises(PaymentSettingsMissingError):
            PaymentLinkService.create_link(proposal["id"], USER_ID, PaymentLinkCreate(provider="paypal", amount=100))

    def test_stripe_requires_secret_key(self, fake_db, proposal):
        fake_db.seed("user_payment_settings", user_id=USER_ID, paypal_merchant_id="acme")
        with pytest.raises(PaymentSettingsMissingError):
            PaymentLinkService.create_link(proposal["id"], USER_ID, PaymentLinkCreate(provider="stripe", amount=100))

    def test_paypal_me_fallback(self, fake_db, proposal):
        fake_db.seed("user_payment_settings", user_id=USER_ID, paypal_merchant_id="acme")

        link = PaymentLinkService.create_link(
            proposal["id"], USER_ID, PaymentLinkCreate(provider="paypal", amount=1500, currency="usd"),
        )

        assert link["payment_url"] == "https://www.paypal.com/paypalme/acme/1500USD"
        assert link["status"] == "pending"
        assert link["currency"] == "usd"
        assert len(fake_db.rows("payment_links")) == 1

    def test_paypal_recurring_rejected(self, fake_db, proposal):
        fake_db.seed("user_payment_settings", user_id=USER_ID, paypal_merchant_id="acme")
        with pytest.raises(InvalidRequestError):
            PaymentLinkService.create_link(
                proposal["id"], USER_ID,
                PaymentLinkCreate(provider="paypal", amount=50, payment_type="recurring", interval="month"),
            )

    def test_paypal_order_with_credentials(self, fake_db, proposal):
        fake_db.seed("user_payment_settings", user_id=USER_ID, paypal_client_id="id", paypal_client_secret="secret")

        with patch.object(PayPalClient, "create_order", return_value=ORDER) as create_order:
            link = PaymentLinkService.create_link(
                proposal["id"], USER_ID, PaymentLinkCreate(provider="paypal", amount=250),
            )

        assert link["payment_url"].endswith("token=ORDER-1")
        assert link["paypal_order_id"] == "ORDER-1"
        assert create_order.call_args.kwargs["return_url"].startswith("https://app.proposalkraft.test/payment-success")

    def test_paypal_error_maps_to_provider_error(self, fake_db, proposal):
        fake_db.seed("user_payment_settings", user_id=USER_ID, paypal_client_id="id", paypal_client_secret="secret")
        with patch.object(PayPalClient, "create_order", side_effect=PayPalClientError("boom", status_code=500)):
            with pytest.raises(PaymentProviderError):
                PaymentLinkService.create_link(proposal["id"], USER_ID, PaymentLinkCreate(provider="paypal", amount=250))

    def test_stripe_link(self, fake_db, proposal):
        fake_db.seed("user_payment_settings", user_id=USER_ID, stripe_secret_key="sk_test_123")

        with patch("stripe.Price.create", return_value=SimpleNamespace(id="price_1")) as price_create, \
                patch("stripe.PaymentLink.create",
                      return_value=SimpleNamespace(id="plink_1", url="https://buy.stripe.com/test_1")):
            link = PaymentLinkService.create_link(
                proposal["id"], USER_ID,
                PaymentLinkCreate(provider="stripe", amount=49.99, payment_type="recurring", interval="month"),
            )

        kwargs = price_create.call_args.kwargs
        assert kwargs["unit_amount"] == 4999
        assert kwargs["recurring"] == {"interval": "month"}
        assert kwargs["api_key"] == "sk_test_123"
        assert link["stripe_payment_link_id"] == "plink_1"
        assert link["payment_url"] == "https://buy.stripe.com/test_1"

    def test_stripe_recurring_needs_interval(self, fake_db, proposal):
        fake_db.seed("user_payment_settings", user_id=USER_ID, stripe_secret_key="sk_test_123")
        with pytest.raises(InvalidRequestError):
            PaymentLinkService.create_link(
                proposal["id"], USER_ID, PaymentLinkCreate(provider="stripe", amount=10, payment_type="recurring"),
            )

    def test_api_create_and_list(self, client, fake_db, proposal):
        fake_db.seed("user_payment_settings", user_id=USER_ID, paypal_merchant_id="acme")

        created = client.post(f"/api/v1/proposals/{proposal['id']}/payment-links", json={
            "provider": "paypal", "amount": 12.5,
        })
        listed = client.get(f"/api/v1/proposals/{proposal['id']}/payment-links")

        assert created.status_code == 201
        assert created.json()["payment_url"].endswith("/12.50USD")
        assert [link["id"] for link in listed.json()] == [created.json()["id"]]

    def test_api_zero_amount(self, client, proposal):
        response = client.post(f"/api/v1/proposals/{proposal['id']}/payment-links", json={
            "provider": "stripe", "amount": 0,
        })
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_AMOUNT"

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_api_non_finite_amount(self, client, fake_db, proposal, literal):
        fake_db.seed("user_payment_settings", user_id=USER_ID, paypal_merchant_id="acme")

        response = client.post(
            f"/api/v1/proposals/{proposal['id']}/payment-links",
            content=f'{{"provider": "paypal", "amount": {literal}}}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_AMOUNT"
        assert fake_db.rows("payment_links") == []


# =============================================================================
# Subscriptions
# =============================================================================

class TestSubscriptions:

    def test_status_without_subscription(self, fake_db):
        status = SubscriptionService.get_status(USER_ID)
        assert status.has_active_subscription is False
        assert status.status == "none"

    def test_expired_period_is_inactive(self, fake_db):
        fake_db.seed("subscriptions", user_id=USER_ID, status="active", plan_type="agency",
                     current_period_end="2020-01-01T00:00:00+00:00")
        assert SubscriptionService.has_active_subscription(USER_ID) is False

    def test_active_status(self, fake_db):
        fake_db.seed("subscriptions", user_id=USER_ID, status="active", plan_type="agency",
                     current_period_end="2999-01-01T00:00:00+00:00", paypal_subscription_id="I-1")
        status = SubscriptionService.get_status(USER_ID)
        assert status.has_active_subscription is True
        assert status.plan_type == "agency"

    def test_unconfigured_plan(self, fake_db):
        with pytest.raises(InvalidPlanError):
            SubscriptionService.create_subscription(USER_ID, SubscriptionCreate(plan_type="enterprise"))

    def test_create_subscription_passes_user_as_custom_id(self, fake_db, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "PAYPAL_PLAN_ID_AGENCY", "P-AGENCY")
        monkeypatch.setattr(settings, "PAYPAL_CLIENT_ID", "id")
        monkeypatch.setattr(settings, "PAYPAL_CLIENT_SECRET", "secret")
        subscription = {"id": "I-NEW", "links": [{"rel": "approve", "href": "https://paypal.test/approve"}]}

        with patch.object(PayPalClient, "create_subscription", return_value=subscription) as create:
            result = SubscriptionService.create_subscription(USER_ID, SubscriptionCreate(plan_type="agency"))

        assert create.call_args.args[0] == "P-AGENCY"
        assert create.call_args.kwargs["custom_id"] == USER_ID
        assert result.approval_url == "https://paypal.test/approve"

    def test_plan_payment_records_pending_row(self, fake_db, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "PAYPAL_CLIENT_ID", "id")
        monkeypatch.setattr(settings, "PAYPAL_CLIENT_SECRET", "secret")

        with patch.object(PayPalClient, "create_order", return_value=ORDER):
            result = SubscriptionService.create_plan_payment(
                USER_ID, PlanPaymentCreate(plan_type="freelance", amount=190),
            )

        assert result.order_id == "ORDER-1"
        [row] = fake_db.rows("payments")
        assert (row["paypal_order_id"], row["plan_type"], row["status"]) == ("ORDER-1", "freelance", "pending")

    @pytest.mark.parametrize("amount", [0, float("nan"), float("inf")])
    def test_plan_payment_amount(self, fake_db, amount):
        with pytest.raises(InvalidAmountError):
            SubscriptionService.create_plan_payment(USER_ID, PlanPaymentCreate(plan_type="freelance", amount=amount))
        assert fake_db.rows("payments") == []

    def test_api_status(self, client):
        response = client.get("/api/v1/subscriptions/status")
        assert response.status_code == 200
        assert response.json()["has_active_subscription"] is False


# =============================================================================
# PayPal Client
# =============================================================================

class TestPayPalClient:

    def test_requires_credentials(self):
        with pytest.raises(PayPalClientError):
            PayPalClient("", "")

    def test_environment(self):
        assert PayPalClient("id", "secret", environment="live").base_url == "https://api-m.paypal.com"
        assert PayPalClient("id", "secret").base_url == "https://api-m.sandbox.paypal.com"

    def test_token_is_cached(self):
        client = PayPalClient("id", "secret")
        token_response = http_response(200, {"access_token": "A21", "expires_in": 3600})

        with patch("lib.paypal_client.httpx.post", return_value=token_response) as post:
            assert client.get_access_token() == "A21"
            assert client.get_access_token() == "A21"

        post.assert_called_once()

    def test_auth_failure(self):
        with patch("lib.paypal_client.httpx.post", return_value=http_response(401, {"error": "invalid_client"})):
            with pytest.raises(PayPalClientError) as excinfo:
                PayPalClient("id", "secret").get_access_token()
        assert excinfo.value.status_code == 401

    def test_create_order_body(self):
        client = PayPalClient("id", "secret")
        client._access_token, client._token_expires_at = "A21", float("inf")

        with patch("lib.paypal_client.httpx.request", return_value=http_response(201, ORDER)) as request:
            order = client.create_order(12.5, currency="eur", custom_id="ref")

        body = request.call_args.kwargs["json"]
        assert body["purchase_units"][0]["amount"] == {"currency_code": "EUR", "value": "12.50"}
        assert body["purchase_units"][0]["custom_id"] == "ref"
        assert PayPalClient.approval_url(order).endswith("ORDER-1")

    def test_request_error(self):
        client = PayPalClient("id", "secret")
        client._access_token, client._token_expires_at = "A21", float("inf")

        with patch("lib.paypal_client.httpx.request", return_value=http_response(422, {"name": "UNPROCESSABLE"})):
            with pytest.raises(PayPalClientError) as excinfo:
                client.create_order(10)
        assert excinfo.value.status_code == 422

    def test_verify_signature_needs_headers(self):
        client = PayPalClient("id", "secret")
        request = MagicMock()
        with patch("lib.paypal_client.httpx.request", request):
            assert client.verify_webhook_signature("WH", {"paypal-auth-algo": "SHA256"}, {}) is False
        request.assert_not_called()

    def test_verify_signature_success(self):
        client = PayPalClient("id", "secret")
        client._access_token, client._token_expires_at = "A21", float("inf")
        headers = {
            "PAYPAL-AUTH-ALGO": "SHA256withRSA",
            "PAYPAL-CERT-URL": "https://api.paypal.com/cert",
            "PAYPAL-TRANSMISSION-ID": "t-1",
            "PAYPAL-TRANSMISSION-SIG": "sig",
            "PAYPAL-TRANSMISSION-TIME": "2024-01-15T10:00:00Z",
        }

        with patch("lib.paypal_client.httpx.request",
                   return_value=http_response(200, {"verification_status": "SUCCESS"})) as request:
            assert client.verify_webhook_signature("WH", headers, {"id": "WH-1"}) is True

        assert request.call_args.kwargs["json"]["transmission_id"] == "t-1"

    def test_approval_url_missing(self):
        assert PayPalClient.approval_url({"links": [{"rel": "self", "href": "x"}]}) is None
