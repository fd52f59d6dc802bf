# =============================================================================
# lib/paypal_client.py - PayPal REST Client
# =============================================================================
# Minimal synchronous client for the PayPal REST endpoints the API uses:
# - OAuth client-credentials token
# - Checkout orders (one-time payment links)
# - Billing subscriptions (platform plans)
# - Webhook signature verification
#
# One PayPalClient instance is bound to one set of credentials, so the same
# class serves platform billing (settings) and users' own PayPal accounts.
#
# Usage:
#   from lib.paypal_client import PayPalClient
#   client = PayPalClient(client_id, client_secret, environment="sandbox")
#   order = client.create_order(amount=1500, currency="USD", description="Website redesign")
#   approval_url = PayPalClient.approval_url(order)
# =============================================================================

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

PAYPAL_BASE_URLS = {
    "sandbox": "https://api-m.sandbox.paypal.com",
    "live": "https://api-m.paypal.com",
}

BRAND_NAME = "ProposalKraft"

# Transmission headers PayPal sends with every webhook
WEBHOOK_HEADERS = {
    "auth_algo": "paypal-auth-algo",
    "cert_url": "paypal-cert-url",
    "transmission_id": "paypal-transmission-id",
    "transmission_sig": "paypal-transmission-sig",
    "transmission_time": "paypal-transmission-time",
}


class PayPalClientError(ApplicationError):
    """PayPal returned an error or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, **kwargs):
        kwargs.setdefault("suggestion", "Check the PayPal client id, secret and environment")
        super().__init__(message, code="PAYPAL_ERROR", **kwargs)
        self.status_code = status_code


class PayPalClient:
    """
    PayPal REST API client bound to one set of credentials.

    Access tokens are cached on the instance until shortly before expiry.

    Example:
        client = PayPalClient.from_settings()
        sub = client.create_subscription(plan_id="P-123")
        print(PayPalClient.approval_url(sub))
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        environment: str = "sandbox",
        timeout: float = 15.0,
    ):
        if not client_id or not client_secret:
            raise PayPalClientError(
                "PayPal credentials not configured",
                suggestion="Set the PayPal client id and secret",
            )
        self.client_id = client_id
        self.client_secret = client_secret
        self.environment = "live" if environment in ("live", "production") else "sandbox"
        self.base_url = PAYPAL_BASE_URLS[self.environment]
        self.timeout = timeout
        self._access_token: str | None = None
        self._token_expires_at: float = 0

    @classmethod
    def from_settings(cls) -> "PayPalClient":
        """Build a client for the platform account configured in settings."""
        from app.config import settings

        return cls(
            settings.PAYPAL_CLIENT_ID,
            settings.PAYPAL_CLIENT_SECRET,
            environment=settings.PAYPAL_ENV,
        )

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    def get_access_token(self) -> str:
        """
        Fetch (or reuse) an OAuth access token.

        Raises:
            PayPalClientError: If PayPal rejects the credentials
        """
        if self._access_token and time.time() < self._token_expires_at:
            return self._access_token

        try:
            response = httpx.post(
                f"{self.base_url}/v1/oauth2/token",
                auth=(self.client_id, self.client_secret),
                data={"grant_type": "client_credentials"},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise PayPalClientError(f"Failed to reach PayPal: {e}")

        if response.status_code != 200:
            logger.error(f"PayPal auth error: {response.status_code} {response.text[:200]}")
            raise PayPalClientError("Failed to authenticate with PayPal", status_code=response.status_code)

        payload = response.json()
        self._access_token = payload["access_token"]
        # Refresh a minute early
        self._token_expires_at = time.time() + int(payload.get("expires_in", 300)) - 60
        return self._access_token

    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        token = self.get_access_token()
        request_headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        if headers:
            request_headers.update(headers)

        try:
            response = httpx.request(
                method,
                f"{self.base_url}{path}",
                json=json,
                headers=request_headers,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise PayPalClientError(f"Failed to reach PayPal: {e}")

        if response.status_code >= 400:
            logger.error(f"PayPal {method} {path} failed: {response.status_code} {response.text[:300]}")
            raise PayPalClientError(
                f"PayPal request failed with status {response.status_code}",
                status_code=response.status_code,
                details={"path": path, "body": response.text[:300]},
            )
        return response.json() if response.content else {}

    # -------------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------------

    def create_order(
        self,
        amount: float,
        currency: str = "USD",
        description: str | None = None,
        return_url: str | None = None,
        cancel_url: str | None = None,
        custom_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a CAPTURE order for a one-time payment.

        Args:
            amount: Amount in major units (formatted to 2 decimals)
            currency: ISO currency code
            description: Purchase description shown to the payer
            return_url: Where PayPal redirects after approval
            cancel_url: Where PayPal redirects on cancel
            custom_id: Our reference, echoed back in capture webhooks

        Returns:
            PayPal order payload (id, status, links)
        """
        purchase_unit: dict[str, Any] = {
            "amount": {
                "currency_code": currency.upper(),
                "value": f"{amount:.2f}",
            },
        }
        if description:
            purchase_unit["description"] = description
        if custom_id:
            purchase_unit["custom_id"] = custom_id

        application_context: dict[str, Any] = {
            "brand_name": BRAND_NAME,
            "shipping_preference": "NO_SHIPPING",
            "user_action": "PAY_NOW",
        }
        if return_url:
            application_context["return_url"] = return_url
        if cancel_url:
            application_context["cancel_url"] = cancel_url

        order = self._request("POST", "/v2/checkout/orders", json={
            "intent": "CAPTURE",
            "purchase_units": [purchase_unit],
            "application_context": application_context,
        })
        logger.info(f"Created PayPal order {order.get('id')}")
        return order

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def create_subscription(
        self,
        plan_id: str,
        return_url: str | None = None,
        cancel_url: str | None = None,
        custom_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a billing subscription for a PayPal plan.

        Args:
            plan_id: PayPal plan id (P-...)
            return_url: Redirect after approval
            cancel_url: Redirect on cancel
            custom_id: Our user id, echoed back in webhooks

        Returns:
            PayPal subscription payload (id, status, links)
        """
        body: dict[str, Any] = {
            "plan_id": plan_id,
            "payment_method": {
                "payer_selected": "PAYPAL",
                "payee_preferred": "IMMEDIATE_PAYMENT_REQUIRED",
            },
        }
        if custom_id:
            body["custom_id"] = custom_id
        if return_url or cancel_url:
            body["application_context"] = {
                "brand_name": BRAND_NAME,
                "return_url": return_url,
                "cancel_url": cancel_url,
            }

        subscription = self._request(
            "POST",
            "/v1/billing/subscriptions",
            json=body,
            headers={"PayPal-Request-Id": f"subscription-{int(time.time() * 1000)}"},
        )
        logger.info(f"Created PayPal subscription {subscription.get('id')}")
        return subscription

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    def verify_webhook_signature(
        self,
        webhook_id: str,
        headers: dict[str, str],
        event: dict[str, Any],
    ) -> bool:
        """
        Verify a webhook through PayPal's verify-webhook-signature API.

        Args:
            webhook_id: The webhook id registered in the PayPal dashboard
            headers: Inbound request headers (any case)
            event: Parsed webhook body

        Returns:
            True if PayPal reports SUCCESS, False otherwise (including
            missing transmission headers)
        """
        lowered = {k.lower(): v for k, v in headers.items()}
        body: dict[str, Any] = {"webhook_id": webhook_id, "webhook_event": event}
        for field, header in WEBHOOK_HEADERS.items():
            value = lowered.get(header)
            if not value:
                logger.warning(f"PayPal webhook missing header {header}")
                return False
            body[field] = value

        result = self._request("POST", "/v1/notifications/verify-webhook-signature", json=body)
        return result.get("verification_status") == "SUCCESS"

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def approval_url(payload: dict[str, Any]) -> str | None:
        """Return the href of the rel=approve link, if present."""
        for link in payload.get("links") or []:
            if link.get("rel") in ("approve", "payer-action"):
                return link.get("href")
        return None
