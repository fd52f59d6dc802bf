# =============================================================================
# core/services/billing_webhook_service.py - Inbound Provider Webhooks
# =============================================================================
# Applies PayPal and Stripe webhook events to subscriptions, payments and
# payment_links.
#
# Handlers are idempotent: rows are looked up by the provider's id and
# overwritten, so replayed events converge on the same state.
#
# Handlers return the outbound events to emit as a list of
# {"user_id", "event_type", "data"} dicts; the caller queues them.
# =============================================================================

import logging
from datetime import timedelta
from typing import Any, Callable

import stripe

from app.config import settings
from app.exceptions import InvalidWebhookPayloadError, WebhookSignatureError
from core.models.payment import PaymentLinkStatus
from core.models.subscription import PlanType, SubscriptionStatus
from core.models.webhook import WebhookEvent
from lib.paypal_client import PayPalClient, PayPalClientError
from lib.supabase_client import SupabaseClient
from lib.utils import parse_timestamp, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

PLAN_PURCHASE_DAYS = 365

DEACTIVATION_STATUS = {
    "BILLING.SUBSCRIPTION.CANCELLED": SubscriptionStatus.CANCELLED,
    "BILLING.SUBSCRIPTION.SUSPENDED": SubscriptionStatus.SUSPENDED,
    "BILLING.SUBSCRIPTION.EXPIRED": SubscriptionStatus.EXPIRED,
}


def _iso(value: str | None) -> str | None:
    parsed = parse_timestamp(value)
    return parsed.isoformat() if parsed else None


def plan_type_for(plan_id: str | None) -> str:
    """Map a PayPal plan id to a plan type; unknown ids map to freelance."""
    for plan_type, configured in settings.paypal_plan_ids.items():
        if configured and plan_id == configured:
            return plan_type
    return PlanType.FREELANCE.value


def payment_event(user_id: Any, data: dict[str, Any]) -> dict[str, Any]:
    return {
        "user_id": str(user_id),
        "event_type": WebhookEvent.PAYMENT_COMPLETED.value,
        "data": data,
    }


class BillingWebhookService:
    """Applies verified provider events."""

    # -------------------------------------------------------------------------
    # PayPal
    # -------------------------------------------------------------------------

    @staticmethod
    def verify_paypal_event(headers: dict[str, str], event: dict[str, Any]) -> None:
        """
        Verify a PayPal webhook against PAYPAL_WEBHOOK_ID.

        Skipped (with a warning) when no webhook id is configured.

        Raises:
            WebhookSignatureError: PayPal did not confirm the signature
        """
        if not settings.PAYPAL_WEBHOOK_ID:
            logger.warning("PAYPAL_WEBHOOK_ID not set, skipping PayPal signature verification")
            return

        try:
            verified = PayPalClient.from_settings().verify_webhook_signature(
                settings.PAYPAL_WEBHOOK_ID, headers, event
            )
        except PayPalClientError as e:
            logger.error(f"PayPal signature verification errored: {e}")
            verified = False

        if not verified:
            raise WebhookSignatureError("PayPal")

    @staticmethod
    def handle_paypal_event(event: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Route a PayPal event to its handler.

        Raises:
            InvalidWebhookPayloadError: Body has no resource.id
        """
        event_type = event.get("event_type") or ""
        resource = event.get("resource")
        if not isinstance(resource, dict) or not resource.get("id"):
            raise InvalidWebhookPayloadError()

        handler = PAYPAL_HANDLERS.get(event_type)
        if handler is None:
            logger.info(f"Unhandled PayPal webhook event: {event_type}")
            return []

        logger.info(f"Processing PayPal {event_type} for {resource['id']}")
        return handler(event_type, resource) or []

    @staticmethod
    def _subscription_activated(event_type: str, resource: dict[str, Any]) -> None:
        row: dict[str, Any] = {
            "paypal_subscription_id": resource["id"],
            "plan_type": plan_type_for(resource.get("plan_id")),
            "status": SubscriptionStatus.ACTIVE.value,
            "current_period_start": _iso(resource.get("start_time")) or utc_now_iso(),
            "current_period_end": _iso((resource.get("billing_info") or {}).get("next_billing_time")),
            "updated_at": utc_now_iso(),
        }
        if resource.get("custom_id"):
            row["user_id"] = resource["custom_id"]

        client = SupabaseClient.get_client()
        client.table("subscriptions").upsert(row, on_conflict="paypal_subscription_id").execute()
        logger.info(f"Subscription activated: {resource['id']} ({row['plan_type']})")

    @staticmethod
    def _subscription_deactivated(event_type: str, resource: dict[str, Any]) -> None:
        status = DEACTIVATION_STATUS[event_type]
        BillingWebhookService._update_subscription(resource["id"], {
            "status": status.value,
            "cancelled_at": utc_now_iso(),
        })
        logger.info(f"Subscription {resource['id']} is now {status.value}")

    @staticmethod
    def _subscription_payment_failed(event_type: str, resource: dict[str, Any]) -> None:
        BillingWebhookService._update_subscription(resource["id"], {
            "status": SubscriptionStatus.SUSPENDED.value,
        })
        logger.info(f"Subscription {resource['id']} suspended after failed payment")

    @staticmethod
    def _subscription_renewed(event_type: str, resource: dict[str, Any]) -> None:
        BillingWebhookService._update_subscription(resource["id"], {
            "status": SubscriptionStatus.ACTIVE.value,
            "current_period_end": _iso((resource.get("billing_info") or {}).get("next_billing_time")),
        })
        logger.info(f"Subscription {resource['id']} renewed")

    @staticmethod
    def _order_approved(event_type: str, resource: dict[str, Any]) -> None:
        BillingWebhookService._update_payments(resource["id"], {"status": "pending"})

    @staticmethod
    def _capture_completed(event_type: str, resource: dict[str, Any]) -> list[dict[str, Any]]:
        order_id = BillingWebhookService._order_id(resource)
        now = utc_now_iso()
        events = []

        payments = BillingWebhookService._update_payments(order_id, {
            "status": "completed",
            "completed_at": now,
        })
        for payment in payments:
            BillingWebhookService._grant_plan(payment)
            events.append(payment_event(payment["user_id"], {
                "order_id": order_id,
                "amount": payment.get("amount"),
                "plan_type": payment.get("plan_type"),
                "provider": "paypal",
            }))

        client = SupabaseClient.get_client()
        response = (
            client.table("payment_links")
            .update({"status": PaymentLinkStatus.PAID.value, "paid_at": now, "updated_at": now})
            .eq("paypal_order_id", order_id)
            .execute()
        )
        for link in response.data or []:
            events.append(payment_event(link["user_id"], {
                "payment_link_id": link.get("id"),
                "proposal_id": link.get("proposal_id"),
                "amount": link.get("amount"),
                "currency": link.get("currency"),
                "provider": "paypal",
            }))

        logger.info(f"Payment completed for order {order_id}")
        return events

    @staticmethod
    def _capture_failed(event_type: str, resource: dict[str, Any]) -> None:
        BillingWebhookService._update_payments(BillingWebhookService._order_id(resource), {"status": "failed"})

    @staticmethod
    def _order_cancelled(event_type: str, resource: dict[str, Any]) -> None:
        BillingWebhookService._update_payments(resource["id"], {"status": "cancelled"})

    # -------------------------------------------------------------------------
    # Stripe
    # -------------------------------------------------------------------------

    @staticmethod
    def construct_stripe_event(payload: bytes, signature: str | None) -> dict[str, Any]:
        """
        Verify and parse a Stripe webhook.

        Raises:
            WebhookSignatureError: 400 on missing secret, bad payload or signature
        """
        if not settings.STRIPE_WEBHOOK_SECRET:
            logger.error("STRIPE_WEBHOOK_SECRET not configured")
            raise WebhookSignatureError("Stripe", status_code=400)

        try:
            event = stripe.Webhook.construct_event(payload, signature or "", settings.STRIPE_WEBHOOK_SECRET)
        except ValueError as e:
            logger.error(f"Invalid Stripe payload: {e}")
            raise WebhookSignatureError("Stripe", status_code=400)
        except stripe.SignatureVerificationError as e:
            logger.error(f"Invalid Stripe signature: {e}")
            raise WebhookSignatureError("Stripe", status_code=400)

        return event.to_dict() if hasattr(event, "to_dict") else dict(event)

    @staticmethod
    def handle_stripe_event(event: dict[str, Any]) -> list[dict[str, Any]]:
        """Apply a verified Stripe event."""
        event_type = event.get("type")
        if event_type != "checkout.session.completed":
            logger.info(f"Unhandled Stripe webhook event: {event_type}")
            return []

        session = (event.get("data") or {}).get("object") or {}
        link_id = session.get("payment_link")
        if not link_id:
            logger.info(f"Stripe session {session.get('id')} not from a payment link")
            return []

        now = utc_now_iso()
        client = SupabaseClient.get_client()
        response = (
            client.table("payment_links")
            .update({"status": PaymentLinkStatus.PAID.value, "paid_at": now, "updated_at": now})
            .eq("stripe_payment_link_id", link_id)
            .execute()
        )

        events = [
            payment_event(link["user_id"], {
                "payment_link_id": link.get("id"),
                "proposal_id": link.get("proposal_id"),
                "amount": link.get("amount"),
                "currency": link.get("currency"),
                "provider": "stripe",
                "checkout_session_id": session.get("id"),
            })
            for link in response.data or []
        ]
        logger.info(f"Stripe payment link {link_id} paid ({len(events)} links updated)")
        return events

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    @staticmethod
    def _order_id(resource: dict[str, Any]) -> str:
        related = (resource.get("supplementary_data") or {}).get("related_ids") or {}
        return related.get("order_id") or resource["id"]

    @staticmethod
    def _update_subscription(subscription_id: str, fields: dict[str, Any]) -> None:
        client = SupabaseClient.get_client()
        (
            client.table("subscriptions")
            .update({**fields, "updated_at": utc_now_iso()})
            .eq("paypal_subscription_id", subscription_id)
            .execute()
        )

    @staticmethod
    def _update_payments(order_id: str, fields: dict[str, Any]) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        response = (
            client.table("payments")
            .update({**fields, "updated_at": utc_now_iso()})
            .eq("paypal_order_id", order_id)
            .execute()
        )
        return response.data or []

    @staticmethod
    def _grant_plan(payment: dict[str, Any]) -> None:
        """Give the payer one year of their purchased plan. Failures are logged."""
        plan_type = payment.get("plan_type")
        if plan_type not in {plan.value for plan in PlanType}:
            return

        now = utc_now()
        try:
            client = SupabaseClient.get_client()
            client.table("subscriptions").upsert({
                "user_id": payment["user_id"],
                "plan_type": plan_type,
                "status": SubscriptionStatus.ACTIVE.value,
                "current_period_start": now.isoformat(),
                "current_period_end": (now + timedelta(days=PLAN_PURCHASE_DAYS)).isoformat(),
                "updated_at": now.isoformat(),
            }, on_conflict="user_id").execute()
            logger.info(f"Activated {plan_type} plan for user {payment['user_id']}")
        except Exception as e:
            logger.error(f"Subscription update after payment failed: {e}")


PAYPAL_HANDLERS: dict[str, Callable[[str, dict[str, Any]], list[dict[str, Any]] | None]] = {
    "BILLING.SUBSCRIPTION.ACTIVATED": BillingWebhookService._subscription_activated,
    "BILLING.SUBSCRIPTION.CANCELLED": BillingWebhookService._subscription_deactivated,
    "BILLING.SUBSCRIPTION.SUSPENDED": BillingWebhookService._subscription_deactivated,
    "BILLING.SUBSCRIPTION.EXPIRED": BillingWebhookService._subscription_deactivated,
    "BILLING.SUBSCRIPTION.PAYMENT.FAILED": BillingWebhookService._subscription_payment_failed,
    "BILLING.SUBSCRIPTION.RENEWED": BillingWebhookService._subscription_renewed,
    "BILLING.SUBSCRIPTION.UPDATED": BillingWebhookService._subscription_renewed,
    "CHECKOUT.ORDER.APPROVED": BillingWebhookService._order_approved,
    "PAYMENT.CAPTURE.COMPLETED": BillingWebhookService._capture_completed,
    "PAYMENT.CAPTURE.DECLINED": BillingWebhookService._capture_failed,
    "PAYMENT.CAPTURE.FAILED": BillingWebhookService._capture_failed,
    "CHECKOUT.ORDER.CANCELLED": BillingWebhookService._order_cancelled,
}
