# =============================================================================
# core/services/subscription_service.py - Platform Subscriptions
# =============================================================================
# ProposalKraft's own billing through the platform PayPal account:
#
#   - Recurring: PayPal subscription on a configured plan id
#   - One-time: PayPal order granting a plan for one year
#
# Subscription rows are written by the billing webhooks
# (core/services/billing_webhook_service.py), not here.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import InvalidAmountError, InvalidPlanError, PaymentProviderError
from core.models.subscription import (
    PlanPaymentCreate,
    PlanPaymentResponse,
    SubscriptionCheckoutResponse,
    SubscriptionCreate,
    SubscriptionStatusResponse,
)
from lib.paypal_client import PayPalClient, PayPalClientError
from lib.supabase_client import SupabaseClient
from lib.utils import is_positive_amount, normalize_uuid

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Service for platform plan billing."""

    @staticmethod
    def get_status(user_id: UUID | str) -> SubscriptionStatusResponse:
        """Current user's active subscription, or status "none"."""
        subscription = SupabaseClient.fetch_active_subscription(user_id)
        if not subscription:
            return SubscriptionStatusResponse(has_active_subscription=False)

        return SubscriptionStatusResponse(
            has_active_subscription=True,
            plan_type=subscription.get("plan_type"),
            status=subscription.get("status") or "active",
            current_period_end=subscription.get("current_period_end"),
            paypal_subscription_id=subscription.get("paypal_subscription_id"),
        )

    @staticmethod
    def has_active_subscription(user_id: UUID | str) -> bool:
        return SupabaseClient.fetch_active_subscription(user_id) is not None

    @staticmethod
    def get_plan_ids() -> dict[str, str]:
        """Configured PayPal plan ids keyed by plan type."""
        return settings.paypal_plan_ids

    @staticmethod
    def create_subscription(
        user_id: UUID | str,
        data: SubscriptionCreate,
    ) -> SubscriptionCheckoutResponse:
        """
        Start a PayPal subscription checkout.

        The user id travels as custom_id so the ACTIVATED webhook can link
        the subscription to the user.

        Raises:
            InvalidPlanError: No plan id configured for the plan type
            PaymentProviderError: PayPal rejected the request
        """
        plan_id = settings.paypal_plan_ids.get(data.plan_type.value)
        if not plan_id:
            raise InvalidPlanError(data.plan_type.value)

        base = settings.PUBLIC_APP_URL.rstrip("/")
        try:
            paypal = PayPalClient.from_settings()
            subscription = paypal.create_subscription(
                plan_id,
                return_url=data.return_url or f"{base}/dashboard?subscription=success",
                cancel_url=data.cancel_url or f"{base}/pricing?subscription=cancelled",
                custom_id=normalize_uuid(user_id),
            )
        except PayPalClientError as e:
            logger.error(f"PayPal subscription failed for user {user_id}: {e}")
            raise PaymentProviderError("paypal", e.message)

        logger.info(f"Created PayPal subscription {subscription.get('id')} for user {user_id}")
        return SubscriptionCheckoutResponse(
            subscription_id=subscription.get("id", ""),
            approval_url=PayPalClient.approval_url(subscription),
        )

    @staticmethod
    def create_plan_payment(
        user_id: UUID | str,
        data: PlanPaymentCreate,
    ) -> PlanPaymentResponse:
        """
        Create a one-time PayPal order for a plan and record it as pending.

        A failed payments insert is logged; the order is still returned so
        the user can complete checkout.

        Raises:
            InvalidAmountError: amount not a finite number > 0
            PaymentProviderError: PayPal rejected the request
        """
        if not is_positive_amount(data.amount):
            raise InvalidAmountError(data.amount)

        uid = normalize_uuid(user_id)
        plan = data.plan_type.value
        base = settings.PUBLIC_APP_URL.rstrip("/")

        try:
            paypal = PayPalClient.from_settings()
            order = paypal.create_order(
                data.amount,
                currency="USD",
                description=f"ProposalKraft {plan.capitalize()} Plan - One-time Payment",
                return_url=f"{base}/dashboard?payment=success&plan={plan}",
                cancel_url=f"{base}/payment?payment=cancelled&plan={plan}",
                custom_id=f"{uid}_{plan}",
            )
        except PayPalClientError as e:
            logger.error(f"PayPal plan payment failed for user {user_id}: {e}")
            raise PaymentProviderError("paypal", e.message)

        approval_url = PayPalClient.approval_url(order)
        if not approval_url:
            raise PaymentProviderError("paypal", "No approval URL received from PayPal")

        row: dict[str, Any] = {
            "user_id": uid,
            "paypal_order_id": order.get("id"),
            "plan_type": plan,
            "amount": data.amount,
            "status": "pending",
            "payment_method": data.payment_method,
            "user_name": data.user_name,
            "user_email": data.user_email,
            "user_country": data.user_country,
        }
        client = SupabaseClient.get_client()
        try:
            client.table("payments").insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to record plan payment {order.get('id')}: {e}")

        return PlanPaymentResponse(
            order_id=order.get("id", ""),
            approval_url=approval_url,
            status=order.get("status"),
        )
