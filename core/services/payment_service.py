# =============================================================================
# core/services/payment_service.py - Payment Settings and Payment Links
# =============================================================================
# Users collect payment for a proposal through their own provider account:
#
#   stripe: Price + Payment Link created with the user's secret key
#   paypal: CAPTURE order with the user's REST credentials, else a
#           PayPal.me link for their merchant handle
#
# Every generated link is stored in payment_links as "pending"; the billing
# webhooks flip it to "paid".
# =============================================================================

import logging
from typing import Any
from uuid import UUID

import stripe

from app.config import settings
from app.exceptions import (
    InvalidAmountError,
    InvalidRequestError,
    PaymentProviderError,
    PaymentSettingsMissingError,
)
from core.models.payment import (
    PaymentLinkCreate,
    PaymentLinkStatus,
    PaymentProvider,
    PaymentSettingsResponse,
    PaymentSettingsUpdate,
    PaymentType,
)
from core.services.proposal_service import ProposalService
from lib.paypal_client import PayPalClient, PayPalClientError
from lib.supabase_client import SupabaseClient
from lib.utils import is_positive_amount, normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

PAYPAL_ME_URL = "https://www.paypal.com/paypalme/{merchant}/{amount}{currency}"


def mask_secret(value: str | None) -> str | None:
    """Keep the last four characters of a secret."""
    if not value:
        return None
    return f"****{value[-4:]}" if len(value) > 4 else "****"


def format_amount(amount: float) -> str:
    """Render an amount without a trailing .0 (1500.0 -> "1500", 12.5 -> "12.50")."""
    return str(int(amount)) if float(amount).is_integer() else f"{amount:.2f}"


def paypal_me_url(merchant_id: str, amount: float, currency: str) -> str:
    """
    Example:
        paypal_me_url("acme", 250, "usd")  # https://www.paypal.com/paypalme/acme/250USD
    """
    return PAYPAL_ME_URL.format(
        merchant=merchant_id,
        amount=format_amount(amount),
        currency=currency.upper(),
    )


class PaymentSettingsService:
    """Per-user provider credentials (user_payment_settings)."""

    @staticmethod
    def get_settings(user_id: UUID | str) -> PaymentSettingsResponse:
        """Current settings with secrets masked."""
        row = SupabaseClient.fetch_payment_settings(user_id) or {}
        return PaymentSettingsResponse(
            stripe_configured=bool(row.get("stripe_secret_key")),
            stripe_publishable_key=row.get("stripe_publishable_key"),
            stripe_secret_key_hint=mask_secret(row.get("stripe_secret_key")),
            paypal_configured=bool(
                (row.get("paypal_client_id") and row.get("paypal_client_secret"))
                or row.get("paypal_merchant_id")
            ),
            paypal_client_id=row.get("paypal_client_id"),
            paypal_environment=row.get("paypal_environment") or "sandbox",
            paypal_merchant_id=row.get("paypal_merchant_id"),
        )

    @staticmethod
    def upsert_settings(user_id: UUID | str, data: PaymentSettingsUpdate) -> PaymentSettingsResponse:
        client = SupabaseClient.get_client()
        row = {
            **data.model_dump(exclude_unset=True),
            "user_id": normalize_uuid(user_id),
            "updated_at": utc_now_iso(),
        }

        try:
            client.table("user_payment_settings").upsert(row, on_conflict="user_id").execute()
        except Exception as e:
            logger.error(f"Failed to save payment settings: {e}")
            raise

        logger.info(f"Saved payment settings for user {user_id}")
        return PaymentSettingsService.get_settings(user_id)


class PaymentLinkService:
    """Generates and lists proposal payment links."""

    @staticmethod
    def list_links(proposal_id: str | UUID, user_id: UUID | str) -> list[dict[str, Any]]:
        proposal = ProposalService.get_proposal(proposal_id, user_id=user_id)
        client = SupabaseClient.get_client()
        response = (
            client.table("payment_links")
            .select("*")
            .eq("proposal_id", proposal["id"])
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    @staticmethod
    def create_link(
        proposal_id: str | UUID,
        user_id: UUID | str,
        data: PaymentLinkCreate,
    ) -> dict[str, Any]:
        """
        Create a payment link for a proposal.

        Raises:
            InvalidAmountError: amount not a finite number > 0 (checked before any provider call)
            PaymentSettingsMissingError: Provider not configured for the user
            InvalidRequestError: Recurring PayPal link, or recurring without interval
            PaymentProviderError: Provider rejected the request
        """
        if not is_positive_amount(data.amount):
            raise InvalidAmountError(data.amount)

        proposal = ProposalService.get_proposal(proposal_id, user_id=user_id)
        payment_settings = SupabaseClient.fetch_payment_settings(user_id)
        if not payment_settings:
            raise PaymentSettingsMissingError(data.provider.value)

        if data.provider == PaymentProvider.STRIPE:
            provider_fields = PaymentLinkService._create_stripe_link(payment_settings, data, proposal)
        else:
            provider_fields = PaymentLinkService._create_paypal_link(payment_settings, data, proposal)

        row = {
            "user_id": normalize_uuid(user_id),
            "proposal_id": proposal["id"],
            "amount": data.amount,
            "currency": data.currency.lower(),
            "description": data.description,
            "payment_provider": data.provider.value,
            "status": PaymentLinkStatus.PENDING.value,
            **provider_fields,
        }

        client = SupabaseClient.get_client()
        try:
            response = client.table("payment_links").insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to save payment link: {e}")
            raise

        link = response.data[0] if response.data else row
        logger.info(f"Created {data.provider.value} payment link for proposal {proposal['id']}")
        return link

    # -------------------------------------------------------------------------
    # Providers
    # -------------------------------------------------------------------------

    @staticmethod
    def _create_stripe_link(
        payment_settings: dict[str, Any],
        data: PaymentLinkCreate,
        proposal: dict[str, Any],
    ) -> dict[str, Any]:
        api_key = payment_settings.get("stripe_secret_key")
        if not api_key:
            raise PaymentSettingsMissingError("stripe")

        price_params: dict[str, Any] = {
            "currency": data.currency.lower(),
            "unit_amount": int(round(data.amount * 100)),
            "product_data": {"name": data.description or proposal.get("title") or "Proposal payment"},
        }
        if data.payment_type == PaymentType.RECURRING:
            if not data.interval:
                raise InvalidRequestError(
                    "Recurring payments need a billing interval",
                    suggestion="Set interval to day, week, month or year",
                )
            price_params["recurring"] = {"interval": data.interval.value}

        try:
            price = stripe.Price.create(api_key=api_key, **price_params)
            payment_link = stripe.PaymentLink.create(
                api_key=api_key,
                line_items=[{"price": price.id, "quantity": 1}],
                metadata={"proposal_id": str(proposal["id"])},
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe payment link failed: {e}")
            raise PaymentProviderError("stripe", getattr(e, "user_message", None) or str(e))

        return {
            "payment_url": payment_link.url,
            "stripe_payment_link_id": payment_link.id,
            "stripe_price_id": price.id,
        }

    @staticmethod
    def _create_paypal_link(
        payment_settings: dict[str, Any],
        data: PaymentLinkCreate,
        proposal: dict[str, Any],
    ) -> dict[str, Any]:
        if data.payment_type == PaymentType.RECURRING:
            raise InvalidRequestError(
                "Only one-time payments are supported for PayPal links",
                suggestion="Use a Stripe link for recurring payments",
            )

        client_id = payment_settings.get("paypal_client_id")
        client_secret = payment_settings.get("paypal_client_secret")

        if client_id and client_secret:
            base = settings.PUBLIC_APP_URL.rstrip("/")
            try:
                paypal = PayPalClient(
                    client_id,
                    client_secret,
                    environment=payment_settings.get("paypal_environment") or "sandbox",
                )
                order = paypal.create_order(
                    data.amount,
                    currency=data.currency,
                    description=data.description,
                    return_url=f"{base}/payment-success?proposal={proposal['id']}",
                    cancel_url=f"{base}/payment-cancelled?proposal={proposal['id']}",
                )
            except PayPalClientError as e:
                raise PaymentProviderError("paypal", e.message)

            approval_url = PayPalClient.approval_url(order)
            if not approval_url:
                raise PaymentProviderError("paypal", "No approval URL found in PayPal response")
            return {"payment_url": approval_url, "paypal_order_id": order.get("id")}

        merchant_id = payment_settings.get("paypal_merchant_id")
        if merchant_id:
            return {
                "payment_url": paypal_me_url(merchant_id, data.amount, data.currency),
                "paypal_order_id": merchant_id,
            }

        raise PaymentSettingsMissingError("paypal")
