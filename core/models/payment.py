# =============================================================================
# core/models/payment.py - Payment Settings and Payment Link Schemas
# =============================================================================
# Users accept payment for proposals through their own Stripe or PayPal
# account. Credentials live in user_payment_settings; generated links live
# in payment_links.
# =============================================================================

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class PaymentProvider(str, Enum):
    """Supported payment providers."""
    STRIPE = "stripe"
    PAYPAL = "paypal"


class PaymentType(str, Enum):
    """One-time charge or recurring subscription."""
    ONE_TIME = "one_time"
    RECURRING = "recurring"


class BillingInterval(str, Enum):
    """Recurring interval for Stripe prices."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class PaymentLinkStatus(str, Enum):
    """State of a generated link."""
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class PaymentSettingsUpdate(BaseModel):
    """Upsert payload for a user's provider credentials."""
    stripe_secret_key: str | None = Field(default=None, max_length=255)
    stripe_publishable_key: str | None = Field(default=None, max_length=255)
    paypal_client_id: str | None = Field(default=None, max_length=255)
    paypal_client_secret: str | None = Field(default=None, max_length=255)
    paypal_environment: str | None = Field(default=None, pattern=r"^(sandbox|live)$")
    paypal_merchant_id: str | None = Field(default=None, max_length=255)


class PaymentSettingsResponse(BaseModel):
    """Provider settings with secrets masked."""
    stripe_configured: bool = False
    stripe_publishable_key: str | None = None
    stripe_secret_key_hint: str | None = None
    paypal_configured: bool = False
    paypal_client_id: str | None = None
    paypal_environment: str = "sandbox"
    paypal_merchant_id: str | None = None


class PaymentLinkCreate(BaseModel):
    """
    Generate a payment link for a proposal.

    Example:
        {"provider": "stripe", "amount": 1500, "currency": "usd", "description": "Deposit"}
    """
    provider: PaymentProvider
    amount: float = Field(..., description="Amount in major currency units")
    currency: str = Field(default="USD", min_length=3, max_length=3)
    description: str | None = Field(default=None, max_length=500)
    payment_type: PaymentType = PaymentType.ONE_TIME
    interval: BillingInterval | None = Field(default=None, description="Required for recurring Stripe links")


class PaymentLinkResponse(BaseModel):
    """A stored payment link."""
    id: UUID
    proposal_id: UUID
    amount: float
    currency: str
    description: str | None = None
    payment_provider: PaymentProvider
    payment_url: str
    status: PaymentLinkStatus = PaymentLinkStatus.PENDING
