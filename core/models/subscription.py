# =============================================================================
# core/models/subscription.py - Platform Subscription Schemas
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class PlanType(str, Enum):
    """Platform plans."""
    FREELANCE = "freelance"
    AGENCY = "agency"
    ENTERPRISE = "enterprise"


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle as reported by the billing provider."""
    ACTIVE = "active"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"
    EXPIRED = "expired"


class SubscriptionStatusResponse(BaseModel):
    """
    Current user's subscription.

    status is "none" when the user never subscribed.
    """
    has_active_subscription: bool
    plan_type: PlanType | None = None
    status: str = "none"
    current_period_end: datetime | None = None
    paypal_subscription_id: str | None = None


class SubscriptionCreate(BaseModel):
    """Start a PayPal subscription checkout."""
    plan_type: PlanType
    return_url: str | None = Field(default=None, max_length=2048)
    cancel_url: str | None = Field(default=None, max_length=2048)


class SubscriptionCheckoutResponse(BaseModel):
    """Where to send the user to approve the subscription."""
    subscription_id: str
    approval_url: str | None


class PlanPaymentCreate(BaseModel):
    """
    Buy a plan with a one-time PayPal payment (one year of access).

    Example:
        {"plan_type": "agency", "amount": 290, "payment_method": "paypal"}
    """
    plan_type: PlanType
    amount: float = Field(..., description="Price in USD")
    payment_method: str = Field(default="paypal", max_length=32)
    user_name: str | None = Field(default=None, max_length=255)
    user_email: str | None = Field(default=None, max_length=320)
    user_country: str | None = Field(default=None, max_length=64)


class PlanPaymentResponse(BaseModel):
    """Created PayPal order for a plan purchase."""
    order_id: str
    approval_url: str | None
    status: str | None = None
