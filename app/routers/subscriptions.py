# =============================================================================
# app/routers/subscriptions.py - Platform Subscription Endpoints
# =============================================================================
# ProposalKraft's own plans, billed through PayPal.
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import get_current_user, AuthUser
from core.models.subscription import (
    PlanPaymentCreate,
    PlanPaymentResponse,
    SubscriptionCheckoutResponse,
    SubscriptionCreate,
    SubscriptionStatusResponse,
)
from core.services.subscription_service import SubscriptionService

router = APIRouter()


@router.get("/status", response_model=SubscriptionStatusResponse)
async def subscription_status(user: AuthUser = Depends(get_current_user)):
    """The current user's subscription, or status "none"."""
    return SubscriptionService.get_status(user.id)


@router.get("/plans", response_model=dict[str, str])
async def plan_ids():
    """Configured PayPal plan ids per plan type."""
    return SubscriptionService.get_plan_ids()


@router.post("", response_model=SubscriptionCheckoutResponse, status_code=201)
async def create_subscription(
    request: SubscriptionCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Start a PayPal subscription.

    Redirect the user to approval_url; activation arrives later through the
    billing webhook.
    """
    return SubscriptionService.create_subscription(user.id, request)


@router.post("/payments", response_model=PlanPaymentResponse, status_code=201)
async def create_plan_payment(
    request: PlanPaymentCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Buy a year of a plan with a one-time PayPal payment.

    Access is granted when PayPal reports the capture as completed.
    """
    return SubscriptionService.create_plan_payment(user.id, request)
