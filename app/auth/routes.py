# =============================================================================
# app/auth/routes.py - Account Endpoints
# =============================================================================
# Sign-up and login happen client-side with Supabase Auth; these endpoints
# describe the account behind a token.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AccountResponse, AuthUser

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=AccountResponse)
async def get_account(user: AuthUser = Depends(get_current_user)):
    """
    The signed-in user with company name, logo and subscription state.
    """
    from core.services.company_profile_service import CompanyProfileService
    from core.services.subscription_service import SubscriptionService

    profile = CompanyProfileService.get_profile(user.id)
    subscription = SubscriptionService.get_status(user.id)

    return AccountResponse(
        id=user.id,
        email=user.email,
        company_name=profile.get("company_name"),
        company_logo_url=profile.get("company_logo_url"),
        plan_type=subscription.plan_type.value if subscription.plan_type else None,
        subscription_status=subscription.status,
        has_active_subscription=subscription.has_active_subscription,
    )


@router.get("/verify")
async def verify_token(user: AuthUser = Depends(get_current_user)) -> dict:
    """Check that a stored token is still valid."""
    return {"valid": True, "user_id": str(user.id), "email": user.email}
