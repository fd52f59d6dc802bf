# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================

from uuid import UUID

from pydantic import BaseModel


class AuthUser(BaseModel):
    """
    The caller, as identified by a verified Supabase access token.

    Only the claims in the token are available here; profile and
    subscription data are looked up separately.
    """
    id: UUID
    email: str | None = None
    role: str | None = None

    model_config = {"frozen": True}


class AccountResponse(BaseModel):
    """The signed-in user with their company and plan."""
    id: UUID
    email: str | None = None
    company_name: str | None = None
    company_logo_url: str | None = None
    plan_type: str | None = None
    subscription_status: str = "none"
    has_active_subscription: bool = False
