# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.auth import AuthUser, get_current_user
from app.config import settings
from app.exceptions import SubscriptionRequiredError


async def require_active_subscription(
    user: AuthUser = Depends(get_current_user),
) -> AuthUser:
    """
    Gate paid features behind an active subscription.

    Only enforced when REQUIRE_SUBSCRIPTION is on; otherwise every
    authenticated user passes.

    Raises:
        SubscriptionRequiredError: 402 if the user has no active subscription
    """
    if not settings.REQUIRE_SUBSCRIPTION:
        return user

    from core.services.subscription_service import SubscriptionService

    if not SubscriptionService.has_active_subscription(user.id):
        raise SubscriptionRequiredError()
    return user


SubscribedUser = Annotated[AuthUser, Depends(require_active_subscription)]


def client_ip(request: Request) -> str | None:
    """
    Caller IP.

    The first X-Forwarded-For hop is used only when TRUST_PROXY_HEADERS
    is on; otherwise the socket peer address.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded and settings.TRUST_PROXY_HEADERS:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def client_user_agent(request: Request) -> str | None:
    return request.headers.get("user-agent")
