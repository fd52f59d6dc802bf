# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for shared lookups
# - content_renderer.py: Normalizes and renders stored proposal content
# - paypal_client.py: PayPal REST client (orders, subscriptions, webhooks)
# - webhook_dispatcher.py: Signed outbound webhook delivery
# - rate_limiter.py: In-memory sliding-window rate limiter
# - utils.py: Shared utilities (error base class, UUID and time helpers)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.content_renderer import RenderedSection, render_html, render_sections
from lib.paypal_client import PayPalClient, PayPalClientError
from lib.webhook_dispatcher import DispatchSummary, dispatch_event, sign_payload
from lib.rate_limiter import RateLimiter
from lib.utils import ApplicationError, normalize_uuid

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Content
    "RenderedSection",
    "render_html",
    "render_sections",
    # PayPal
    "PayPalClient",
    "PayPalClientError",
    # Webhooks
    "DispatchSummary",
    "dispatch_event",
    "sign_payload",
    # Rate limiting
    "RateLimiter",
    # Utils
    "ApplicationError",
    "normalize_uuid",
]
