# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# FastAPI routers organized by feature, mounted under /api/v1 in main.py:
# - health.py: Liveness and readiness probes
# - proposals.py: Proposal CRUD, section edits and export
# - shares.py / shared.py: Share links (owner side / public side)
# - signatures.py: Signers and signing
# - brand_kits.py, profile.py: Branding and company details
# - analytics.py: Engagement summaries
# - webhooks.py: Outbound webhook configuration
# - payments.py, subscriptions.py, billing.py: Payments and plans
# - content.py, templates.py: AI drafting, research and templates
# =============================================================================

from . import (
    analytics,
    billing,
    brand_kits,
    content,
    health,
    payments,
    profile,
    proposals,
    shared,
    shares,
    signatures,
    subscriptions,
    templates,
    webhooks,
)

__all__ = [
    "analytics",
    "billing",
    "brand_kits",
    "content",
    "health",
    "payments",
    "profile",
    "proposals",
    "shared",
    "shares",
    "signatures",
    "subscriptions",
    "templates",
    "webhooks",
]
