# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for data validation
# - services/: Proposal, sharing, signing, billing and content operations
#
# Code in this package should NOT import from FastAPI or Celery.
# Background work is returned as event dicts and queued by the caller.
# =============================================================================
