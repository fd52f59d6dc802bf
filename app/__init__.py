# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App entry point, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - routers/: API endpoint definitions organized by feature
# - events.py: Queues background side effects (webhooks, emails)
#
# The app layer handles HTTP concerns and delegates business logic to core/.
# =============================================================================
