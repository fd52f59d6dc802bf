# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the ProposalKraft API:
# - conftest.py: Environment, in-memory Supabase and API client fixtures
# - test_models.py: Unit tests for Pydantic model validation
# - test_content_renderer.py: Stored content normalization and rendering
# - test_proposals.py, test_shares.py, test_signatures.py: Core flows
# - test_billing_webhooks.py, test_payments.py: PayPal and Stripe billing
# - test_webhooks.py, test_workers.py: Outbound events and Celery tasks
#
# Run tests with: pytest
# =============================================================================
