# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the ProposalKraft API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    ProposalKraftException,
    library_error_handler,
    proposalkraft_exception_handler,
)
from app.routers import (
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
from app.auth import routes as auth_routes
from lib.paypal_client import PayPalClientError
from lib.supabase_client import SupabaseClientError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration on startup and shutdown."""
    logger.info(f"Starting ProposalKraft API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.OPENAI_API_KEY:
        logger.info("OPENAI_API_KEY not set, content generation will use templates")
    if not settings.POSTMARK_SERVER_TOKEN:
        logger.info("POSTMARK_SERVER_TOKEN not set, share emails are disabled")
    if settings.REQUIRE_SUBSCRIPTION:
        logger.info("Subscription gate enabled for content-authoring endpoints")

    yield

    logger.info("Shutting down ProposalKraft API")


# Create FastAPI application
app = FastAPI(
    title="ProposalKraft API",
    description="""
## Proposal Authoring, Sharing and Payments

ProposalKraft lets freelancers and agencies write proposals, send them
through secure links, collect e-signatures and get paid.

### How It Works

1. **Create a Proposal** - From scratch or from a template
2. **Brand It** - Apply a brand kit and company profile
3. **Share** - Send a secure, expiring link (optionally by email)
4. **Track** - See views, time per section and devices
5. **Sign & Pay** - Collect signatures and Stripe / PayPal payments

### Quick Start

```bash
# 1. Create a proposal
curl -X POST http://localhost:8000/api/v1/proposals \\
  -H "Authorization: Bearer $TOKEN" \\
  -H "Content-Type: application/json" \\
  -d '{"title": "Website Redesign", "client_name": "Acme"}'

# 2. Share it
curl -X POST http://localhost:8000/api/v1/proposals/{id}/shares \\
  -H "Authorization: Bearer $TOKEN"
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "The account behind a token"},
        {"name": "Proposals", "description": "Create, edit and export proposals"},
        {"name": "Shares", "description": "Secure share links for proposal owners"},
        {"name": "Shared", "description": "Public access to shared proposals"},
        {"name": "Signatures", "description": "Signers and e-signatures"},
        {"name": "Brand Kits", "description": "Colors, fonts and logos"},
        {"name": "Profile", "description": "Company profile and logo"},
        {"name": "Analytics", "description": "Proposal engagement"},
        {"name": "Webhooks", "description": "Outbound event webhooks"},
        {"name": "Payments", "description": "Payment settings and payment links"},
        {"name": "Subscriptions", "description": "ProposalKraft plans"},
        {"name": "Billing", "description": "PayPal and Stripe notifications"},
        {"name": "Content", "description": "AI drafting and company research"},
        {"name": "Templates", "description": "Proposal templates"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(ProposalKraftException)
async def handle_proposalkraft_exception(request: Request, exc: ProposalKraftException):
    """Handle custom ProposalKraft exceptions."""
    return await proposalkraft_exception_handler(request, exc)


@app.exception_handler(SupabaseClientError)
async def handle_supabase_error(request: Request, exc: SupabaseClientError):
    logger.error(f"Supabase error on {request.url.path}: {exc}")
    return await library_error_handler(request, exc)


@app.exception_handler(PayPalClientError)
async def handle_paypal_error(request: Request, exc: PayPalClientError):
    logger.error(f"PayPal error on {request.url.path}: {exc}")
    return await library_error_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix=f"{API_PREFIX}/auth", tags=["Auth"])
app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(proposals.router, prefix=f"{API_PREFIX}/proposals", tags=["Proposals"])
app.include_router(shares.router, prefix=API_PREFIX, tags=["Shares"])
app.include_router(shared.router, prefix=f"{API_PREFIX}/shared", tags=["Shared"])
app.include_router(signatures.router, prefix=API_PREFIX, tags=["Signatures"])
app.include_router(brand_kits.router, prefix=f"{API_PREFIX}/brand-kits", tags=["Brand Kits"])
app.include_router(profile.router, prefix=f"{API_PREFIX}/profile", tags=["Profile"])
app.include_router(analytics.router, prefix=API_PREFIX, tags=["Analytics"])
app.include_router(webhooks.router, prefix=f"{API_PREFIX}/webhooks", tags=["Webhooks"])
app.include_router(payments.router, prefix=API_PREFIX, tags=["Payments"])
app.include_router(subscriptions.router, prefix=f"{API_PREFIX}/subscriptions", tags=["Subscriptions"])
app.include_router(billing.router, prefix=f"{API_PREFIX}/billing", tags=["Billing"])
app.include_router(content.router, prefix=f"{API_PREFIX}/content", tags=["Content"])
app.include_router(templates.router, prefix=f"{API_PREFIX}/templates", tags=["Templates"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """Root endpoint - returns API info."""
    return {
        "name": "ProposalKraft API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development,
    )
