# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Payment, email and AI credentials are optional: the features that need them
# report a clear error (or fall back) when they are missing.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret (used when a token has no JWKS key)"
    )

    LOGO_BUCKET: str = Field(
        default="logos",
        description="Storage bucket for company logos"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # OpenAI Configuration
    # -------------------------------------------------------------------------
    # Optional - content generation falls back to templates without a key

    OPENAI_API_KEY: str = Field(
        default="",
        description="OpenAI API key for proposal content generation"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Chat model used for section generation"
    )

    CONTENT_TEMPERATURE: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for generated proposal copy"
    )

    # -------------------------------------------------------------------------
    # PayPal Configuration (platform subscriptions)
    # -------------------------------------------------------------------------

    PAYPAL_CLIENT_ID: str = Field(
        default="",
        description="PayPal REST client id for platform billing"
    )

    PAYPAL_CLIENT_SECRET: str = Field(
        default="",
        description="PayPal REST client secret for platform billing"
    )

    PAYPAL_ENV: Literal["sandbox", "live"] = Field(
        default="sandbox",
        description="PayPal environment (sandbox or live)"
    )

    PAYPAL_WEBHOOK_ID: str = Field(
        default="",
        description="PayPal webhook id; enables signature verification when set"
    )

    PAYPAL_PLAN_ID_FREELANCE: str = Field(default="", description="PayPal plan id for the freelance plan")
    PAYPAL_PLAN_ID_AGENCY: str = Field(default="", description="PayPal plan id for the agency plan")
    PAYPAL_PLAN_ID_ENTERPRISE: str = Field(default="", description="PayPal plan id for the enterprise plan")

    # -------------------------------------------------------------------------
    # Stripe Configuration
    # -------------------------------------------------------------------------

    STRIPE_WEBHOOK_SECRET: str = Field(
        default="",
        description="Signing secret for inbound Stripe webhook events"
    )

    # -------------------------------------------------------------------------
    # Email (Postmark)
    # -------------------------------------------------------------------------

    POSTMARK_SERVER_TOKEN: str = Field(
        default="",
        description="Postmark server token for transactional email"
    )

    EMAIL_FROM: str = Field(
        default="ProposalKraft <noreply@proposalkraft.com>",
        description="Sender address for outgoing email"
    )

    # -------------------------------------------------------------------------
    # Sharing, Webhooks and Rate Limits
    # -------------------------------------------------------------------------

    PUBLIC_APP_URL: str = Field(
        default="http://localhost:3000",
        description="Frontend origin used to build share URLs"
    )

    SHARE_DEFAULT_EXPIRY_DAYS: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Days until a new share link expires"
    )

    WEBHOOK_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for outbound webhook deliveries"
    )

    TRUST_PROXY_HEADERS: bool = Field(
        default=False,
        description="Take the client IP from X-Forwarded-For (only behind a proxy that sets it)"
    )

    BILLING_WEBHOOK_RATE_LIMIT: int = Field(
        default=60,
        ge=1,
        description="Max inbound billing webhook calls per client per window"
    )

    BILLING_WEBHOOK_RATE_WINDOW_SECONDS: int = Field(
        default=60,
        ge=1,
        description="Rate limit window for inbound billing webhooks"
    )

    REQUIRE_SUBSCRIPTION: bool = Field(
        default=False,
        description="Require an active subscription for authoring endpoints"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    MAX_LOGO_SIZE_MB: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum logo upload size in MB"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def paypal_plan_ids(self) -> dict[str, str]:
        """Configured PayPal plan ids keyed by plan type."""
        return {
            "freelance": self.PAYPAL_PLAN_ID_FREELANCE,
            "agency": self.PAYPAL_PLAN_ID_AGENCY,
            "enterprise": self.PAYPAL_PLAN_ID_ENTERPRISE,
        }

    @property
    def max_logo_size_bytes(self) -> int:
        return self.MAX_LOGO_SIZE_MB * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
