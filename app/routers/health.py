# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Liveness and readiness probes for load balancers and orchestrators.
# =============================================================================

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ReadinessChecks(BaseModel):
    database: str
    storage: str


class ReadinessResponse(BaseModel):
    status: str
    checks: ReadinessChecks
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _probe(name: str, check) -> str:
    try:
        check()
        return "healthy"
    except Exception as e:
        logger.warning(f"Readiness check {name} failed: {e}")
        return f"unhealthy: {str(e)[:50]}"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Process is up and serving requests."""
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Whether the API can reach its backing services.

    Queries the proposals table and lists storage buckets. Reports
    "degraded" when either fails.
    """
    from lib.supabase_client import SupabaseClient

    def database():
        SupabaseClient.get_client().table("proposals").select("id").limit(1).execute()

    def storage():
        SupabaseClient.get_client().storage.list_buckets()

    checks = ReadinessChecks(
        database=_probe("database", database),
        storage=_probe("storage", storage),
    )
    ready = checks.database == "healthy" and checks.storage == "healthy"
    return ReadinessResponse(
        status="ready" if ready else "degraded",
        checks=checks,
        timestamp=_now(),
    )
