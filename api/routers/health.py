# WORKFLOW: Health check endpoints for monitoring and operational status.
# Used by: Load balancers, monitoring systems, container probes
# Endpoints:
# 1. /healthz - Basic health check (always returns healthy)
# 2. /readyz - Readiness check (search provider configured, response schema loadable)
# 3. /livez - Liveness check
#
# Readiness flow: Readiness check -> Search config / schema checks -> Ready/Not ready

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from api.schemas.response import HealthResponse
from api.schemas.validation import get_schema_validator
from core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/healthz", response_model=HealthResponse)
async def health_check():
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=_timestamp(),
        version=settings.version,
        environment=settings.environment,
    )


@router.get("/readyz", response_model=HealthResponse)
async def readiness_check():
    """
    Readiness check endpoint.

    The service can only discover candidates once the search provider is
    configured, and can only return reports once the response schema loads.
    """
    checks = {
        "search_provider": settings.search_configured,
        "response_schema": False,
    }

    try:
        get_schema_validator()
        checks["response_schema"] = True
    except Exception as e:
        logger.error(f"Response schema check failed: {e}")

    is_ready = all(checks.values())

    return HealthResponse(
        status="ready" if is_ready else "not_ready",
        timestamp=_timestamp(),
        version=settings.version,
        checks=checks,
    )


@router.get("/livez", response_model=HealthResponse)
async def liveness_check():
    """Liveness check endpoint."""
    return HealthResponse(status="alive", timestamp=_timestamp())
