"""
ProjectHub Backend: Health Check Route
======================================

What:  GET /api/health for load balancers and uptime monitors.
How:   Runs `SELECT 1` through a request session and reports per-service
       status with latency.

Status levels:
    database  healthy (< 1s) | degraded (slow) | down (probe failed)
    overall   healthy → 200, degraded/unhealthy → 503

Responses carry the "short" Cache-Control policy so monitors polling in a
tight loop can be served from a cache.
"""

import logging
import time
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from projecthub import __version__
from projecthub.cache_headers import cached_response
from projecthub.database import get_db_session, ping_database
from projecthub.error_handler import with_error_handler
from projecthub.schemas.health import HealthResponse, ServiceHealth

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health"])

_start_time = time.time()

# Database round trips slower than this mark the service degraded
DEGRADED_LATENCY_MS = 1000


async def check_database(db: AsyncSession) -> ServiceHealth:
    try:
        latency = await ping_database(db)
    except Exception as e:
        # A failed probe is a reportable state, not a request error
        logger.warning("Health check: database unreachable: %s", e)
        return ServiceHealth(service="database", status="down", message="Database connection failed")

    status = "healthy" if latency < DEGRADED_LATENCY_MS else "degraded"
    return ServiceHealth(service="database", status=status, latency=round(latency, 2))


def overall_status(services: List[ServiceHealth]) -> str:
    if any(s.status == "down" for s in services):
        return "unhealthy"
    if any(s.status == "degraded" for s in services):
        return "degraded"
    return "healthy"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"model": HealthResponse, "description": "A dependency is down or slow"}},
)
@with_error_handler(operation="Health check")
async def health_check(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    started = time.perf_counter()

    services = [await check_database(db)]
    services.append(
        ServiceHealth(
            service="api",
            status="healthy",
            latency=round((time.perf_counter() - started) * 1000, 2),
        )
    )

    status = overall_status(services)
    body = HealthResponse(
        status=status,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        services=services,
        uptime=round(time.time() - _start_time, 2),
    )
    return cached_response(
        body.model_dump(mode="json", by_alias=True, exclude_none=True),
        "short",
        status_code=200 if status == "healthy" else 503,
    )
