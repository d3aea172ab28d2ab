"""
Parcel Delivery Backend — Liveness and Health Routes
======================================================

What:  GET / (plain-text banner) and GET /health (dependency probe).
Who:   Called by uptime checks, Docker health checks and load balancers.

Status levels:
    - healthy:   Document store answers SELECT 1 (HTTP 200)
    - unhealthy: Document store unreachable (HTTP 503, stop routing traffic)

Identity and payment providers are not probed: both are remote services
whose reachability is only known when a request actually uses them.
"""

import logging
import time

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from parcel_api import __version__
from parcel_api.database import get_store
from parcel_api.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

BANNER = "Parcel Delivery Server is Running"

_start_time = time.time()


@router.get("/", response_class=PlainTextResponse, summary="Liveness banner")
async def root() -> str:
    return BANNER


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Document store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """
    Probe the document store with a lightweight query.

    Returns:
        HealthResponse with the store status and uptime.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        await get_store(request).ping()
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
