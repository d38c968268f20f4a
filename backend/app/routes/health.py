"""
Exam Builder Backend — Health Check Route
===========================================

What:  GET /health for load balancers, Docker health checks and humans.
How:   Pings the database with SELECT 1. The API itself is always "OK"
       if this handler runs at all.

Status levels:
    OK        database reachable                 → HTTP 200
    DEGRADED  database ping failed               → HTTP 503
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import ping_database
from app.schemas.user import DependencyStatus, HealthResponse, ServicesStatus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    database = DependencyStatus(status="OK", message="Database connection is working")

    try:
        await ping_database()
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        database = DependencyStatus(status="ERROR", message="Database connection failed")

    healthy = database.status == "OK"
    body = HealthResponse(
        status="OK" if healthy else "DEGRADED",
        message=settings.api_title,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        services=ServicesStatus(api="OK", database=database),
    )
    if healthy:
        return body
    return JSONResponse(status_code=503, content=body.model_dump(mode="json", by_alias=True))
