"""
Health Check Routes - System health and monitoring endpoints.

These endpoints are used for:
1. Load balancer health checks
2. Liveness/readiness probes
3. Quick system status verification
"""
from datetime import datetime

from fastapi import APIRouter, Depends

from dbconsole import __version__
from dbconsole.api.dependencies import get_session_store
from dbconsole.core.logging_config import get_logger
from dbconsole.database.session_store import SessionStore
from dbconsole.models.console import HealthResponse

logger = get_logger(__name__)

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description="Returns 200 OK while the API process is responsive.",
)
async def health_check() -> HealthResponse:
    """
    Perform a basic health check.

    Does not touch the session store or any database.
    """
    logger.debug("Health check requested")

    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.utcnow()
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness check endpoint",
    description="Reports readiness and the number of active sessions.",
)
def readiness_check(store: SessionStore = Depends(get_session_store)) -> HealthResponse:
    logger.debug("Readiness check requested")

    return HealthResponse(
        status="ready",
        version=__version__,
        timestamp=datetime.utcnow(),
        active_sessions=store.active_count,
    )
