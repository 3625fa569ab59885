"""Health & Readiness Probes - liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if database is unreachable (readiness)
    - Liveness reports the live connection count; it never touches the DB
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from tasksync.api.dependencies import get_connection_registry
from tasksync.infrastructure import database
from tasksync.infrastructure.connection_registry import ConnectionRegistry

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check(
    registry: ConnectionRegistry = Depends(get_connection_registry),
):
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "tasksync-api",
        "version": "1.0.0",
        "live_connections": registry.connection_count(),
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe - includes database connectivity."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
