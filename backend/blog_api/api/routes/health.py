"""Health & Readiness Probes — service banner, liveness and readiness endpoints.

Invariants:
    - GET / and GET /api/health/ always return 200 if the process is up (liveness)
    - GET /api/health/ready returns 503 if the database is unreachable (readiness)

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from the
      load balancer
    - Readiness goes through ensure_db(): a cold serverless instance initializes
      the pool here instead of on the first user request
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from blog_api import __version__
from blog_api.config import get_settings
from blog_api.infrastructure.database import ensure_db

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/")
async def banner():
    """Service banner with environment and docs location."""
    return {
        "message": "Blog API is running!",
        "environment": get_settings().environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "docs": "/api-docs",
    }


@router.get("/api/health/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "blog-api",
        "version": __version__,
    }


@router.get("/api/health/ready")
async def readiness_check():
    """Readiness probe — includes database connectivity."""
    try:
        manager = await ensure_db()
        db_ok = await manager.health_check()
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        db_ok = False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
