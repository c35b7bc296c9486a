"""Health endpoint."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ...container import ServiceContainer
from ..dependencies import get_container

router = APIRouter()

# Track application start time
_start_time = time.time()


@router.get("/health")
async def get_health(container: ServiceContainer = Depends(get_container)):
    """Liveness and dependency status.

    Public endpoint. A degraded database is reported, not raised; the cache
    is optional and never degrades the status.
    """
    database_healthy = await container.database.health_check()
    cache_healthy = await container.cache.health_check()

    return {
        "status": "ok" if database_healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": time.time() - _start_time,
        "services": {
            "database": "healthy" if database_healthy else "unhealthy",
            "cache": "healthy" if cache_healthy else "disabled",
        },
    }
