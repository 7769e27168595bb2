"""Health check endpoints for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.bookshelf.api.http.app_data import ApplicationDependencies
from src.bookshelf.api.http.deps import get_app_dependencies

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe; returns 200 as long as the process is serving."""
    return {"status": "OK"}


@router.get("/database", response_model=None)
def database_health(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> dict[str, Any] | JSONResponse:
    """Check database connectivity and report connection pool usage.

    Returns 200 when the database answers, 503 otherwise.
    """
    database_service = app_deps.database_service
    healthy = database_service.health_check()
    payload = {
        "status": "healthy" if healthy else "unhealthy",
        "database": {
            "type": database_service.engine.url.get_backend_name(),
            "pool": database_service.get_pool_status(),
        },
    }
    if not healthy:
        return JSONResponse(status_code=503, content=payload)
    return payload
