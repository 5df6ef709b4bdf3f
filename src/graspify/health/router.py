"""Health, readiness, and version endpoints."""

from fastapi import APIRouter

from graspify.config import get_settings
from graspify.database import ping_db
from graspify.redis_client import get_redis

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe. Returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness() -> dict[str, object]:
    """Readiness probe. Checks the backends the configured store depends on."""
    settings = get_settings()
    checks: dict[str, object] = {}

    if settings.store_backend == "sql":
        try:
            await ping_db()
            checks["database"] = "ok"
        except Exception as exc:
            checks["database"] = f"error: {exc}"

    if settings.redis_url:
        try:
            redis = get_redis()
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as exc:
            checks["redis"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
        "store_backend": settings.store_backend,
    }
