"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from graspify.config import get_settings
from graspify.database import close_db, init_db
from graspify.gamification.clock import Clock
from graspify.gamification.router import router as progress_router
from graspify.gamification.service import (
    ProgressService,
    close_progress_service,
    init_progress_service,
)
from graspify.health.router import router as health_router
from graspify.leaderboard.router import router as leaderboard_router
from graspify.middleware import setup_middleware
from graspify.persistence.factory import create_store
from graspify.redis_client import close_redis, get_redis_or_none, init_redis

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    if settings.redis_url:
        await init_redis(settings.redis_url, settings.redis_max_connections)
    if settings.store_backend == "sql":
        await init_db(settings.database_url, settings.db_pool_size)

    store = create_store(settings)
    init_progress_service(
        ProgressService(
            store,
            Clock(settings.timezone),
            get_redis_or_none(),
            max_cached_ledgers=settings.max_cached_ledgers,
        )
    )
    logger.info("Progress service started with %s store", settings.store_backend)

    yield

    close_progress_service()
    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Graspify Progress API",
        description="Learner progression for Graspify: XP, levels, streaks, badges and daily missions",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(progress_router)
    app.include_router(leaderboard_router)

    return app


app = create_app()
