"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

from graspify.redis_client import get_redis_or_none


async def get_redis_dep() -> AsyncGenerator[object | None, None]:
    """Yield the Redis client, or None when running without Redis."""
    yield get_redis_or_none()
