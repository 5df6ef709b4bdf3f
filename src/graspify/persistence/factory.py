"""Select the ledger store for the configured backend."""

from __future__ import annotations

from graspify.config import Settings
from graspify.persistence.base import LedgerStore
from graspify.persistence.memory import MemoryLedgerStore


def create_store(settings: Settings) -> LedgerStore:
    """Build the store named by ``settings.store_backend``.

    The redis and sql backends expect ``init_redis`` / ``init_db`` to have run.
    """
    backend = settings.store_backend
    if backend == "memory":
        return MemoryLedgerStore()
    if backend == "redis":
        from graspify.persistence.redis_store import RedisLedgerStore
        from graspify.redis_client import get_redis

        return RedisLedgerStore(get_redis(), prefix=settings.progress_key_prefix)
    if backend == "sql":
        from graspify.database import get_session_factory
        from graspify.persistence.sql_store import SqlLedgerStore

        return SqlLedgerStore(get_session_factory())
    raise ValueError(f"Unknown store backend: {backend}")
