"""Shared test fixtures."""

from __future__ import annotations

import os

# Settings are cached on first use; pin an in-process backend before the app imports.
os.environ["GRASPIFY_STORE_BACKEND"] = "memory"
os.environ["GRASPIFY_REDIS_URL"] = ""

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from graspify.config import get_settings  # noqa: E402
from graspify.dependencies import get_redis_dep  # noqa: E402
from graspify.gamification.catalog import new_ledger_state  # noqa: E402
from graspify.gamification.clock import Clock  # noqa: E402
from graspify.gamification.ledger import LedgerEvent, ProgressLedger  # noqa: E402
from graspify.gamification.service import ProgressService, get_progress_service  # noqa: E402
from graspify.main import create_app  # noqa: E402
from graspify.persistence.memory import MemoryLedgerStore  # noqa: E402

get_settings.cache_clear()

START = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


class FrozenTime:
    """Settable ``now`` source for ``Clock``."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def frozen_time() -> FrozenTime:
    return FrozenTime()


@pytest.fixture
def clock(frozen_time: FrozenTime) -> Clock:
    return Clock("UTC", now_fn=frozen_time)


@pytest.fixture
def ledger(clock: Clock) -> ProgressLedger:
    """A brand-new user's ledger on the frozen day."""
    return ProgressLedger(new_ledger_state("learner-1", clock.today(), clock.now()), clock)


@pytest.fixture
def events(ledger: ProgressLedger) -> list[LedgerEvent]:
    """Every event the ``ledger`` fixture emits."""
    collected: list[LedgerEvent] = []
    ledger.subscribe(collected.append)
    return collected


@pytest.fixture
def memory_store() -> MemoryLedgerStore:
    return MemoryLedgerStore()


@pytest.fixture
def service(memory_store: MemoryLedgerStore, clock: Clock) -> ProgressService:
    return ProgressService(memory_store, clock)


@pytest_asyncio.fixture
async def client(service: ProgressService) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the app wired to an in-memory progress service."""
    app = create_app()
    app.dependency_overrides[get_progress_service] = lambda: service
    app.dependency_overrides[get_redis_dep] = lambda: None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
