"""Progress service: owns per-user ledgers for the running app.

Each request takes the user's lock, mutates the cached ledger, then saves it
and publishes the collected events. A request that fails part way leaves the
ledger as it found it. Saving is best-effort: on failure the ledger stays
cached and the next successful save carries the delta.

The cache holds at most ``max_cached_ledgers`` users. Idle users are evicted
oldest first; a user with a request in flight or an unsaved delta is kept.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections import Counter, OrderedDict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from graspify.gamification.catalog import new_ledger_state
from graspify.gamification.clock import Clock
from graspify.gamification.ledger import LedgerEvent, ProgressLedger
from graspify.gamification.state import PlayerProfile
from graspify.leaderboard.service import record_score
from graspify.persistence.base import LedgerStore

logger = logging.getLogger(__name__)

EVENTS_CHANNEL = "pubsub:progress"


class EmailInUseError(Exception):
    """Another user already owns the requested profile email."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Email already in use: {email}")
        self.email = email


class ProgressService:
    """Composition-root owner of every user's ``ProgressLedger``."""

    def __init__(
        self,
        store: LedgerStore,
        clock: Clock,
        redis: object | None = None,
        max_cached_ledgers: int = 10_000,
    ) -> None:
        self.store = store
        self.clock = clock
        self.redis = redis
        self.max_cached_ledgers = max_cached_ledgers
        self._ledgers: OrderedDict[str, ProgressLedger] = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}
        self._pending: Counter[str] = Counter()
        self._dirty: set[str] = set()
        self._email_lock = asyncio.Lock()

    @asynccontextmanager
    async def session(self, user_id: str) -> AsyncIterator[ProgressLedger]:
        """Exclusive access to a user's ledger.

        Rolls the mission set over to today on entry. If the body changed
        anything, the state is saved and events are published on exit. If the
        body raises, the ledger is restored to its state on entry.
        """
        self._pending[user_id] += 1
        try:
            async with self._locks.setdefault(user_id, asyncio.Lock()):
                async with self._open(user_id) as ledger:
                    yield ledger
        finally:
            self._release(user_id)

    @asynccontextmanager
    async def _open(self, user_id: str) -> AsyncIterator[ProgressLedger]:
        ledger, stored = await self._get_ledger(user_id)
        snapshot = ledger.state.model_copy(deep=True)
        events: list[LedgerEvent] = []
        unsubscribe = ledger.subscribe(events.append)
        try:
            ledger.ensure_current_day()
            yield ledger
        except BaseException:
            ledger.state = snapshot
            if not stored:
                self._ledgers.pop(user_id, None)
            raise
        finally:
            unsubscribe()

        if events:
            if await self._persist(ledger):
                self._dirty.discard(user_id)
            else:
                self._dirty.add(user_id)
            await self._publish(user_id, events)
        elif not stored:
            # Unknown user who only read defaults; nothing worth keeping
            self._ledgers.pop(user_id, None)

    async def _get_ledger(self, user_id: str) -> tuple[ProgressLedger, bool]:
        """Cached or stored ledger; the flag is False for fresh defaults."""
        ledger = self._ledgers.get(user_id)
        if ledger is not None:
            self._ledgers.move_to_end(user_id)
            return ledger, True

        state = await self.store.load(user_id)
        stored = state is not None
        if state is None:
            logger.info("Creating progress for new user %s", user_id)
            state = new_ledger_state(user_id, self.clock.today(), self.clock.now())
        ledger = ProgressLedger(state, self.clock)
        self._ledgers[user_id] = ledger
        return ledger, stored

    def _release(self, user_id: str) -> None:
        self._pending[user_id] -= 1
        if self._pending[user_id] > 0:
            return
        del self._pending[user_id]
        if user_id not in self._ledgers:
            self._locks.pop(user_id, None)
        self._trim()

    def _trim(self) -> None:
        excess = len(self._ledgers) - self.max_cached_ledgers
        if excess <= 0:
            return
        for user_id in list(self._ledgers):
            if excess == 0:
                break
            if user_id in self._pending or user_id in self._dirty:
                continue
            del self._ledgers[user_id]
            self._locks.pop(user_id, None)
            excess -= 1
        if excess > 0:
            logger.warning("Progress cache over limit by %d users with unsaved changes", excess)

    async def update_profile(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
        avatar: str | None = None,
    ) -> PlayerProfile:
        """Edit identity fields, refusing an email another user owns.

        Email claims are serialized so two users cannot take the same address
        between the check and the save.
        """
        async with self._email_lock:
            async with self.session(user_id) as ledger:
                if email is not None and email != ledger.state.profile.email:
                    if await self._email_owner(email, exclude=user_id) is not None:
                        raise EmailInUseError(email)
                ledger.update_profile(name=name, email=email, avatar=avatar)
                return ledger.state.profile.model_copy()

    async def _email_owner(self, email: str, exclude: str) -> str | None:
        for user_id, ledger in self._ledgers.items():
            if user_id != exclude and ledger.state.profile.email == email:
                return user_id
        owner = await self.store.find_user_by_email(email)
        if owner == exclude:
            return None
        return owner

    def evict(self, user_id: str) -> None:
        """Drop a cached ledger so the next session reloads it from the store."""
        self._ledgers.pop(user_id, None)
        self._dirty.discard(user_id)
        if user_id not in self._pending:
            self._locks.pop(user_id, None)

    def is_cached(self, user_id: str) -> bool:
        return user_id in self._ledgers

    @property
    def cached_count(self) -> int:
        return len(self._ledgers)

    @property
    def lock_count(self) -> int:
        return len(self._locks)

    async def _persist(self, ledger: ProgressLedger) -> bool:
        try:
            await self.store.save(ledger.user_id, ledger.state)
        except Exception:
            logger.warning(
                "Failed to save progress for %s; keeping in-memory state",
                ledger.user_id,
                exc_info=True,
            )
            return False

        if self.redis is not None:
            try:
                await record_score(self.redis, ledger.state.profile)  # type: ignore[arg-type]
            except Exception:
                logger.warning("Failed to update leaderboard for %s", ledger.user_id, exc_info=True)
        return True

    async def _publish(self, user_id: str, events: list[LedgerEvent]) -> None:
        if self.redis is None:
            return
        try:
            for event in events:
                await self.redis.publish(  # type: ignore[union-attr]
                    EVENTS_CHANNEL,
                    json.dumps({"user_id": user_id, "kind": event.kind, **event.payload}),
                )
        except Exception:
            logger.warning("Failed to publish progress events for %s", user_id, exc_info=True)


_service: ProgressService | None = None


def init_progress_service(service: ProgressService) -> None:
    """Install the app-wide progress service."""
    global _service  # noqa: PLW0603
    _service = service


def close_progress_service() -> None:
    global _service  # noqa: PLW0603
    _service = None


def get_progress_service() -> ProgressService:
    """Get the progress service (FastAPI dependency)."""
    if _service is None:
        msg = "Progress service not initialized. Call init_progress_service() first."
        raise RuntimeError(msg)
    return _service
