"""Redis-backed ledger store: one JSON document per user."""

from __future__ import annotations

import logging

from redis.asyncio import Redis

from graspify.gamification.state import LedgerState
from graspify.persistence.document import ProgressDocument, from_document, to_document

logger = logging.getLogger(__name__)


class RedisLedgerStore:
    """Stores each user's ``ProgressDocument`` under ``{prefix}:{user_id}``.

    ``{prefix}:email:{email}`` points at the user who saved that email last.
    The index is not cleaned when an email changes, so lookups confirm the
    owner's current document before trusting it.
    """

    def __init__(self, redis: Redis, prefix: str = "progress") -> None:
        self.redis = redis
        self.prefix = prefix

    def key(self, user_id: str) -> str:
        return f"{self.prefix}:{user_id}"

    def email_key(self, email: str) -> str:
        return f"{self.prefix}:email:{email}"

    async def load(self, user_id: str) -> LedgerState | None:
        raw = await self.redis.get(self.key(user_id))
        if raw is None:
            return None
        return from_document(ProgressDocument.model_validate_json(raw))

    async def save(self, user_id: str, state: LedgerState) -> None:
        if state.profile.email:
            await self.redis.set(self.email_key(state.profile.email), user_id)
        await self.redis.set(self.key(user_id), to_document(state).model_dump_json())
        logger.debug("Saved progress for %s", user_id)

    async def find_user_by_email(self, email: str) -> str | None:
        user_id = await self.redis.get(self.email_key(email))
        if user_id is None:
            return None
        state = await self.load(user_id)
        if state is None or state.profile.email != email:
            return None
        return user_id
