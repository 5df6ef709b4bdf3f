"""XP leaderboard: one Redis sorted set for O(log N) ranking.

The sorted set is a read model rebuilt from saved ledgers; it is never the
source of truth for XP.
"""

from __future__ import annotations

import logging

from redis.asyncio import Redis

from graspify.gamification.state import PlayerProfile

logger = logging.getLogger(__name__)

LEADERBOARD_KEY = "leaderboard:xp"


def profile_key(user_id: str) -> str:
    return f"leaderboard:profile:{user_id}"


async def record_score(redis: Redis, profile: PlayerProfile) -> None:
    """Upsert the user's XP score and display fields."""
    pipe = redis.pipeline()
    pipe.zadd(LEADERBOARD_KEY, {profile.id: profile.xp})
    pipe.hset(
        profile_key(profile.id),
        mapping={
            "name": profile.name,
            "avatar": profile.avatar or "",
            "level": profile.level,
            "streak": profile.streak,
        },
    )
    await pipe.execute()


async def get_leaderboard(redis: Redis | None, limit: int = 50) -> list[dict]:
    """Top ``limit`` users by XP, highest first. Empty without Redis."""
    if redis is None or limit <= 0:
        return []

    ranked = await redis.zrevrange(LEADERBOARD_KEY, 0, limit - 1, withscores=True)
    if not ranked:
        return []

    pipe = redis.pipeline()
    for user_id, _score in ranked:
        pipe.hgetall(profile_key(user_id))
    profiles: list[dict] = await pipe.execute()

    entries = []
    for rank, ((user_id, score), fields) in enumerate(zip(ranked, profiles), start=1):
        fields = fields or {}
        entries.append({
            "rank": rank,
            "user_id": user_id,
            "name": fields.get("name") or "Learner",
            "avatar": fields.get("avatar") or None,
            "xp": int(score),
            "level": int(fields.get("level", 1)),
            "streak": int(fields.get("streak", 0)),
        })
    return entries


async def get_rank(redis: Redis | None, user_id: str) -> int | None:
    """1-based rank of a user, or None if unranked."""
    if redis is None:
        return None
    rank = await redis.zrevrank(LEADERBOARD_KEY, user_id)
    return None if rank is None else rank + 1
