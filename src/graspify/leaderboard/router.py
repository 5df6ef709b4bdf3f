"""Leaderboard endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from graspify.config import get_settings
from graspify.dependencies import get_redis_dep
from graspify.leaderboard.schemas import LeaderboardEntryResponse, LeaderboardResponse
from graspify.leaderboard.service import get_leaderboard

router = APIRouter(prefix="/api/v1", tags=["Leaderboard"])


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    limit: int | None = Query(default=None, ge=1, le=500),
    redis: object | None = Depends(get_redis_dep),
):
    """Top learners by total XP."""
    size = limit or get_settings().leaderboard_size
    entries = await get_leaderboard(redis, size)  # type: ignore[arg-type]
    return LeaderboardResponse(
        entries=[LeaderboardEntryResponse(**e) for e in entries],
        total=len(entries),
    )
