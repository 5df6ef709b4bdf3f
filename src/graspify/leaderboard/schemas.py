"""Pydantic response models for the leaderboard."""

from __future__ import annotations

from pydantic import BaseModel


class LeaderboardEntryResponse(BaseModel):
    rank: int
    user_id: str
    name: str
    avatar: str | None = None
    xp: int
    level: int
    streak: int


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntryResponse]
    total: int
