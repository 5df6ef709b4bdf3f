"""Pydantic request/response models for progress endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from graspify.gamification.catalog import XPEventType
from graspify.gamification.state import ActivityCounters, MissionCategory


# --- Catalog ---


class BadgeResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    requirement: str
    xp_reward: int
    unlocked: bool = False
    unlocked_at: datetime | None = None


class AllBadgesResponse(BaseModel):
    badges: list[BadgeResponse]


class MissionResponse(BaseModel):
    id: str
    title: str
    description: str
    category: MissionCategory
    target: int
    xp_reward: int
    progress: int = 0
    completed: bool = False


class AllMissionsResponse(BaseModel):
    missions: list[MissionResponse]


class LevelResponse(BaseModel):
    level: int
    title: str
    xp_required: int
    xp_for_level: int


# --- Progress ---


class LevelInfo(BaseModel):
    level: int
    title: str
    xp_into_level: int
    xp_for_level: int
    percent: float


class ProfileResponse(BaseModel):
    id: str
    name: str
    email: str | None = None
    avatar: str | None = None
    xp: int
    level: int
    streak: int
    last_active_date: date
    badges: list[str]
    created_at: datetime


class ProgressResponse(BaseModel):
    profile: ProfileResponse
    level: LevelInfo
    streak_multiplier: float
    badges: list[BadgeResponse]
    missions_date: date
    missions: list[MissionResponse]
    counters: ActivityCounters


class StreakResponse(BaseModel):
    streak: int
    last_active_date: date
    multiplier: float


# --- Mutations ---


class ProfileUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=128)
    email: str | None = Field(default=None, max_length=320)
    avatar: str | None = None


class AwardXPRequest(BaseModel):
    activity: XPEventType
    amount: int | None = Field(default=None, ge=0, le=100_000)


class XPAwardResponse(BaseModel):
    xp_gained: int
    leveled_up: bool
    new_level: int | None = None
    total_xp: int
    level: int


class BadgeUnlockResponse(BaseModel):
    badge: BadgeResponse | None = None
    total_xp: int


class AdvanceMissionRequest(BaseModel):
    amount: int = Field(default=1, ge=0, le=1000)


class CounterResponse(BaseModel):
    counter: str
    value: int
    badges_unlocked: list[str] = []


class ActivityResponse(BaseModel):
    xp_gained: int
    leveled_up: bool
    new_level: int | None = None
    badges_unlocked: list[str]
    missions_completed: list[str]
    total_xp: int
    level: int
