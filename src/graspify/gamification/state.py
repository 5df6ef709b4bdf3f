"""Ledger state models: profile, badges, missions, counters."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

MissionCategory = Literal["quiz", "flashcard", "doubt", "streak", "study"]

CounterName = Literal[
    "quizzes_completed",
    "flashcards_reviewed",
    "doubts_asked",
    "steps_submitted",
    "correct_steps",
    "study_plans_created",
    "images_uploaded",
]


class PlayerProfile(BaseModel):
    id: str
    name: str = "Learner"
    email: str | None = None
    avatar: str | None = None
    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    streak: int = Field(default=0, ge=0)
    last_active_date: date
    badges: list[str] = Field(default_factory=list)
    created_at: datetime


class Badge(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    requirement: str
    xp_reward: int = Field(ge=0)
    unlocked: bool = False
    unlocked_at: datetime | None = None


class Mission(BaseModel):
    id: str
    title: str
    description: str
    category: MissionCategory
    target: int = Field(ge=1)
    xp_reward: int = Field(ge=0)
    progress: int = Field(default=0, ge=0)
    completed: bool = False


class ActivityCounters(BaseModel):
    quizzes_completed: int = 0
    flashcards_reviewed: int = 0
    doubts_asked: int = 0
    steps_submitted: int = 0
    correct_steps: int = 0
    study_plans_created: int = 0
    images_uploaded: int = 0


class LedgerState(BaseModel):
    """Everything the ledger owns for one user. Persisted as one unit."""

    profile: PlayerProfile
    badges: list[Badge]
    missions: list[Mission]
    missions_date: date
    counters: ActivityCounters = Field(default_factory=ActivityCounters)
