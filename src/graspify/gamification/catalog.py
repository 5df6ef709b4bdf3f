"""Badge, mission and XP reward catalog.

These values MUST match the web client's game store so that progress
recorded on either side reads the same.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, NamedTuple, get_args

from graspify.gamification.state import (
    ActivityCounters,
    Badge,
    LedgerState,
    Mission,
    MissionCategory,
    PlayerProfile,
)

XPEventType = Literal[
    "correct_step",
    "submit_step",
    "complete_quiz",
    "perfect_quiz",
    "review_flashcard",
    "complete_mission",
    "streak_bonus",
]

# Base XP per activity, before the streak multiplier.
# None means the caller must supply the amount.
XP_REWARDS: dict[str, int | None] = {
    "correct_step": 10,
    "submit_step": 2,
    "complete_quiz": 50,
    "perfect_quiz": 25,
    "review_flashcard": 3,
    "complete_mission": None,
    "streak_bonus": None,
}

BADGE_CATALOG: list[dict] = [
    {
        "id": "first_step",
        "name": "First Steps",
        "description": "Submit your first solution step",
        "icon": "\U0001f3af",
        "requirement": "Submit 1 step",
        "xp_reward": 25,
    },
    {
        "id": "correct_step",
        "name": "Sharp Mind",
        "description": "Get your first correct step",
        "icon": "\u2705",
        "requirement": "Get 1 correct step",
        "xp_reward": 50,
    },
    {
        "id": "quiz_master",
        "name": "Quiz Master",
        "description": "Complete 5 quizzes",
        "icon": "\U0001f4dd",
        "requirement": "Complete 5 quizzes",
        "xp_reward": 100,
    },
    {
        "id": "perfect_score",
        "name": "Perfectionist",
        "description": "Get a perfect quiz score",
        "icon": "\U0001f4af",
        "requirement": "Score 100% on a quiz",
        "xp_reward": 150,
    },
    {
        "id": "flashcard_fan",
        "name": "Memory Master",
        "description": "Review 50 flashcards",
        "icon": "\U0001f9e0",
        "requirement": "Review 50 flashcards",
        "xp_reward": 75,
    },
    {
        "id": "week_streak",
        "name": "On Fire",
        "description": "Maintain a 7-day streak",
        "icon": "\U0001f525",
        "requirement": "7-day streak",
        "xp_reward": 200,
    },
    {
        "id": "study_planner",
        "name": "Organized Learner",
        "description": "Create your first study plan",
        "icon": "\U0001f4c5",
        "requirement": "Create 1 study plan",
        "xp_reward": 50,
    },
    {
        "id": "doubt_solver",
        "name": "Problem Solver",
        "description": "Solve 10 doubts with AI tutor",
        "icon": "\U0001f4a1",
        "requirement": "Solve 10 doubts",
        "xp_reward": 100,
    },
    {
        "id": "level_10",
        "name": "Rising Star",
        "description": "Reach level 10",
        "icon": "\u2b50",
        "requirement": "Reach level 10",
        "xp_reward": 250,
    },
    {
        "id": "ocr_explorer",
        "name": "OCR Explorer",
        "description": "Upload 5 images for text extraction",
        "icon": "\U0001f4f8",
        "requirement": "Upload 5 images",
        "xp_reward": 50,
    },
]

DAILY_MISSIONS: list[dict] = [
    {
        "id": "mission_quiz",
        "title": "Quiz Champion",
        "description": "Complete 2 quizzes today",
        "category": "quiz",
        "target": 2,
        "xp_reward": 75,
    },
    {
        "id": "mission_flashcard",
        "title": "Flash Review",
        "description": "Review 15 flashcards",
        "category": "flashcard",
        "target": 15,
        "xp_reward": 50,
    },
    {
        "id": "mission_doubt",
        "title": "Curious Mind",
        "description": "Ask 3 questions to the AI tutor",
        "category": "doubt",
        "target": 3,
        "xp_reward": 60,
    },
    {
        "id": "mission_study",
        "title": "Focused Learner",
        "description": "Complete 1 study session",
        "category": "study",
        "target": 1,
        "xp_reward": 40,
    },
]

BADGE_IDS: frozenset[str] = frozenset(b["id"] for b in BADGE_CATALOG)
MISSION_IDS: frozenset[str] = frozenset(m["id"] for m in DAILY_MISSIONS)
COUNTER_NAMES: tuple[str, ...] = tuple(ActivityCounters.model_fields)
MISSION_CATEGORIES: tuple[str, ...] = get_args(MissionCategory)

# --- Milestone badges ---
LEVEL_BADGE_ID = "level_10"
LEVEL_BADGE_THRESHOLD = 10
STREAK_BADGE_ID = "week_streak"
STREAK_BADGE_THRESHOLD = 7
PERFECT_QUIZ_BADGE_ID = "perfect_score"

# Every answered doubt is scored as a correct step with a fixed amount
DOUBT_SOLVED_ACTIVITY = "correct_step"
DOUBT_SOLVED_XP = 20


class CounterRule(NamedTuple):
    """Unlock ``badge_id`` when ``counter`` matches ``threshold``.

    ``equals`` rules fire only on the first occurrence; ``at_least`` rules
    fire on every increment at or past the threshold (unlock is idempotent).
    """

    counter: str
    badge_id: str
    threshold: int
    comparator: Literal["equals", "at_least"]

    def matches(self, value: int) -> bool:
        if self.comparator == "equals":
            return value == self.threshold
        return value >= self.threshold


COUNTER_RULES: list[CounterRule] = [
    CounterRule("steps_submitted", "first_step", 1, "equals"),
    CounterRule("correct_steps", "correct_step", 1, "equals"),
    CounterRule("quizzes_completed", "quiz_master", 5, "at_least"),
    CounterRule("flashcards_reviewed", "flashcard_fan", 50, "at_least"),
    CounterRule("study_plans_created", "study_planner", 1, "equals"),
    CounterRule("doubts_asked", "doubt_solver", 10, "at_least"),
    CounterRule("images_uploaded", "ocr_explorer", 5, "at_least"),
]


def fresh_badges() -> list[Badge]:
    """All catalog badges, locked."""
    return [Badge(**b) for b in BADGE_CATALOG]


def fresh_missions() -> list[Mission]:
    """The canonical daily mission set with zero progress."""
    return [Mission(**m) for m in DAILY_MISSIONS]


def new_ledger_state(user_id: str, today: date, now: datetime) -> LedgerState:
    """Default state for a user seen for the first time."""
    return LedgerState(
        profile=PlayerProfile(id=user_id, last_active_date=today, created_at=now),
        badges=fresh_badges(),
        missions=fresh_missions(),
        missions_date=today,
        counters=ActivityCounters(),
    )
