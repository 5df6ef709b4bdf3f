"""Activity recorder: turns learning events into ledger operations.

The web client fires several ledger operations for one user action (a
finished quiz grants XP, bumps a counter and advances the quiz mission).
This module keeps those combinations in one place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from graspify.gamification import catalog
from graspify.gamification.ledger import LedgerEvent, ProgressLedger


class QuizCompleted(BaseModel):
    type: Literal["quiz_completed"]
    perfect: bool = False


class FlashcardReviewed(BaseModel):
    type: Literal["flashcard_reviewed"]
    count: int = Field(default=1, ge=1, le=500)


class DoubtAsked(BaseModel):
    """A question answered by the AI tutor.

    ``step_submitted`` is set when the learner attached their own solution attempt.
    """

    type: Literal["doubt_asked"]
    step_submitted: bool = False


class StudyPlanCreated(BaseModel):
    type: Literal["study_plan_created"]


class StudySessionCompleted(BaseModel):
    type: Literal["study_session_completed"]


class ImageUploaded(BaseModel):
    type: Literal["image_uploaded"]


AnyActivity = Union[
    QuizCompleted,
    FlashcardReviewed,
    DoubtAsked,
    StudyPlanCreated,
    StudySessionCompleted,
    ImageUploaded,
]

Activity = Annotated[AnyActivity, Field(discriminator="type")]


@dataclass
class ActivityOutcome:
    """What a single recorded activity changed."""

    xp_gained: int = 0
    leveled_up: bool = False
    new_level: int | None = None
    badges_unlocked: list[str] = field(default_factory=list)
    missions_completed: list[str] = field(default_factory=list)

    def observe(self, event: LedgerEvent) -> None:
        if event.kind == "xp_awarded":
            self.xp_gained += event.payload["xp_gained"]
        elif event.kind == "badge_unlocked":
            self.badges_unlocked.append(event.payload["badge_id"])
            self.xp_gained += event.payload["xp_reward"]
        elif event.kind == "mission_completed":
            self.missions_completed.append(event.payload["mission_id"])
        elif event.kind == "level_up":
            self.leveled_up = True
            self.new_level = event.payload["new_level"]


class ActivityRecorder:
    """Applies the ledger operations that belong to each activity."""

    def __init__(self, ledger: ProgressLedger) -> None:
        self.ledger = ledger

    def record(self, activity: BaseModel) -> ActivityOutcome:
        outcome = ActivityOutcome()
        unsubscribe = self.ledger.subscribe(outcome.observe)
        try:
            if isinstance(activity, QuizCompleted):
                self._quiz_completed(activity)
            elif isinstance(activity, FlashcardReviewed):
                self._flashcard_reviewed(activity)
            elif isinstance(activity, DoubtAsked):
                self._doubt_asked(activity)
            elif isinstance(activity, StudyPlanCreated):
                self.ledger.increment_counter("study_plans_created")
            elif isinstance(activity, StudySessionCompleted):
                self.ledger.advance_mission("study")
            elif isinstance(activity, ImageUploaded):
                self.ledger.increment_counter("images_uploaded")
            else:
                raise ValueError(f"Unsupported activity: {activity!r}")
        finally:
            unsubscribe()
        return outcome

    def _quiz_completed(self, activity: QuizCompleted) -> None:
        self.ledger.award_xp("complete_quiz")
        if activity.perfect:
            self.ledger.award_xp("perfect_quiz")
            self.ledger.unlock_badge(catalog.PERFECT_QUIZ_BADGE_ID)
        self.ledger.increment_counter("quizzes_completed")
        self.ledger.advance_mission("quiz")

    def _flashcard_reviewed(self, activity: FlashcardReviewed) -> None:
        for _ in range(activity.count):
            self.ledger.award_xp("review_flashcard")
            self.ledger.increment_counter("flashcards_reviewed")
        self.ledger.advance_mission("flashcard", activity.count)

    def _doubt_asked(self, activity: DoubtAsked) -> None:
        self.ledger.award_xp(catalog.DOUBT_SOLVED_ACTIVITY, catalog.DOUBT_SOLVED_XP)
        self.ledger.increment_counter("doubts_asked")
        if activity.step_submitted:
            self.ledger.increment_counter("steps_submitted")
        self.ledger.advance_mission("doubt")
