"""Activity recorder tests: one learning event, every reward it implies."""

import pytest
from pydantic import TypeAdapter, ValidationError

from graspify.gamification.activities import (
    Activity,
    ActivityRecorder,
    DoubtAsked,
    FlashcardReviewed,
    ImageUploaded,
    QuizCompleted,
    StudyPlanCreated,
    StudySessionCompleted,
)

activity_adapter = TypeAdapter(Activity)


def _mission(ledger, mission_id):
    return next(m for m in ledger.state.missions if m.id == mission_id)


class TestQuizCompleted:
    """Test quiz completion."""

    def test_plain_quiz(self, ledger):
        outcome = ActivityRecorder(ledger).record(QuizCompleted(type="quiz_completed"))

        assert outcome.xp_gained == 50
        assert outcome.leveled_up is False
        assert outcome.badges_unlocked == []
        assert ledger.state.counters.quizzes_completed == 1
        assert _mission(ledger, "mission_quiz").progress == 1

    def test_perfect_quiz(self, ledger):
        outcome = ActivityRecorder(ledger).record(QuizCompleted(type="quiz_completed", perfect=True))

        # 50 + 25 + Perfectionist 150
        assert outcome.xp_gained == 225
        assert outcome.leveled_up is True
        assert outcome.new_level == 2
        assert outcome.badges_unlocked == ["perfect_score"]
        assert ledger.state.profile.xp == 225

    def test_second_quiz_completes_mission(self, ledger):
        recorder = ActivityRecorder(ledger)
        recorder.record(QuizCompleted(type="quiz_completed"))
        outcome = recorder.record(QuizCompleted(type="quiz_completed"))

        assert outcome.missions_completed == ["mission_quiz"]
        assert outcome.xp_gained == 50 + 75
        assert ledger.state.profile.xp == 175

    def test_fifth_quiz_unlocks_quiz_master(self, ledger):
        recorder = ActivityRecorder(ledger)
        outcomes = [recorder.record(QuizCompleted(type="quiz_completed")) for _ in range(5)]
        assert outcomes[-1].badges_unlocked == ["quiz_master"]
        assert all(not o.badges_unlocked for o in outcomes[:-1])


class TestFlashcardReviewed:
    """Test flashcard reviews."""

    def test_batch_of_cards(self, ledger):
        outcome = ActivityRecorder(ledger).record(FlashcardReviewed(type="flashcard_reviewed", count=15))

        # 15 * 3 + Flash Review mission 50
        assert outcome.xp_gained == 95
        assert outcome.missions_completed == ["mission_flashcard"]
        assert ledger.state.counters.flashcards_reviewed == 15

    def test_fiftieth_card_unlocks_memory_master(self, ledger):
        ledger.state.counters.flashcards_reviewed = 48
        outcome = ActivityRecorder(ledger).record(FlashcardReviewed(type="flashcard_reviewed", count=3))
        assert outcome.badges_unlocked == ["flashcard_fan"]

    def test_per_card_multiplier(self, ledger):
        """Each card is floored separately: 3 * 1.25 -> 3, not 3.75 per card."""
        ledger.state.profile.streak = 3
        outcome = ActivityRecorder(ledger).record(FlashcardReviewed(type="flashcard_reviewed", count=4))
        assert outcome.xp_gained == 12


class TestDoubtAsked:
    """Test AI tutor questions."""

    def test_every_answer_earns_fixed_xp(self, ledger):
        """An answered doubt is worth 20 XP even without a submitted step."""
        outcome = ActivityRecorder(ledger).record(DoubtAsked(type="doubt_asked"))

        assert outcome.xp_gained == 20
        assert outcome.badges_unlocked == []
        assert ledger.state.counters.doubts_asked == 1
        assert ledger.state.counters.steps_submitted == 0
        assert ledger.state.counters.correct_steps == 0
        assert _mission(ledger, "mission_doubt").progress == 1

    def test_doubt_xp_uses_streak_multiplier(self, ledger):
        ledger.state.profile.streak = 7
        outcome = ActivityRecorder(ledger).record(DoubtAsked(type="doubt_asked"))
        assert outcome.xp_gained == 30

    def test_submitted_step(self, ledger):
        outcome = ActivityRecorder(ledger).record(DoubtAsked(type="doubt_asked", step_submitted=True))

        # 20 + First Steps 25
        assert outcome.xp_gained == 45
        assert outcome.badges_unlocked == ["first_step"]
        assert ledger.state.counters.steps_submitted == 1

    def test_third_doubt_completes_mission(self, ledger):
        recorder = ActivityRecorder(ledger)
        recorder.record(DoubtAsked(type="doubt_asked"))
        recorder.record(DoubtAsked(type="doubt_asked"))
        outcome = recorder.record(DoubtAsked(type="doubt_asked"))

        # 20 + Curious Mind 60
        assert outcome.xp_gained == 80
        assert outcome.missions_completed == ["mission_doubt"]
        assert ledger.state.profile.xp == 120


class TestOtherActivities:
    """Test study and upload activities."""

    def test_study_plan(self, ledger):
        outcome = ActivityRecorder(ledger).record(StudyPlanCreated(type="study_plan_created"))
        assert outcome.badges_unlocked == ["study_planner"]
        assert outcome.xp_gained == 50

    def test_study_session(self, ledger):
        outcome = ActivityRecorder(ledger).record(StudySessionCompleted(type="study_session_completed"))
        assert outcome.missions_completed == ["mission_study"]
        assert outcome.xp_gained == 40

    def test_image_uploads(self, ledger):
        recorder = ActivityRecorder(ledger)
        for _ in range(4):
            recorder.record(ImageUploaded(type="image_uploaded"))
        outcome = recorder.record(ImageUploaded(type="image_uploaded"))
        assert outcome.badges_unlocked == ["ocr_explorer"]

    def test_recorder_unsubscribes(self, ledger):
        ActivityRecorder(ledger).record(ImageUploaded(type="image_uploaded"))
        assert ledger._listeners == []


class TestActivityParsing:
    """Test the discriminated activity union."""

    def test_dispatch_on_type(self):
        activity = activity_adapter.validate_python({"type": "flashcard_reviewed", "count": 3})
        assert isinstance(activity, FlashcardReviewed)
        assert activity.count == 3

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            activity_adapter.validate_python({"type": "video_watched"})

    def test_count_bounds(self):
        with pytest.raises(ValidationError):
            activity_adapter.validate_python({"type": "flashcard_reviewed", "count": 0})
