"""Daily streak tests: consecutive days, gaps, same-day idempotency, time zones."""

from datetime import datetime, timedelta, timezone

from graspify.gamification.clock import Clock


class TestRollDailyStreak:
    """Test ProgressLedger.roll_daily_streak."""

    def test_continues_from_yesterday(self, ledger, clock):
        profile = ledger.state.profile
        profile.last_active_date = clock.yesterday()
        profile.streak = 2

        ledger.roll_daily_streak()

        assert profile.streak == 3
        assert profile.last_active_date == clock.today()

    def test_gap_resets_to_one(self, ledger, clock):
        profile = ledger.state.profile
        profile.last_active_date = clock.today() - timedelta(days=3)
        profile.streak = 12

        ledger.roll_daily_streak()

        assert profile.streak == 1

    def test_same_day_is_idempotent(self, ledger, clock):
        profile = ledger.state.profile
        profile.last_active_date = clock.yesterday()
        profile.streak = 4

        ledger.roll_daily_streak()
        ledger.roll_daily_streak()
        ledger.roll_daily_streak()

        assert profile.streak == 5

    def test_new_profile_first_day_keeps_zero(self, ledger):
        """A brand-new profile is already marked active today."""
        ledger.roll_daily_streak()
        assert ledger.state.profile.streak == 0

    def test_consecutive_days_build_streak(self, ledger, frozen_time):
        for day in range(1, 6):
            frozen_time.advance(days=1)
            ledger.roll_daily_streak()
            assert ledger.state.profile.streak == day

    def test_seven_days_unlocks_on_fire(self, ledger, frozen_time, events):
        for _ in range(7):
            frozen_time.advance(days=1)
            ledger.roll_daily_streak()

        badge = ledger.get_badge("week_streak")
        assert badge.unlocked
        assert ledger.state.profile.xp == 200
        assert [e.kind for e in events].count("badge_unlocked") == 1

    def test_streak_updated_event_only_on_change(self, ledger, clock, events):
        ledger.state.profile.last_active_date = clock.yesterday()
        ledger.roll_daily_streak()
        ledger.roll_daily_streak()
        assert [e.kind for e in events] == ["streak_updated"]
        assert events[0].payload == {"old_streak": 0, "streak": 1}


class TestClock:
    """Test calendar dates in the configured zone."""

    def test_date_follows_zone(self):
        instant = datetime(2026, 3, 10, 20, 0, tzinfo=timezone.utc)
        assert Clock("UTC", now_fn=lambda: instant).today().day == 10
        assert Clock("Asia/Kolkata", now_fn=lambda: instant).today().day == 11

    def test_yesterday(self, clock):
        assert clock.today() - clock.yesterday() == timedelta(days=1)
