"""Progress ledger: XP, levels, daily streak, badges, missions and counters.

One ledger instance owns one user's ``LedgerState`` and mutates it in place.
Operations are synchronous and never suspend, so a caller holding the
per-user lock (see ``ProgressService``) sees no interleaved writes. A
multi-step change that fails part way is undone by the service, which
restores the state it had on entry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from graspify.gamification import catalog
from graspify.gamification.clock import Clock
from graspify.gamification.levels import (
    LevelProgress,
    compute_level,
    level_progress,
    level_title,
    streak_multiplier,
)
from graspify.gamification.state import Badge, LedgerState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class XPAward:
    xp_gained: int
    leveled_up: bool
    new_level: int | None = None


@dataclass(frozen=True)
class LedgerEvent:
    """Change notification emitted after a ledger mutation."""

    kind: str
    payload: dict = field(default_factory=dict)


LedgerListener = Callable[[LedgerEvent], None]


class ProgressLedger:
    """Gamification rules for a single user."""

    def __init__(self, state: LedgerState, clock: Clock) -> None:
        self.state = state
        self.clock = clock
        self._listeners: list[LedgerListener] = []

    # --- Change notification ---

    def subscribe(self, listener: LedgerListener) -> Callable[[], None]:
        """Register ``listener`` for ledger events. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: str, **payload: object) -> None:
        event = LedgerEvent(kind=kind, payload=payload)
        for listener in list(self._listeners):
            listener(event)

    # --- Derived values ---

    @property
    def user_id(self) -> str:
        return self.state.profile.id

    def streak_multiplier(self) -> float:
        return streak_multiplier(self.state.profile.streak)

    def level_progress(self) -> LevelProgress:
        return level_progress(self.state.profile.xp, self.state.profile.level)

    def level_title(self) -> str:
        return level_title(self.state.profile.level)

    def get_badge(self, badge_id: str) -> Badge | None:
        for badge in self.state.badges:
            if badge.id == badge_id:
                return badge
        return None

    # --- XP ---

    def award_xp(self, activity_type: str, amount: int | None = None) -> XPAward:
        """Grant XP for an activity, scaled by the streak multiplier.

        ``amount`` overrides the base reward. Activity types without a fixed
        base (mission completion, streak bonus) require it.
        """
        if activity_type not in catalog.XP_REWARDS:
            raise ValueError(f"Unknown XP activity: {activity_type}")
        base = amount if amount is not None else catalog.XP_REWARDS[activity_type]
        if base is None:
            raise ValueError(f"XP activity {activity_type} requires an explicit amount")
        if base < 0:
            raise ValueError(f"XP amount must be non-negative, got {base}")

        multiplier = self.streak_multiplier()
        xp_gained = int(base * multiplier)

        profile = self.state.profile
        old_level = profile.level
        profile.xp += xp_gained
        profile.level = compute_level(profile.xp)
        leveled_up = profile.level > old_level
        new_level = profile.level

        self._emit(
            "xp_awarded",
            activity=activity_type,
            base=base,
            multiplier=multiplier,
            xp_gained=xp_gained,
            total_xp=profile.xp,
        )
        if leveled_up:
            self._emit_level_up(old_level, new_level)

        if new_level >= catalog.LEVEL_BADGE_THRESHOLD:
            self.unlock_badge(catalog.LEVEL_BADGE_ID)

        return XPAward(
            xp_gained=xp_gained,
            leveled_up=leveled_up,
            new_level=new_level if leveled_up else None,
        )

    def _emit_level_up(self, old_level: int, new_level: int) -> None:
        logger.info("User %s reached level %d", self.user_id, new_level)
        self._emit(
            "level_up",
            old_level=old_level,
            new_level=new_level,
            title=level_title(new_level),
        )

    # --- Streak ---

    def roll_daily_streak(self) -> None:
        """Record today's activity in the consecutive-day streak.

        Idempotent within a calendar day: only the first call of the day can
        change the streak.
        """
        profile = self.state.profile
        today = self.clock.today()
        last_active = profile.last_active_date
        old_streak = profile.streak

        if last_active == self.clock.yesterday():
            profile.streak += 1
        elif last_active != today:
            profile.streak = 1

        profile.last_active_date = today

        if profile.streak != old_streak:
            self._emit("streak_updated", old_streak=old_streak, streak=profile.streak)

        if profile.streak >= catalog.STREAK_BADGE_THRESHOLD:
            self.unlock_badge(catalog.STREAK_BADGE_ID)

    # --- Badges ---

    def unlock_badge(self, badge_id: str) -> Badge | None:
        """Unlock a badge and grant its flat XP reward.

        Returns None if the badge is unknown or already unlocked.
        """
        badge = self.get_badge(badge_id)
        if badge is None or badge.unlocked:
            return None

        badge.unlocked = True
        badge.unlocked_at = self.clock.now()

        profile = self.state.profile
        profile.badges.append(badge_id)
        old_level = profile.level
        profile.xp += badge.xp_reward
        profile.level = compute_level(profile.xp)

        logger.info("User %s unlocked badge %s", self.user_id, badge_id)
        self._emit(
            "badge_unlocked",
            badge_id=badge_id,
            name=badge.name,
            xp_reward=badge.xp_reward,
        )

        if profile.level > old_level:
            self._emit_level_up(old_level, profile.level)
            if profile.level >= catalog.LEVEL_BADGE_THRESHOLD:
                self.unlock_badge(catalog.LEVEL_BADGE_ID)

        return badge

    # --- Missions ---

    def advance_mission(self, category: str, amount: int = 1) -> None:
        """Advance every incomplete mission of ``category`` by ``amount``."""
        if category not in catalog.MISSION_CATEGORIES:
            raise ValueError(f"Unknown mission category: {category}")
        if amount < 0:
            raise ValueError(f"Mission progress cannot decrease, got {amount}")

        for mission in self.state.missions:
            if mission.category != category or mission.completed:
                continue
            mission.progress = min(mission.progress + amount, mission.target)
            if mission.progress >= mission.target:
                mission.completed = True
                self._emit(
                    "mission_completed",
                    mission_id=mission.id,
                    xp_reward=mission.xp_reward,
                )
                self.award_xp("complete_mission", mission.xp_reward)

    def reset_daily_missions(self) -> None:
        """Start today's mission set from scratch, discarding any progress."""
        self.state.missions = catalog.fresh_missions()
        self.state.missions_date = self.clock.today()
        self._emit("missions_reset", missions_date=self.state.missions_date.isoformat())

    def ensure_current_day(self) -> bool:
        """Reset the missions if they belong to an earlier day. Returns True on reset."""
        if self.state.missions_date == self.clock.today():
            return False
        logger.debug(
            "Rolling missions for %s from %s", self.user_id, self.state.missions_date
        )
        self.reset_daily_missions()
        return True

    # --- Counters ---

    def increment_counter(self, counter_name: str) -> None:
        """Bump an activity counter and unlock any badge whose threshold it meets."""
        if counter_name not in catalog.COUNTER_NAMES:
            raise ValueError(f"Unknown activity counter: {counter_name}")

        counters = self.state.counters
        value = getattr(counters, counter_name) + 1
        setattr(counters, counter_name, value)
        self._emit("counter_incremented", counter=counter_name, value=value)

        for rule in catalog.COUNTER_RULES:
            if rule.counter == counter_name and rule.matches(value):
                self.unlock_badge(rule.badge_id)

    # --- Profile ---

    def update_profile(
        self,
        name: str | None = None,
        email: str | None = None,
        avatar: str | None = None,
    ) -> None:
        """Edit identity fields. Progress fields are never touched."""
        profile = self.state.profile
        changed = {}
        for attr, value in (("name", name), ("email", email), ("avatar", avatar)):
            if value is not None and getattr(profile, attr) != value:
                setattr(profile, attr, value)
                changed[attr] = value
        if changed:
            self._emit("profile_updated", **changed)
