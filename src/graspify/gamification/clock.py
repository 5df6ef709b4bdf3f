"""Calendar clock bound to one time zone."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo


class Clock:
    """Current instant and calendar date in a fixed zone.

    Streak and mission rollover compare calendar dates, so every caller in a
    process must share one zone or the same instant can read as two days.
    """

    def __init__(self, tz: str = "UTC", now_fn: Callable[[], datetime] | None = None) -> None:
        self.tz = ZoneInfo(tz)
        self._now_fn = now_fn or (lambda: datetime.now(timezone.utc))

    def now(self) -> datetime:
        return self._now_fn().astimezone(self.tz)

    def today(self) -> date:
        return self.now().date()

    def yesterday(self) -> date:
        return self.today() - timedelta(days=1)
