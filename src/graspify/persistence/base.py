"""Persistence contract for ledger state."""

from __future__ import annotations

from typing import Protocol

from graspify.gamification.state import LedgerState


class LedgerStore(Protocol):
    """Load and save one user's ledger state.

    ``load`` returns None for a user with nothing stored. ``save`` may raise;
    callers treat it as best-effort. Profile emails are unique across users,
    and ``find_user_by_email`` reports the stored owner of one.
    """

    async def load(self, user_id: str) -> LedgerState | None: ...

    async def save(self, user_id: str, state: LedgerState) -> None: ...

    async def find_user_by_email(self, email: str) -> str | None: ...
