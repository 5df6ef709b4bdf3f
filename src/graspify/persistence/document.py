"""Stored representation of a ledger: profile scalars plus per-user overlays.

Catalog fields (names, targets, rewards) are never stored. They are
re-applied from code on load, so catalog edits reach existing users.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from graspify.gamification import catalog
from graspify.gamification.state import ActivityCounters, LedgerState, PlayerProfile


class BadgeOverlay(BaseModel):
    id: str
    unlocked: bool = False
    unlocked_at: datetime | None = None


class MissionOverlay(BaseModel):
    id: str
    progress: int = Field(default=0, ge=0)
    completed: bool = False


class ProgressDocument(BaseModel):
    profile: PlayerProfile
    badges: list[BadgeOverlay] = Field(default_factory=list)
    missions_date: date
    missions: list[MissionOverlay] = Field(default_factory=list)
    counters: ActivityCounters = Field(default_factory=ActivityCounters)


def to_document(state: LedgerState) -> ProgressDocument:
    """Strip catalog data, keeping only what the user changed."""
    return ProgressDocument(
        profile=state.profile.model_copy(deep=True),
        badges=[
            BadgeOverlay(id=b.id, unlocked=b.unlocked, unlocked_at=b.unlocked_at)
            for b in state.badges
            if b.unlocked
        ],
        missions_date=state.missions_date,
        missions=[
            MissionOverlay(id=m.id, progress=m.progress, completed=m.completed)
            for m in state.missions
        ],
        counters=state.counters.model_copy(),
    )


def from_document(doc: ProgressDocument) -> LedgerState:
    """Rebuild full ledger state by laying overlays over the current catalog.

    Overlays for ids no longer in the catalog are dropped. Mission progress
    is clamped to the current target.
    """
    badge_overlays = {o.id: o for o in doc.badges}
    badges = catalog.fresh_badges()
    for badge in badges:
        overlay = badge_overlays.get(badge.id)
        if overlay is not None and overlay.unlocked:
            badge.unlocked = True
            badge.unlocked_at = overlay.unlocked_at

    mission_overlays = {o.id: o for o in doc.missions}
    missions = catalog.fresh_missions()
    for mission in missions:
        overlay = mission_overlays.get(mission.id)
        if overlay is not None:
            mission.progress = min(overlay.progress, mission.target)
            mission.completed = overlay.completed or mission.progress >= mission.target

    profile = doc.profile.model_copy(deep=True)
    profile.badges = [b for b in profile.badges if b in catalog.BADGE_IDS]

    return LedgerState(
        profile=profile,
        badges=badges,
        missions=missions,
        missions_date=doc.missions_date,
        counters=doc.counters.model_copy(),
    )
