"""Relational ledger store: profile/stats rows plus badge and mission overlay rows."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from graspify.db.models import UserBadge, UserMission, UserProfile, UserStats
from graspify.gamification.state import ActivityCounters, LedgerState, PlayerProfile
from graspify.persistence.document import (
    BadgeOverlay,
    MissionOverlay,
    ProgressDocument,
    from_document,
    to_document,
)

logger = logging.getLogger(__name__)

COUNTER_COLUMNS: tuple[str, ...] = tuple(ActivityCounters.model_fields)


class SqlLedgerStore:
    """Maps ``ProgressDocument`` onto the user_* tables.

    Mission rows are keyed by date; only rows for the document's
    ``missions_date`` are read back, older days stay as history.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def load(self, user_id: str) -> LedgerState | None:
        async with self.session_factory() as db:
            profile_row = await db.get(UserProfile, user_id)
            if profile_row is None:
                return None

            stats_row = await db.get(UserStats, user_id)

            badge_rows = (
                await db.execute(select(UserBadge).where(UserBadge.user_id == user_id))
            ).scalars().all()

            mission_rows = (
                await db.execute(
                    select(UserMission).where(
                        UserMission.user_id == user_id,
                        UserMission.mission_date == profile_row.missions_date,
                    )
                )
            ).scalars().all()

        doc = ProgressDocument(
            profile=PlayerProfile(
                id=profile_row.id,
                name=profile_row.name,
                email=profile_row.email,
                avatar=profile_row.avatar_url,
                xp=profile_row.xp,
                level=profile_row.level,
                streak=profile_row.streak,
                last_active_date=profile_row.last_active_date,
                badges=[
                    row.badge_id
                    for row in sorted(badge_rows, key=lambda r: r.unlocked_at)
                ],
                created_at=profile_row.created_at,
            ),
            badges=[
                BadgeOverlay(id=row.badge_id, unlocked=True, unlocked_at=row.unlocked_at)
                for row in badge_rows
            ],
            missions_date=profile_row.missions_date,
            missions=[
                MissionOverlay(id=row.mission_id, progress=row.progress, completed=row.completed)
                for row in mission_rows
            ],
            counters=ActivityCounters(
                **{c: getattr(stats_row, c) for c in COUNTER_COLUMNS}
            ) if stats_row is not None else ActivityCounters(),
        )
        return from_document(doc)

    async def save(self, user_id: str, state: LedgerState) -> None:
        doc = to_document(state)
        profile = doc.profile
        now = datetime.now(timezone.utc)

        async with self.session_factory() as db:
            profile_values = {
                "name": profile.name,
                "email": profile.email,
                "avatar_url": profile.avatar,
                "xp": profile.xp,
                "level": profile.level,
                "streak": profile.streak,
                "last_active_date": profile.last_active_date,
                "missions_date": doc.missions_date,
                "updated_at": now,
            }
            stmt = pg_insert(UserProfile).values(
                id=user_id, created_at=profile.created_at, **profile_values
            )
            await db.execute(
                stmt.on_conflict_do_update(index_elements=[UserProfile.id], set_=profile_values)
            )

            counter_values = {c: getattr(doc.counters, c) for c in COUNTER_COLUMNS}
            counter_values["updated_at"] = now
            stmt = pg_insert(UserStats).values(user_id=user_id, **counter_values)
            await db.execute(
                stmt.on_conflict_do_update(index_elements=[UserStats.user_id], set_=counter_values)
            )

            if doc.badges:
                # Unlocks are terminal; an existing row is never rewritten
                stmt = pg_insert(UserBadge).values([
                    {"user_id": user_id, "badge_id": b.id, "unlocked_at": b.unlocked_at or now}
                    for b in doc.badges
                ])
                await db.execute(
                    stmt.on_conflict_do_nothing(constraint="user_badges_user_id_badge_id_key")
                )

            if doc.missions:
                stmt = pg_insert(UserMission).values([
                    {
                        "user_id": user_id,
                        "mission_id": m.id,
                        "progress": m.progress,
                        "completed": m.completed,
                        "mission_date": doc.missions_date,
                        "updated_at": now,
                    }
                    for m in doc.missions
                ])
                await db.execute(
                    stmt.on_conflict_do_update(
                        constraint="user_missions_user_id_mission_id_mission_date_key",
                        set_={
                            "progress": stmt.excluded.progress,
                            "completed": stmt.excluded.completed,
                            "updated_at": stmt.excluded.updated_at,
                        },
                    )
                )

            await db.commit()
        logger.debug("Saved progress rows for %s", user_id)

    async def find_user_by_email(self, email: str) -> str | None:
        async with self.session_factory() as db:
            return (
                await db.execute(select(UserProfile.id).where(UserProfile.email == email))
            ).scalar_one_or_none()
