"""ORM models for server-side progress persistence.

One row per user in ``user_profiles`` and ``user_stats``; badge and mission
overlays in child tables with UNIQUE constraints that prevent duplicate
overlay rows. Tables are created by the Alembic migration.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from graspify.db.base import Base


class UserProfile(Base):
    """Profile scalars. ``id`` is the external auth provider's user id."""

    __tablename__ = "user_profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, server_default="Learner")
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, unique=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    xp: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    level: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")
    streak: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    last_active_date: Mapped[date] = mapped_column(Date, nullable=False, server_default=text("CURRENT_DATE"))
    missions_date: Mapped[date] = mapped_column(Date, nullable=False, server_default=text("CURRENT_DATE"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


class UserStats(Base):
    """Cumulative activity counters, one row per user."""

    __tablename__ = "user_stats"

    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("user_profiles.id", ondelete="CASCADE"), primary_key=True
    )
    quizzes_completed: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    flashcards_reviewed: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    doubts_asked: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    steps_submitted: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    correct_steps: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    study_plans_created: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    images_uploaded: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


class UserBadge(Base):
    """Unlocked badges. UNIQUE(user_id, badge_id) prevents duplicates."""

    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="user_badges_user_id_badge_id_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False
    )
    badge_id: Mapped[str] = mapped_column(String(64), nullable=False)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


class UserMission(Base):
    """Daily mission progress, one row per (user, mission, day)."""

    __tablename__ = "user_missions"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "mission_id", "mission_date",
            name="user_missions_user_id_mission_id_mission_date_key",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False
    )
    mission_id: Mapped[str] = mapped_column(String(64), nullable=False)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
    mission_date: Mapped[date] = mapped_column(Date, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))
