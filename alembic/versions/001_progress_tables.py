"""Progress tables.

Creates user_profiles, user_stats, user_badges and user_missions for the
sql ledger store.

Revision ID: 001_progress_tables
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_progress_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Profiles ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_profiles (
            id VARCHAR(64) PRIMARY KEY,
            name VARCHAR(128) NOT NULL DEFAULT 'Learner',
            email VARCHAR(320) UNIQUE,
            avatar_url TEXT,
            xp INTEGER NOT NULL DEFAULT 0 CHECK (xp >= 0),
            level INTEGER NOT NULL DEFAULT 1 CHECK (level >= 1),
            streak INTEGER NOT NULL DEFAULT 0 CHECK (streak >= 0),
            last_active_date DATE NOT NULL DEFAULT CURRENT_DATE,
            missions_date DATE NOT NULL DEFAULT CURRENT_DATE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_profiles_xp
        ON user_profiles(xp DESC)
    """)

    # --- Counters ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_stats (
            user_id VARCHAR(64) PRIMARY KEY REFERENCES user_profiles(id) ON DELETE CASCADE,
            quizzes_completed INTEGER NOT NULL DEFAULT 0,
            flashcards_reviewed INTEGER NOT NULL DEFAULT 0,
            doubts_asked INTEGER NOT NULL DEFAULT 0,
            steps_submitted INTEGER NOT NULL DEFAULT 0,
            correct_steps INTEGER NOT NULL DEFAULT 0,
            study_plans_created INTEGER NOT NULL DEFAULT 0,
            images_uploaded INTEGER NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Unlocked badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_badges (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES user_profiles(id) ON DELETE CASCADE,
            badge_id VARCHAR(64) NOT NULL,
            unlocked_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_badges_user_id_badge_id_key UNIQUE (user_id, badge_id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_badges_user
        ON user_badges(user_id)
    """)

    # --- Daily missions ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_missions (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES user_profiles(id) ON DELETE CASCADE,
            mission_id VARCHAR(64) NOT NULL,
            progress INTEGER NOT NULL DEFAULT 0 CHECK (progress >= 0),
            completed BOOLEAN NOT NULL DEFAULT false,
            mission_date DATE NOT NULL,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_missions_user_id_mission_id_mission_date_key
                UNIQUE (user_id, mission_id, mission_date)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_missions_user_date
        ON user_missions(user_id, mission_date)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS user_missions CASCADE")
    op.execute("DROP TABLE IF EXISTS user_badges CASCADE")
    op.execute("DROP TABLE IF EXISTS user_stats CASCADE")
    op.execute("DROP TABLE IF EXISTS user_profiles CASCADE")
