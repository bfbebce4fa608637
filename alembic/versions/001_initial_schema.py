"""Initial schema: users, habits, habit completions, follows.

The completion ledger's one-per-period rule and the follow graph's
no-duplicate / no-self-follow rules are enforced here at the storage layer.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-17
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id BIGSERIAL PRIMARY KEY,
            username VARCHAR(50) UNIQUE NOT NULL,
            email VARCHAR(320) UNIQUE NOT NULL,
            password_hash VARCHAR(256) NOT NULL,
            full_name VARCHAR(100),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Habits ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS habits (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            name VARCHAR(100) NOT NULL,
            name_key VARCHAR(200) NOT NULL,
            description TEXT,
            frequency VARCHAR(16) NOT NULL,
            category VARCHAR(50),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_habits_frequency CHECK (frequency IN ('daily', 'weekly')),
            CONSTRAINT uq_habits_user_name_key UNIQUE (user_id, name_key)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_habits_user_id
        ON habits(user_id)
    """)

    # --- Completion ledger ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS habit_completions (
            id BIGSERIAL PRIMARY KEY,
            habit_id BIGINT NOT NULL REFERENCES habits(id) ON DELETE CASCADE,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            period_key DATE NOT NULL,
            completed_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_habit_completions_habit_period UNIQUE (habit_id, period_key)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_habit_completions_user_id
        ON habit_completions(user_id)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_habit_completions_feed
        ON habit_completions(completed_at DESC, id)
    """)

    # --- Follow graph ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS follows (
            id BIGSERIAL PRIMARY KEY,
            follower_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            following_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_follows_follower_following UNIQUE (follower_id, following_id),
            CONSTRAINT ck_follows_no_self_follow CHECK (follower_id <> following_id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_follows_follower_id
        ON follows(follower_id)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_follows_following_id
        ON follows(following_id)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS follows CASCADE")
    op.execute("DROP TABLE IF EXISTS habit_completions CASCADE")
    op.execute("DROP TABLE IF EXISTS habits CASCADE")
    op.execute("DROP TABLE IF EXISTS users CASCADE")
