"""Create profile, daily entry and badge tables for reading progress

Revision ID: 0001_create_progress_tables
Revises:
Create Date: 2026-10-18
"""
from alembic import op

revision = "0001_create_progress_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS profiles (
            id TEXT PRIMARY KEY,
            plan_start_date DATE,
            selected_plan_id TEXT,
            streak INTEGER NOT NULL DEFAULT 0,
            custom_plan_config JSONB,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS user_daily_entries (
            id SERIAL PRIMARY KEY,
            user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            day_id INTEGER NOT NULL CHECK (day_id >= 1),
            context_key TEXT NOT NULL DEFAULT 'whole_bible',
            completed_at TIMESTAMPTZ,
            note TEXT,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (user_id, day_id, context_key)
        );

        CREATE INDEX IF NOT EXISTS idx_user_daily_entries_user
            ON user_daily_entries (user_id);

        CREATE TABLE IF NOT EXISTS user_badges (
            id SERIAL PRIMARY KEY,
            user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            badge_id TEXT NOT NULL,
            unlocked_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (user_id, badge_id)
        );
        """
    )


def downgrade():
    op.execute(
        """
        DROP TABLE IF EXISTS user_badges;
        DROP INDEX IF EXISTS idx_user_daily_entries_user;
        DROP TABLE IF EXISTS user_daily_entries;
        DROP TABLE IF EXISTS profiles;
        """
    )
