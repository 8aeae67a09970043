"""Baseline schema.

Creates profiles, actions, daily_stats, category_stats, the achievement,
badge and challenge catalogs with their per-user join tables, friendships
and notifications.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Profiles ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS profiles (
            id VARCHAR(36) PRIMARY KEY,
            username VARCHAR(32) UNIQUE NOT NULL,
            email VARCHAR(320),
            avatar_url TEXT,
            health INTEGER NOT NULL DEFAULT 50 CHECK (health BETWEEN 0 AND 100),
            level INTEGER NOT NULL DEFAULT 1,
            xp INTEGER NOT NULL DEFAULT 0,
            total_xp BIGINT NOT NULL DEFAULT 0,
            streak_days INTEGER NOT NULL DEFAULT 0,
            longest_streak INTEGER NOT NULL DEFAULT 0,
            good_choices INTEGER NOT NULL DEFAULT 0,
            bad_choices INTEGER NOT NULL DEFAULT 0,
            plant_stage VARCHAR(16) NOT NULL DEFAULT 'seedling',
            last_action_date DATE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_profiles_leaderboard
        ON profiles(health DESC, level DESC)
    """)

    # --- Action log ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS actions (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            choice_id VARCHAR(32) NOT NULL,
            text VARCHAR(128) NOT NULL,
            icon VARCHAR(64),
            impact INTEGER NOT NULL,
            xp_earned INTEGER NOT NULL,
            is_good BOOLEAN NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_actions_user_id
        ON actions(user_id)
    """)

    # --- Aggregates ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS daily_stats (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            date DATE NOT NULL,
            good_count INTEGER NOT NULL DEFAULT 0,
            bad_count INTEGER NOT NULL DEFAULT 0,
            xp_earned INTEGER NOT NULL DEFAULT 0,
            health_start INTEGER,
            health_end INTEGER,
            CONSTRAINT daily_stats_user_id_date_key UNIQUE (user_id, date)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS category_stats (
            user_id VARCHAR(36) PRIMARY KEY REFERENCES profiles(id) ON DELETE CASCADE,
            recycling INTEGER NOT NULL DEFAULT 0,
            public_transport INTEGER NOT NULL DEFAULT 0,
            energy_saving INTEGER NOT NULL DEFAULT 0,
            water_conservation INTEGER NOT NULL DEFAULT 0,
            sustainable_shopping INTEGER NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Achievements ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS achievements (
            id SERIAL PRIMARY KEY,
            code VARCHAR(64) UNIQUE NOT NULL,
            title VARCHAR(128) NOT NULL,
            description TEXT NOT NULL,
            icon VARCHAR(64),
            category VARCHAR(32) NOT NULL,
            requirement INTEGER NOT NULL,
            xp_reward INTEGER NOT NULL DEFAULT 0
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_achievements (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            achievement_id INTEGER NOT NULL REFERENCES achievements(id),
            earned_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_achievements_user_id_achievement_id_key UNIQUE (user_id, achievement_id)
        )
    """)

    # --- Badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS badges (
            id SERIAL PRIMARY KEY,
            code VARCHAR(64) UNIQUE NOT NULL,
            title VARCHAR(128) NOT NULL,
            description TEXT NOT NULL,
            icon VARCHAR(64)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_badges (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            badge_id INTEGER NOT NULL REFERENCES badges(id),
            earned_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_badges_user_id_badge_id_key UNIQUE (user_id, badge_id)
        )
    """)

    # --- Challenges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS challenges (
            id SERIAL PRIMARY KEY,
            code VARCHAR(64) UNIQUE NOT NULL,
            title VARCHAR(128) NOT NULL,
            description TEXT NOT NULL,
            challenge_type VARCHAR(16) NOT NULL DEFAULT 'weekly',
            goal INTEGER NOT NULL,
            xp_reward INTEGER NOT NULL DEFAULT 0,
            is_active BOOLEAN NOT NULL DEFAULT true,
            start_date DATE,
            end_date DATE NOT NULL
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_challenges (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            challenge_id INTEGER NOT NULL REFERENCES challenges(id),
            progress INTEGER NOT NULL DEFAULT 0,
            completed BOOLEAN NOT NULL DEFAULT false,
            completed_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_challenges_user_id_challenge_id_key UNIQUE (user_id, challenge_id)
        )
    """)

    # --- Social ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS friendships (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            friend_id VARCHAR(36) NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            status VARCHAR(16) NOT NULL DEFAULT 'pending',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT friendships_user_id_friend_id_key UNIQUE (user_id, friend_id)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_friendships_user_id ON friendships(user_id)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_friendships_friend_id ON friendships(friend_id)")

    # --- Notifications ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS notifications (
            id BIGSERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            type VARCHAR(32) NOT NULL,
            title VARCHAR(256) NOT NULL,
            message TEXT NOT NULL,
            read BOOLEAN NOT NULL DEFAULT false,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_notifications_user_unread
        ON notifications(user_id, read, created_at DESC)
    """)


def downgrade() -> None:
    for table in [
        "notifications",
        "friendships",
        "user_challenges",
        "challenges",
        "user_badges",
        "badges",
        "user_achievements",
        "achievements",
        "category_stats",
        "daily_stats",
        "actions",
        "profiles",
    ]:
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")  # noqa: S608
