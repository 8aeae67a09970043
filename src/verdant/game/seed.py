"""Catalog seed data — achievements, badges and starter challenges.

Codes MUST match the badge predicates in ``achievement_service.BADGE_RULES``
and the frontend icon map.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from verdant.database import dialect_insert
from verdant.db.models import Achievement, Badge, Challenge

logger = logging.getLogger(__name__)

ACHIEVEMENT_SEED_DATA: list[dict] = [
    # Good choices
    {
        "code": "first_step",
        "title": "First Step",
        "description": "Make your first eco-friendly choice",
        "icon": "ri-footprint-line",
        "category": "choices",
        "requirement": 1,
        "xp_reward": 10,
    },
    {
        "code": "eco_starter",
        "title": "Eco Starter",
        "description": "Make 10 eco-friendly choices",
        "icon": "ri-seedling-line",
        "category": "choices",
        "requirement": 10,
        "xp_reward": 50,
    },
    {
        "code": "green_warrior",
        "title": "Green Warrior",
        "description": "Make 50 eco-friendly choices",
        "icon": "ri-sword-line",
        "category": "choices",
        "requirement": 50,
        "xp_reward": 100,
    },
    {
        "code": "eco_champion",
        "title": "Eco Champion",
        "description": "Make 100 eco-friendly choices",
        "icon": "ri-trophy-line",
        "category": "choices",
        "requirement": 100,
        "xp_reward": 200,
    },
    {
        "code": "planet_hero",
        "title": "Planet Hero",
        "description": "Make 500 eco-friendly choices",
        "icon": "ri-earth-line",
        "category": "choices",
        "requirement": 500,
        "xp_reward": 500,
    },
    # Streaks
    {
        "code": "streak_3",
        "title": "On a Roll",
        "description": "Log choices 3 days in a row",
        "icon": "ri-fire-line",
        "category": "streaks",
        "requirement": 3,
        "xp_reward": 30,
    },
    {
        "code": "streak_7",
        "title": "Week Warrior",
        "description": "Log choices 7 days in a row",
        "icon": "ri-calendar-check-line",
        "category": "streaks",
        "requirement": 7,
        "xp_reward": 75,
    },
    {
        "code": "streak_30",
        "title": "Habit Master",
        "description": "Log choices 30 days in a row",
        "icon": "ri-medal-line",
        "category": "streaks",
        "requirement": 30,
        "xp_reward": 300,
    },
    # Health
    {
        "code": "perfect_health",
        "title": "Perfect Health",
        "description": "Bring your plant to full health",
        "icon": "ri-heart-pulse-line",
        "category": "health",
        "requirement": 100,
        "xp_reward": 100,
    },
]

BADGE_SEED_DATA: list[dict] = [
    {"code": "recycler", "title": "Recycler", "description": "Log 50 recycling choices", "icon": "ri-recycle-line"},
    {"code": "commuter", "title": "Green Commuter", "description": "Log 50 public transport choices", "icon": "ri-bus-line"},
    {"code": "energy_saver", "title": "Energy Saver", "description": "Log 50 energy saving choices", "icon": "ri-lightbulb-line"},
    {"code": "water_warrior", "title": "Water Warrior", "description": "Log 50 water conservation choices", "icon": "ri-drop-line"},
    {
        "code": "sustainable_shopper",
        "title": "Sustainable Shopper",
        "description": "Log 50 sustainable shopping choices",
        "icon": "ri-shopping-bag-line",
    },
    {"code": "level_5", "title": "Sprouting", "description": "Reach level 5", "icon": "ri-plant-line"},
    {"code": "level_10", "title": "Growing Strong", "description": "Reach level 10", "icon": "ri-leaf-line"},
    {"code": "level_25", "title": "Deep Roots", "description": "Reach level 25", "icon": "ri-tree-line"},
    {"code": "level_50", "title": "Ancient Guardian", "description": "Reach level 50", "icon": "ri-ancient-gate-line"},
]

# (code, title, description, type, goal, xp_reward, duration in days)
CHALLENGE_SEED_DATA: list[tuple[str, str, str, str, int, int, int]] = [
    ("daily_five", "Daily Five", "Make 5 eco-friendly choices", "daily", 5, 25, 1),
    ("green_week", "Green Week", "Make 20 eco-friendly choices this week", "weekly", 20, 100, 7),
    ("eco_marathon", "Eco Marathon", "Make 100 eco-friendly choices this month", "monthly", 100, 400, 30),
]


async def seed_achievements(db: AsyncSession) -> int:
    """Upsert the achievement catalog. Returns number of rows seeded."""
    seeded = 0
    for data in ACHIEVEMENT_SEED_DATA:
        stmt = dialect_insert(db, Achievement.__table__).values(**data)
        stmt = stmt.on_conflict_do_update(
            index_elements=["code"],
            set_={
                "title": stmt.excluded.title,
                "description": stmt.excluded.description,
                "icon": stmt.excluded.icon,
                "category": stmt.excluded.category,
                "requirement": stmt.excluded.requirement,
                "xp_reward": stmt.excluded.xp_reward,
            },
        )
        await db.execute(stmt)
        seeded += 1
    return seeded


async def seed_badges(db: AsyncSession) -> int:
    """Upsert the badge catalog. Returns number of rows seeded."""
    seeded = 0
    for data in BADGE_SEED_DATA:
        stmt = dialect_insert(db, Badge.__table__).values(**data)
        stmt = stmt.on_conflict_do_update(
            index_elements=["code"],
            set_={
                "title": stmt.excluded.title,
                "description": stmt.excluded.description,
                "icon": stmt.excluded.icon,
            },
        )
        await db.execute(stmt)
        seeded += 1
    return seeded


async def seed_challenges(db: AsyncSession, today: date | None = None) -> int:
    """Insert starter challenges that don't exist yet.

    Existing rows are left alone so a restart never extends a running window.
    """
    if today is None:
        today = datetime.now(timezone.utc).date()
    seeded = 0
    for code, title, description, challenge_type, goal, xp_reward, days in CHALLENGE_SEED_DATA:
        stmt = dialect_insert(db, Challenge.__table__).values(
            code=code,
            title=title,
            description=description,
            challenge_type=challenge_type,
            goal=goal,
            xp_reward=xp_reward,
            is_active=True,
            start_date=today,
            end_date=today + timedelta(days=days),
        )
        stmt = stmt.on_conflict_do_nothing(index_elements=["code"])
        result = await db.execute(stmt)
        seeded += result.rowcount or 0
    return seeded


async def seed_catalogs(db: AsyncSession) -> dict[str, int]:
    """Seed every catalog and commit."""
    counts = {
        "achievements": await seed_achievements(db),
        "badges": await seed_badges(db),
        "challenges": await seed_challenges(db),
    }
    await db.commit()
    logger.info(
        "Seeded %d achievements, %d badges, %d new challenges",
        counts["achievements"],
        counts["badges"],
        counts["challenges"],
    )
    return counts
