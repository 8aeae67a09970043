"""Notification emitters for progression events.

Types: level, stage, achievement, badge, challenge. Nothing else creates
notifications.
"""

from __future__ import annotations

from verdant.db.models import Achievement, Badge, Challenge, Notification
from verdant.game.level_thresholds import PLANT_STAGES
from verdant.storage.gateway import StorageGateway

_STAGE_NAMES = {s["stage"]: s["name"] for s in PLANT_STAGES}


async def emit_level_up(gateway: StorageGateway, user_id: str, new_level: int) -> Notification:
    return await gateway.create_notification(
        user_id,
        "level",
        "Level Up!",
        f"Congratulations! You've reached level {new_level}!",
    )


async def emit_stage_change(gateway: StorageGateway, user_id: str, new_stage: str) -> Notification:
    name = _STAGE_NAMES.get(new_stage, new_stage)
    return await gateway.create_notification(
        user_id,
        "stage",
        "Plant Evolution!",
        f"Your plant has evolved into a {name}!",
    )


async def emit_achievement_earned(gateway: StorageGateway, user_id: str, achievement: Achievement) -> Notification:
    return await gateway.create_notification(
        user_id,
        "achievement",
        "Achievement Unlocked!",
        f'You earned "{achievement.title}" and gained {achievement.xp_reward} XP!',
    )


async def emit_badge_earned(gateway: StorageGateway, user_id: str, badge: Badge) -> Notification:
    return await gateway.create_notification(
        user_id,
        "badge",
        "Badge Earned!",
        f'You earned the "{badge.title}" badge!',
    )


async def emit_challenge_completed(gateway: StorageGateway, user_id: str, challenge: Challenge) -> Notification:
    return await gateway.create_notification(
        user_id,
        "challenge",
        "Challenge Completed!",
        f'You completed "{challenge.title}" and earned {challenge.xp_reward} XP!',
    )
