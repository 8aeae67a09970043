"""Achievement and badge evaluation against cumulative stats.

Achievements are data-driven (category + requirement) and pay XP.
Badges use a fixed code -> predicate table and pay nothing.
Both are idempotent: already-earned items are skipped before insert, and a
conflicting insert is treated as "already earned".
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from verdant.db.models import Notification
from verdant.game.engine import HEALTH_MAX, ProfileState
from verdant.game.notification_service import emit_achievement_earned, emit_badge_earned
from verdant.game.stats_service import category_totals
from verdant.game.xp_service import grant_xp
from verdant.storage.gateway import StorageGateway

logger = logging.getLogger(__name__)

CATEGORY_BADGE_THRESHOLD = 50

BadgeRule = Callable[[ProfileState, dict[str, int]], bool]


def _category_rule(category: str) -> BadgeRule:
    return lambda _profile, totals: totals.get(category, 0) >= CATEGORY_BADGE_THRESHOLD


def _level_rule(level: int) -> BadgeRule:
    return lambda profile, _totals: profile.level >= level


BADGE_RULES: dict[str, BadgeRule] = {
    "recycler": _category_rule("recycling"),
    "commuter": _category_rule("public_transport"),
    "energy_saver": _category_rule("energy_saving"),
    "water_warrior": _category_rule("water_conservation"),
    "sustainable_shopper": _category_rule("sustainable_shopping"),
    "level_5": _level_rule(5),
    "level_10": _level_rule(10),
    "level_25": _level_rule(25),
    "level_50": _level_rule(50),
}


def achievement_earned(achievement: Any, profile: ProfileState) -> bool:
    """Evaluate one achievement's predicate against the profile counters."""
    if achievement.category == "choices":
        return profile.good_choices >= achievement.requirement
    if achievement.category == "streaks":
        return profile.streak_days >= achievement.requirement
    if achievement.category == "health":
        # Exact match: only a full-health plant qualifies
        return achievement.code == "perfect_health" and profile.health == HEALTH_MAX
    return False


def badge_earned(code: str, profile: ProfileState, totals: dict[str, int]) -> bool:
    rule = BADGE_RULES.get(code)
    if rule is None:
        return False
    return rule(profile, totals)


async def check_achievements(
    gateway: StorageGateway,
    user_id: str,
    profile: ProfileState,
) -> tuple[ProfileState, list[Notification]]:
    """Award every newly satisfied achievement.

    Rewards are applied in catalog order, so a later predicate sees the
    profile after earlier rewards.
    """
    achievements = await gateway.get_all_achievements()
    earned_ids = {ua.achievement_id for ua in await gateway.get_user_achievements(user_id)}
    notifications: list[Notification] = []

    for achievement in achievements:
        if achievement.id in earned_ids:
            continue
        if not achievement_earned(achievement, profile):
            continue

        if await gateway.award_achievement(user_id, achievement.id) is None:
            continue  # Race: another request awarded it first

        earned_ids.add(achievement.id)
        reward = await grant_xp(gateway, user_id, profile, achievement.xp_reward, f"achievement:{achievement.code}")
        profile = reward.profile
        notifications.append(await emit_achievement_earned(gateway, user_id, achievement))
        logger.info("Achievement %s awarded to %s", achievement.code, user_id)

    return profile, notifications


async def check_badges(
    gateway: StorageGateway,
    user_id: str,
    profile: ProfileState,
) -> list[Notification]:
    """Award every newly satisfied badge. Returns the notifications emitted."""
    badges = await gateway.get_all_badges()
    earned_ids = {ub.badge_id for ub in await gateway.get_user_badges(user_id)}
    totals = category_totals(await gateway.get_category_stats(user_id))
    notifications: list[Notification] = []

    for badge in badges:
        if badge.id in earned_ids:
            continue
        if not badge_earned(badge.code, profile, totals):
            continue

        if await gateway.award_badge(user_id, badge.id) is None:
            continue

        earned_ids.add(badge.id)
        notifications.append(await emit_badge_earned(gateway, user_id, badge))
        logger.info("Badge %s awarded to %s", badge.code, user_id)

    return notifications
