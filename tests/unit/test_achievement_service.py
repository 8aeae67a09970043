"""Achievement and badge evaluator tests."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from verdant.game.achievement_service import (
    BADGE_RULES,
    achievement_earned,
    badge_earned,
    check_achievements,
    check_badges,
)
from verdant.game.engine import ProfileState


def _achievement(id=1, code="eco_starter", category="choices", requirement=10, xp_reward=50):
    return SimpleNamespace(
        id=id,
        code=code,
        title=code.replace("_", " ").title(),
        category=category,
        requirement=requirement,
        xp_reward=xp_reward,
    )


def _totals(**counts):
    base = {
        "recycling": 0,
        "public_transport": 0,
        "energy_saving": 0,
        "water_conservation": 0,
        "sustainable_shopping": 0,
    }
    base.update(counts)
    return base


class TestAchievementPredicates:
    def test_choices_threshold(self):
        a = _achievement(category="choices", requirement=10)
        assert not achievement_earned(a, ProfileState(good_choices=9))
        assert achievement_earned(a, ProfileState(good_choices=10))

    def test_bad_choices_do_not_count(self):
        a = _achievement(category="choices", requirement=1)
        assert not achievement_earned(a, ProfileState(bad_choices=20))

    def test_streak_threshold(self):
        a = _achievement(code="streak_7", category="streaks", requirement=7)
        assert not achievement_earned(a, ProfileState(streak_days=6, longest_streak=30))
        assert achievement_earned(a, ProfileState(streak_days=7))

    def test_perfect_health_requires_exactly_100(self):
        a = _achievement(code="perfect_health", category="health", requirement=100)
        assert not achievement_earned(a, ProfileState(health=95))
        assert achievement_earned(a, ProfileState(health=100))

    def test_other_health_codes_never_match(self):
        a = _achievement(code="mystery_health", category="health", requirement=0)
        assert not achievement_earned(a, ProfileState(health=100))

    def test_unknown_category_never_matches(self):
        a = _achievement(category="karma", requirement=0)
        assert not achievement_earned(a, ProfileState(good_choices=1000))


class TestBadgePredicates:
    @pytest.mark.parametrize(
        "code,category",
        [
            ("recycler", "recycling"),
            ("commuter", "public_transport"),
            ("energy_saver", "energy_saving"),
            ("water_warrior", "water_conservation"),
            ("sustainable_shopper", "sustainable_shopping"),
        ],
    )
    def test_category_badges_at_50(self, code, category):
        assert not badge_earned(code, ProfileState(), _totals(**{category: 49}))
        assert badge_earned(code, ProfileState(), _totals(**{category: 50}))

    @pytest.mark.parametrize("level", [5, 10, 25, 50])
    def test_level_badges(self, level):
        code = f"level_{level}"
        assert not badge_earned(code, ProfileState(level=level - 1), _totals())
        assert badge_earned(code, ProfileState(level=level), _totals())

    def test_unknown_code_never_matches(self):
        assert not badge_earned("secret_badge", ProfileState(level=99), _totals(recycling=999))

    def test_rule_table_has_nine_badges(self):
        assert len(BADGE_RULES) == 9


class TestCheckAchievements:
    @pytest.mark.asyncio
    async def test_awards_and_grants_xp(self):
        gateway = AsyncMock()
        gateway.get_all_achievements.return_value = [_achievement(id=1, requirement=1, xp_reward=10)]
        gateway.get_user_achievements.return_value = []
        gateway.award_achievement.return_value = SimpleNamespace(id=99)

        profile, notes = await check_achievements(gateway, "u1", ProfileState(good_choices=1, xp=10, total_xp=10))

        assert profile.total_xp == 20
        assert len(notes) == 1
        gateway.award_achievement.assert_awaited_once_with("u1", 1)

    @pytest.mark.asyncio
    async def test_already_earned_skipped(self):
        gateway = AsyncMock()
        gateway.get_all_achievements.return_value = [_achievement(id=1, requirement=1)]
        gateway.get_user_achievements.return_value = [SimpleNamespace(achievement_id=1)]
        start = ProfileState(good_choices=5)

        profile, notes = await check_achievements(gateway, "u1", start)

        assert profile == start
        assert notes == []
        gateway.award_achievement.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_conflicting_insert_pays_nothing(self):
        """award_achievement returning None means someone else got there first."""
        gateway = AsyncMock()
        gateway.get_all_achievements.return_value = [_achievement(id=1, requirement=1, xp_reward=10)]
        gateway.get_user_achievements.return_value = []
        gateway.award_achievement.return_value = None
        start = ProfileState(good_choices=1)

        profile, notes = await check_achievements(gateway, "u1", start)

        assert profile == start
        assert notes == []
        gateway.update_profile.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rewards_applied_in_order(self):
        gateway = AsyncMock()
        gateway.get_all_achievements.return_value = [
            _achievement(id=1, code="first_step", requirement=1, xp_reward=10),
            _achievement(id=2, code="eco_starter", requirement=10, xp_reward=50),
        ]
        gateway.get_user_achievements.return_value = []
        gateway.award_achievement.return_value = SimpleNamespace(id=1)

        profile, notes = await check_achievements(gateway, "u1", ProfileState(good_choices=10, xp=100, total_xp=100))

        assert profile.total_xp == 160
        assert profile.level == 2
        assert len(notes) == 2


class TestCheckBadges:
    @pytest.mark.asyncio
    async def test_awards_without_xp(self):
        gateway = AsyncMock()
        gateway.get_all_badges.return_value = [
            SimpleNamespace(id=1, code="level_5", title="Sprouting"),
            SimpleNamespace(id=2, code="level_10", title="Growing Strong"),
        ]
        gateway.get_user_badges.return_value = []
        gateway.get_category_stats.return_value = None
        gateway.award_badge.return_value = SimpleNamespace(id=7)

        notes = await check_badges(gateway, "u1", ProfileState(level=6))

        assert len(notes) == 1
        gateway.award_badge.assert_awaited_once_with("u1", 1)
        gateway.update_profile.assert_not_awaited()
