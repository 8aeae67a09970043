"""SQLAlchemy gateway tests against in-memory SQLite."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlalchemy import func, select, text

from tests.conftest import OTHER_USER_ID, USER_ID
from verdant.db.models import Achievement, Badge, Challenge, DailyStat, UserAchievement, UserBadge
from verdant.errors import StorageUnavailableError
from verdant.game.engine import ActionDraft

TODAY = date(2026, 4, 20)


def _draft(choice_id="recycle", is_good=True):
    return ActionDraft(
        choice_id=choice_id,
        text="Recycle paper and plastics",
        icon="ri-recycle-line",
        category="recycling",
        is_good=is_good,
        impact=5 if is_good else -5,
        xp_earned=10 if is_good else 0,
    )


class TestProfiles:
    @pytest.mark.asyncio
    async def test_missing_profile_is_none(self, gateway):
        assert await gateway.get_profile("nobody") is None

    @pytest.mark.asyncio
    async def test_create_profile_defaults(self, gateway, make_profile):
        await make_profile()
        profile = await gateway.get_profile(USER_ID)
        assert profile.health == 50
        assert profile.level == 1
        assert profile.total_xp == 0
        assert profile.plant_stage == "seedling"
        assert profile.last_action_date is None

    @pytest.mark.asyncio
    async def test_create_profile_adds_category_row(self, gateway, make_profile):
        await make_profile()
        stats = await gateway.get_category_stats(USER_ID)
        assert stats is not None
        assert stats.recycling == 0

    @pytest.mark.asyncio
    async def test_update_profile(self, gateway, make_profile):
        await make_profile()
        updated = await gateway.update_profile(USER_ID, {"health": 80, "last_action_date": TODAY})
        assert updated.health == 80
        assert updated.last_action_date == TODAY

    @pytest.mark.asyncio
    async def test_update_missing_profile_returns_none(self, gateway):
        assert await gateway.update_profile("nobody", {"health": 1}) is None

    @pytest.mark.asyncio
    async def test_lookup_by_username(self, gateway, make_profile):
        await make_profile(username="mossy")
        found = await gateway.get_profile_by_username("mossy")
        assert found.id == USER_ID


class TestActions:
    @pytest.mark.asyncio
    async def test_newest_first_with_limit(self, gateway, make_profile):
        await make_profile()
        for choice_id in ["recycle", "compost", "meatless"]:
            await gateway.append_action(USER_ID, _draft(choice_id))

        actions = await gateway.get_actions(USER_ID, limit=2)
        assert [a.choice_id for a in actions] == ["meatless", "compost"]


class TestStats:
    @pytest.mark.asyncio
    async def test_daily_upsert_keeps_one_row(self, gateway, make_profile, db_session):
        await make_profile()
        await gateway.upsert_daily_stat(USER_ID, TODAY, {"good_count": 1, "health_start": 55, "health_end": 55})
        row = await gateway.upsert_daily_stat(USER_ID, TODAY, {"good_count": 2, "health_start": 55, "health_end": 60})

        assert row.good_count == 2
        assert row.health_end == 60
        count = await db_session.scalar(select(func.count()).select_from(DailyStat))
        assert count == 1

    @pytest.mark.asyncio
    async def test_daily_window(self, gateway, make_profile):
        await make_profile()
        for offset in range(10):
            await gateway.upsert_daily_stat(USER_ID, TODAY - timedelta(days=offset), {"good_count": offset})

        rows = await gateway.get_daily_stats(USER_ID, 7, TODAY)
        assert len(rows) == 7
        assert rows[0].stat_date == TODAY - timedelta(days=6)
        assert rows[-1].stat_date == TODAY

    @pytest.mark.asyncio
    async def test_category_update(self, gateway, make_profile):
        await make_profile()
        stats = await gateway.update_category_stats(
            USER_ID,
            {
                "recycling": 3,
                "public_transport": 0,
                "energy_saving": 1,
                "water_conservation": 0,
                "sustainable_shopping": 0,
            },
        )
        assert stats.recycling == 3
        assert stats.energy_saving == 1


class TestAwards:
    @pytest.mark.asyncio
    async def test_award_achievement_is_idempotent(self, gateway, make_profile, db_session):
        await make_profile()
        achievement = Achievement(
            code="first_step", title="First Step", description="d", category="choices", requirement=1, xp_reward=10
        )
        db_session.add(achievement)
        await db_session.flush()

        first = await gateway.award_achievement(USER_ID, achievement.id)
        second = await gateway.award_achievement(USER_ID, achievement.id)

        assert first is not None
        assert first.achievement.code == "first_step"
        assert second is None
        count = await db_session.scalar(select(func.count()).select_from(UserAchievement))
        assert count == 1

    @pytest.mark.asyncio
    async def test_award_badge_is_idempotent(self, gateway, make_profile, db_session):
        await make_profile()
        badge = Badge(code="level_5", title="Sprouting", description="d")
        db_session.add(badge)
        await db_session.flush()

        assert await gateway.award_badge(USER_ID, badge.id) is not None
        assert await gateway.award_badge(USER_ID, badge.id) is None
        count = await db_session.scalar(select(func.count()).select_from(UserBadge))
        assert count == 1


class TestChallenges:
    @pytest.mark.asyncio
    async def test_active_filter(self, gateway, db_session):
        db_session.add_all([
            Challenge(code="open", title="Open", description="d", goal=3, end_date=TODAY + timedelta(days=3)),
            Challenge(code="expired", title="Old", description="d", goal=3, end_date=TODAY - timedelta(days=1)),
            Challenge(code="off", title="Off", description="d", goal=3, is_active=False, end_date=TODAY),
        ])
        await db_session.flush()

        active = await gateway.get_active_challenges(TODAY)
        assert [c.code for c in active] == ["open"]

    @pytest.mark.asyncio
    async def test_progress_upsert(self, gateway, make_profile, db_session):
        await make_profile()
        challenge = Challenge(code="c", title="C", description="d", goal=2, end_date=TODAY)
        db_session.add(challenge)
        await db_session.flush()

        row = await gateway.update_challenge_progress(USER_ID, challenge.id, 0, False)
        assert row.progress == 0
        assert row.completed_at is None

        row = await gateway.update_challenge_progress(USER_ID, challenge.id, 2, True)
        assert row.progress == 2
        assert row.completed is True
        assert row.completed_at is not None
        assert len(await gateway.get_user_challenges(USER_ID)) == 1


class TestNotifications:
    @pytest.mark.asyncio
    async def test_unread_filter_and_mark_read(self, gateway, make_profile):
        await make_profile()
        first = await gateway.create_notification(USER_ID, "level", "Level Up!", "Level 2")
        await gateway.create_notification(USER_ID, "badge", "Badge Earned!", "Sprouting")

        assert await gateway.mark_notification_read(USER_ID, first.id)
        unread = await gateway.get_notifications(USER_ID, unread_only=True)
        assert [n.type for n in unread] == ["badge"]
        assert len(await gateway.get_notifications(USER_ID)) == 2

    @pytest.mark.asyncio
    async def test_cannot_mark_other_users_notification(self, gateway, make_profile):
        await make_profile()
        await make_profile(OTHER_USER_ID, "fern")
        note = await gateway.create_notification(USER_ID, "level", "Level Up!", "Level 2")
        assert not await gateway.mark_notification_read(OTHER_USER_ID, note.id)

    @pytest.mark.asyncio
    async def test_unknown_type_rejected(self, gateway, make_profile):
        await make_profile()
        with pytest.raises(ValueError, match="Unknown notification type"):
            await gateway.create_notification(USER_ID, "promo", "Sale!", "Buy now")
        assert await gateway.get_notifications(USER_ID) == []


class TestSocial:
    @pytest.mark.asyncio
    async def test_leaderboard_order(self, gateway, make_profile):
        await make_profile("a", "alpha", health=60, level=3)
        await make_profile("b", "bravo", health=90, level=1)
        await make_profile("c", "charlie", health=60, level=8)

        ranked = await gateway.get_leaderboard(10)
        assert [p.username for p in ranked] == ["bravo", "charlie", "alpha"]

    @pytest.mark.asyncio
    async def test_search_case_insensitive(self, gateway, make_profile):
        await make_profile("a", "MossyRock")
        await make_profile("b", "fernleaf")

        results = await gateway.search_profiles("mossy", 10)
        assert [p.username for p in results] == ["MossyRock"]

    @pytest.mark.asyncio
    async def test_search_wildcards_match_literally(self, gateway, make_profile):
        await make_profile("a", "moss_rock")
        await make_profile("b", "fernleaf")
        await make_profile("c", "100%green")

        assert await gateway.search_profiles("__", 10) == []
        assert [p.username for p in await gateway.search_profiles("_", 10)] == ["moss_rock"]
        assert [p.username for p in await gateway.search_profiles("%", 10)] == ["100%green"]

    @pytest.mark.asyncio
    async def test_friend_queries(self, gateway, make_profile):
        await make_profile()
        await make_profile(OTHER_USER_ID, "fern")
        pending = await gateway.create_friendship(USER_ID, OTHER_USER_ID, "pending")

        requests = await gateway.get_friend_requests(OTHER_USER_ID)
        assert [f.id for f in requests] == [pending.id]
        assert requests[0].requester.username == "greenthumb"
        assert await gateway.get_friends(USER_ID) == []

        await gateway.update_friendship_status(pending.id, "accepted")
        friends = await gateway.get_friends(USER_ID)
        assert friends[0].friend.username == "fern"


class TestFailures:
    @pytest.mark.asyncio
    async def test_driver_error_becomes_storage_unavailable(self, gateway, make_profile, db_session):
        await make_profile()
        await db_session.execute(text("DROP TABLE actions"))

        with pytest.raises(StorageUnavailableError) as exc_info:
            await gateway.append_action(USER_ID, _draft())
        assert exc_info.value.operation == "append_action"
