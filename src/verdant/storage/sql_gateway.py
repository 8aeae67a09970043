"""SQLAlchemy implementation of the storage gateway.

Writes are flushed, never committed: the caller owns the transaction so a
choice is persisted all-or-nothing. Any ``SQLAlchemyError`` is re-raised as
``StorageUnavailableError``.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from datetime import date, datetime, timedelta, timezone
from typing import Any, ParamSpec, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from verdant.database import dialect_insert
from verdant.db.models import (
    NOTIFICATION_TYPES,
    Achievement,
    Action,
    Badge,
    CategoryStat,
    Challenge,
    DailyStat,
    Friendship,
    Notification,
    Profile,
    UserAchievement,
    UserBadge,
    UserChallenge,
)
from verdant.errors import StorageUnavailableError
from verdant.game.engine import ActionDraft
from verdant.storage.gateway import StorageGateway

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def storage_op(name: str) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Translate driver/ORM failures into StorageUnavailableError."""

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.warning("Storage operation %s failed", name, exc_info=True)
                raise StorageUnavailableError(name, str(e)) from e

        return wrapper

    return decorator


def escape_like(term: str) -> str:
    """Make ``%`` and ``_`` in user input match literally in a LIKE pattern."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlAlchemyGateway(StorageGateway):
    """Storage gateway over an ``AsyncSession`` (PostgreSQL in production, SQLite in tests)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _insert(self, model: type) -> Any:
        """Dialect-specific INSERT supporting ON CONFLICT clauses."""
        return dialect_insert(self.db, model.__table__)  # type: ignore[attr-defined]

    async def _refetch(self, stmt: Any) -> Any:
        """Reload a row written via Core, bypassing stale identity-map state."""
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return result.unique().scalar_one_or_none()

    # --- Profiles ---

    @storage_op("get_profile")
    async def get_profile(self, user_id: str) -> Profile | None:
        result = await self.db.execute(select(Profile).where(Profile.id == user_id))
        return result.scalar_one_or_none()

    @storage_op("get_profile_by_username")
    async def get_profile_by_username(self, username: str) -> Profile | None:
        result = await self.db.execute(select(Profile).where(Profile.username == username))
        return result.scalar_one_or_none()

    @storage_op("create_profile")
    async def create_profile(self, user_id: str, username: str, email: str | None) -> Profile:
        now = datetime.now(timezone.utc)
        profile = Profile(
            id=user_id,
            username=username,
            email=email,
            health=50,
            level=1,
            xp=0,
            total_xp=0,
            streak_days=0,
            longest_streak=0,
            good_choices=0,
            bad_choices=0,
            plant_stage="seedling",
            last_action_date=None,
            created_at=now,
            updated_at=now,
        )
        self.db.add(profile)
        self.db.add(CategoryStat(user_id=user_id, updated_at=now))
        await self.db.flush()
        return profile

    @storage_op("update_profile")
    async def update_profile(self, user_id: str, fields: dict[str, Any]) -> Profile | None:
        profile = await self.db.get(Profile, user_id)
        if profile is None:
            return None
        for key, value in fields.items():
            setattr(profile, key, value)
        profile.updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        return profile

    # --- Actions ---

    @storage_op("append_action")
    async def append_action(self, user_id: str, draft: ActionDraft) -> Action:
        action = Action(
            user_id=user_id,
            choice_id=draft.choice_id,
            text=draft.text,
            icon=draft.icon,
            impact=draft.impact,
            xp_earned=draft.xp_earned,
            is_good=draft.is_good,
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(action)
        await self.db.flush()
        return action

    @storage_op("get_actions")
    async def get_actions(self, user_id: str, limit: int = 50) -> list[Action]:
        result = await self.db.execute(
            select(Action)
            .where(Action.user_id == user_id)
            .order_by(Action.created_at.desc(), Action.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    # --- Daily / category stats ---

    @storage_op("get_daily_stats")
    async def get_daily_stats(self, user_id: str, days: int, today: date) -> list[DailyStat]:
        start = today - timedelta(days=max(days - 1, 0))
        result = await self.db.execute(
            select(DailyStat)
            .where(
                DailyStat.user_id == user_id,
                DailyStat.stat_date >= start,
                DailyStat.stat_date <= today,
            )
            .order_by(DailyStat.stat_date.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @storage_op("upsert_daily_stat")
    async def upsert_daily_stat(self, user_id: str, stat_date: date, fields: dict[str, Any]) -> DailyStat:
        stmt = self._insert(DailyStat).values(user_id=user_id, date=stat_date, **fields)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "date"],
            set_=fields,
        )
        await self.db.execute(stmt)
        return await self._refetch(
            select(DailyStat).where(DailyStat.user_id == user_id, DailyStat.stat_date == stat_date)
        )

    @storage_op("get_category_stats")
    async def get_category_stats(self, user_id: str) -> CategoryStat | None:
        result = await self.db.execute(
            select(CategoryStat)
            .where(CategoryStat.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @storage_op("update_category_stats")
    async def update_category_stats(self, user_id: str, fields: dict[str, int]) -> CategoryStat:
        values = {**fields, "updated_at": datetime.now(timezone.utc)}
        stmt = self._insert(CategoryStat).values(user_id=user_id, **values)
        stmt = stmt.on_conflict_do_update(index_elements=["user_id"], set_=values)
        await self.db.execute(stmt)
        return await self._refetch(select(CategoryStat).where(CategoryStat.user_id == user_id))

    # --- Achievements / badges ---

    @storage_op("get_all_achievements")
    async def get_all_achievements(self) -> list[Achievement]:
        result = await self.db.execute(select(Achievement).order_by(Achievement.requirement.asc(), Achievement.id))
        return list(result.scalars().all())

    @storage_op("get_user_achievements")
    async def get_user_achievements(self, user_id: str) -> list[UserAchievement]:
        result = await self.db.execute(
            select(UserAchievement)
            .where(UserAchievement.user_id == user_id)
            .order_by(UserAchievement.earned_at.desc())
        )
        return list(result.unique().scalars().all())

    @storage_op("award_achievement")
    async def award_achievement(self, user_id: str, achievement_id: int) -> UserAchievement | None:
        stmt = self._insert(UserAchievement).values(
            user_id=user_id,
            achievement_id=achievement_id,
            earned_at=datetime.now(timezone.utc),
        )
        stmt = stmt.on_conflict_do_nothing(index_elements=["user_id", "achievement_id"])
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            return None  # Already earned
        return await self._refetch(
            select(UserAchievement).where(
                UserAchievement.user_id == user_id,
                UserAchievement.achievement_id == achievement_id,
            )
        )

    @storage_op("get_all_badges")
    async def get_all_badges(self) -> list[Badge]:
        result = await self.db.execute(select(Badge).order_by(Badge.id))
        return list(result.scalars().all())

    @storage_op("get_user_badges")
    async def get_user_badges(self, user_id: str) -> list[UserBadge]:
        result = await self.db.execute(
            select(UserBadge).where(UserBadge.user_id == user_id).order_by(UserBadge.earned_at.desc())
        )
        return list(result.unique().scalars().all())

    @storage_op("award_badge")
    async def award_badge(self, user_id: str, badge_id: int) -> UserBadge | None:
        stmt = self._insert(UserBadge).values(
            user_id=user_id,
            badge_id=badge_id,
            earned_at=datetime.now(timezone.utc),
        )
        stmt = stmt.on_conflict_do_nothing(index_elements=["user_id", "badge_id"])
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            return None  # Already earned
        return await self._refetch(
            select(UserBadge).where(UserBadge.user_id == user_id, UserBadge.badge_id == badge_id)
        )

    # --- Challenges ---

    @storage_op("get_active_challenges")
    async def get_active_challenges(self, today: date) -> list[Challenge]:
        result = await self.db.execute(
            select(Challenge)
            .where(Challenge.is_active.is_(True), Challenge.end_date >= today)
            .order_by(Challenge.end_date.asc(), Challenge.id)
        )
        return list(result.scalars().all())

    @storage_op("get_user_challenges")
    async def get_user_challenges(self, user_id: str) -> list[UserChallenge]:
        result = await self.db.execute(
            select(UserChallenge)
            .where(UserChallenge.user_id == user_id)
            .order_by(UserChallenge.created_at.desc(), UserChallenge.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.unique().scalars().all())

    @storage_op("update_challenge_progress")
    async def update_challenge_progress(
        self, user_id: str, challenge_id: int, progress: int, completed: bool
    ) -> UserChallenge:
        now = datetime.now(timezone.utc)
        values: dict[str, Any] = {"progress": progress, "completed": completed}
        if completed:
            values["completed_at"] = now

        stmt = self._insert(UserChallenge).values(
            user_id=user_id,
            challenge_id=challenge_id,
            created_at=now,
            **values,
        )
        stmt = stmt.on_conflict_do_update(index_elements=["user_id", "challenge_id"], set_=values)
        await self.db.execute(stmt)
        return await self._refetch(
            select(UserChallenge).where(
                UserChallenge.user_id == user_id,
                UserChallenge.challenge_id == challenge_id,
            )
        )

    # --- Notifications ---

    @storage_op("create_notification")
    async def create_notification(self, user_id: str, type_: str, title: str, message: str) -> Notification:
        if type_ not in NOTIFICATION_TYPES:
            raise ValueError(f"Unknown notification type: {type_!r}")
        notification = Notification(
            user_id=user_id,
            type=type_,
            title=title,
            message=message,
            read=False,
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(notification)
        await self.db.flush()
        return notification

    @storage_op("get_notifications")
    async def get_notifications(
        self, user_id: str, unread_only: bool = False, limit: int = 50
    ) -> list[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        result = await self.db.execute(
            stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
        )
        return list(result.scalars().all())

    @storage_op("mark_notification_read")
    async def mark_notification_read(self, user_id: str, notification_id: int) -> bool:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(read=True)
        )
        return result.rowcount > 0

    # --- Social ---

    @storage_op("get_leaderboard")
    async def get_leaderboard(self, limit: int = 50) -> list[Profile]:
        result = await self.db.execute(
            select(Profile)
            .order_by(Profile.health.desc(), Profile.level.desc(), Profile.username.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    @storage_op("search_profiles")
    async def search_profiles(self, term: str, limit: int = 10) -> list[Profile]:
        result = await self.db.execute(
            select(Profile)
            .where(Profile.username.ilike(f"%{escape_like(term)}%", escape="\\"))
            .order_by(Profile.username.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    @storage_op("get_friendship")
    async def get_friendship(self, friendship_id: int) -> Friendship | None:
        result = await self.db.execute(select(Friendship).where(Friendship.id == friendship_id))
        return result.unique().scalar_one_or_none()

    @storage_op("get_friendship_between")
    async def get_friendship_between(self, user_id: str, friend_id: str) -> Friendship | None:
        result = await self.db.execute(
            select(Friendship).where(Friendship.user_id == user_id, Friendship.friend_id == friend_id)
        )
        return result.unique().scalar_one_or_none()

    @storage_op("create_friendship")
    async def create_friendship(self, user_id: str, friend_id: str, status: str) -> Friendship:
        friendship = Friendship(
            user_id=user_id,
            friend_id=friend_id,
            status=status,
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(friendship)
        await self.db.flush()
        return await self._refetch(select(Friendship).where(Friendship.id == friendship.id))

    @storage_op("update_friendship_status")
    async def update_friendship_status(self, friendship_id: int, status: str) -> Friendship | None:
        friendship = await self.db.get(Friendship, friendship_id)
        if friendship is None:
            return None
        friendship.status = status
        await self.db.flush()
        return friendship

    @storage_op("get_friends")
    async def get_friends(self, user_id: str) -> list[Friendship]:
        result = await self.db.execute(
            select(Friendship)
            .where(Friendship.user_id == user_id, Friendship.status == "accepted")
            .order_by(Friendship.created_at.asc())
        )
        return list(result.unique().scalars().all())

    @storage_op("get_friend_requests")
    async def get_friend_requests(self, user_id: str) -> list[Friendship]:
        result = await self.db.execute(
            select(Friendship)
            .where(Friendship.friend_id == user_id, Friendship.status == "pending")
            .order_by(Friendship.created_at.desc())
        )
        return list(result.unique().scalars().all())
