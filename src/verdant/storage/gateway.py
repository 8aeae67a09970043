"""Storage gateway contract consumed by the progression core.

Every method is a coroutine. ``None`` (or an empty list) means "no row";
a failed store call raises ``StorageUnavailableError`` instead, so callers
can tell a first-time user apart from an outage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from verdant.db.models import (
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
from verdant.game.engine import ActionDraft


class StorageGateway(ABC):
    """Abstract record-level access to the backing store."""

    # --- Profiles ---

    @abstractmethod
    async def get_profile(self, user_id: str) -> Profile | None: ...

    @abstractmethod
    async def create_profile(self, user_id: str, username: str, email: str | None) -> Profile:
        """Insert a fresh profile plus its zeroed category stats row."""

    @abstractmethod
    async def update_profile(self, user_id: str, fields: dict[str, Any]) -> Profile | None: ...

    @abstractmethod
    async def get_profile_by_username(self, username: str) -> Profile | None: ...

    # --- Actions ---

    @abstractmethod
    async def append_action(self, user_id: str, draft: ActionDraft) -> Action: ...

    @abstractmethod
    async def get_actions(self, user_id: str, limit: int = 50) -> list[Action]: ...

    # --- Daily / category stats ---

    @abstractmethod
    async def get_daily_stats(self, user_id: str, days: int, today: date) -> list[DailyStat]:
        """Rows for the ``days`` days ending at ``today`` (inclusive), oldest first."""

    @abstractmethod
    async def upsert_daily_stat(self, user_id: str, stat_date: date, fields: dict[str, Any]) -> DailyStat: ...

    @abstractmethod
    async def get_category_stats(self, user_id: str) -> CategoryStat | None: ...

    @abstractmethod
    async def update_category_stats(self, user_id: str, fields: dict[str, int]) -> CategoryStat: ...

    # --- Achievements / badges ---

    @abstractmethod
    async def get_all_achievements(self) -> list[Achievement]: ...

    @abstractmethod
    async def get_user_achievements(self, user_id: str) -> list[UserAchievement]: ...

    @abstractmethod
    async def award_achievement(self, user_id: str, achievement_id: int) -> UserAchievement | None:
        """Insert the join row. Returns None if it already existed."""

    @abstractmethod
    async def get_all_badges(self) -> list[Badge]: ...

    @abstractmethod
    async def get_user_badges(self, user_id: str) -> list[UserBadge]: ...

    @abstractmethod
    async def award_badge(self, user_id: str, badge_id: int) -> UserBadge | None:
        """Insert the join row. Returns None if it already existed."""

    # --- Challenges ---

    @abstractmethod
    async def get_active_challenges(self, today: date) -> list[Challenge]: ...

    @abstractmethod
    async def get_user_challenges(self, user_id: str) -> list[UserChallenge]: ...

    @abstractmethod
    async def update_challenge_progress(
        self, user_id: str, challenge_id: int, progress: int, completed: bool
    ) -> UserChallenge:
        """Upsert the (user, challenge) row."""

    # --- Notifications ---

    @abstractmethod
    async def create_notification(self, user_id: str, type_: str, title: str, message: str) -> Notification: ...

    @abstractmethod
    async def get_notifications(
        self, user_id: str, unread_only: bool = False, limit: int = 50
    ) -> list[Notification]: ...

    @abstractmethod
    async def mark_notification_read(self, user_id: str, notification_id: int) -> bool: ...

    # --- Social ---

    @abstractmethod
    async def get_leaderboard(self, limit: int = 50) -> list[Profile]: ...

    @abstractmethod
    async def search_profiles(self, term: str, limit: int = 10) -> list[Profile]: ...

    @abstractmethod
    async def get_friendship(self, friendship_id: int) -> Friendship | None: ...

    @abstractmethod
    async def get_friendship_between(self, user_id: str, friend_id: str) -> Friendship | None: ...

    @abstractmethod
    async def create_friendship(self, user_id: str, friend_id: str, status: str) -> Friendship: ...

    @abstractmethod
    async def update_friendship_status(self, friendship_id: int, status: str) -> Friendship | None: ...

    @abstractmethod
    async def get_friends(self, user_id: str) -> list[Friendship]:
        """Accepted friendships where ``user_id`` is the owner of the edge."""

    @abstractmethod
    async def get_friend_requests(self, user_id: str) -> list[Friendship]:
        """Pending friendships addressed to ``user_id``."""
