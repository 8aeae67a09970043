"""Pydantic models for social endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from verdant.game.schemas import NotificationResponse


class PublicProfileResponse(BaseModel):
    id: str
    username: str
    avatar_url: str | None = None
    health: int
    level: int
    plant_stage: str
    streak_days: int

    model_config = {"from_attributes": True}


class LeaderboardEntry(BaseModel):
    rank: int
    profile: PublicProfileResponse


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntry]


class UserSearchResponse(BaseModel):
    results: list[PublicProfileResponse]


class FriendRequestCreate(BaseModel):
    friend_id: str = Field(..., min_length=1, max_length=36)


class FriendshipResponse(BaseModel):
    id: int
    status: str
    created_at: datetime
    user: PublicProfileResponse


class FriendsResponse(BaseModel):
    friends: list[FriendshipResponse]


class FriendRequestsResponse(BaseModel):
    requests: list[FriendshipResponse]


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int
