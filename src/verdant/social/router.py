"""Social API endpoints — leaderboard, user search, friends and notifications."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from verdant.auth.dependencies import CurrentUser, get_current_user
from verdant.config import get_settings
from verdant.database import get_session
from verdant.db.models import Friendship, Profile
from verdant.errors import VerdantError
from verdant.game.schemas import NotificationResponse
from verdant.social.schemas import (
    FriendRequestCreate,
    FriendRequestsResponse,
    FriendsResponse,
    FriendshipResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    NotificationListResponse,
    PublicProfileResponse,
    UserSearchResponse,
)
from verdant.social.service import accept_friend_request, send_friend_request
from verdant.storage.dependencies import get_gateway
from verdant.storage.sql_gateway import SqlAlchemyGateway

router = APIRouter(prefix="/api/v1", tags=["Social"])


def _friendship_response(friendship: Friendship, other: Profile) -> FriendshipResponse:
    return FriendshipResponse(
        id=friendship.id,
        status=friendship.status,
        created_at=friendship.created_at,
        user=PublicProfileResponse.model_validate(other),
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    limit: int | None = Query(None, ge=1),
    _user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Profiles ranked by plant health, then level."""
    max_limit = get_settings().leaderboard_limit
    profiles = await gateway.get_leaderboard(min(limit or max_limit, max_limit))
    return LeaderboardResponse(
        entries=[
            LeaderboardEntry(rank=i, profile=PublicProfileResponse.model_validate(p))
            for i, p in enumerate(profiles, start=1)
        ]
    )


@router.get("/users/search", response_model=UserSearchResponse)
async def search_users(
    q: str = Query(..., min_length=2, max_length=32),
    user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Case-insensitive username substring search, excluding the caller."""
    profiles = await gateway.search_profiles(q, get_settings().search_limit)
    return UserSearchResponse(
        results=[PublicProfileResponse.model_validate(p) for p in profiles if p.id != user.id]
    )


# ── Friends ──


@router.get("/friends", response_model=FriendsResponse)
async def list_friends(
    user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Accepted friends."""
    friendships = await gateway.get_friends(user.id)
    return FriendsResponse(friends=[_friendship_response(f, f.friend) for f in friendships])


@router.get("/friends/requests", response_model=FriendRequestsResponse)
async def list_friend_requests(
    user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Pending requests addressed to the caller."""
    requests = await gateway.get_friend_requests(user.id)
    return FriendRequestsResponse(requests=[_friendship_response(f, f.requester) for f in requests])


@router.post("/friends/requests", response_model=FriendshipResponse, status_code=201)
async def create_friend_request(
    body: FriendRequestCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Send a friend request."""
    try:
        friendship = await send_friend_request(gateway, user.id, body.friend_id)
    except VerdantError:
        await db.rollback()
        raise
    await db.commit()
    return _friendship_response(friendship, friendship.friend)


@router.post("/friends/requests/{friendship_id}/accept", response_model=FriendshipResponse)
async def accept_request(
    friendship_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Accept a pending request addressed to the caller."""
    try:
        friendship = await accept_friend_request(gateway, user.id, friendship_id)
    except VerdantError:
        await db.rollback()
        raise
    await db.commit()
    return _friendship_response(friendship, friendship.requester)


# ── Notifications ──


@router.get("/notifications", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = Query(False),
    user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Newest notifications first."""
    notifications = await gateway.get_notifications(user.id, unread_only=unread_only)
    unread = notifications if unread_only else await gateway.get_notifications(user.id, unread_only=True)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=len(unread),
    )


@router.post("/notifications/{notification_id}/read")
async def mark_read(
    notification_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
) -> dict[str, bool]:
    """Mark one of the caller's notifications as read."""
    if not await gateway.mark_notification_read(user.id, notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    await db.commit()
    return {"read": True}
