"""Friend requests and acceptance.

An accepted friendship is stored as two directed ``accepted`` edges so each
side finds the other with a single ``user_id`` lookup.
"""

from __future__ import annotations

import logging

from verdant.db.models import Friendship
from verdant.errors import FriendshipError, FriendshipNotFoundError, ProfileNotFoundError
from verdant.storage.gateway import StorageGateway

logger = logging.getLogger(__name__)

PENDING = "pending"
ACCEPTED = "accepted"


async def send_friend_request(gateway: StorageGateway, user_id: str, friend_id: str) -> Friendship:
    """Create a pending request from ``user_id`` to ``friend_id``.

    Repeating a request returns the existing edge. If the target already asked
    the caller, that request is accepted instead.
    """
    if friend_id == user_id:
        msg = "Cannot send a friend request to yourself"
        raise FriendshipError(msg)

    if await gateway.get_profile(user_id) is None:
        raise ProfileNotFoundError(user_id)
    if await gateway.get_profile(friend_id) is None:
        msg = f"User {friend_id} not found"
        raise FriendshipNotFoundError(msg)

    existing = await gateway.get_friendship_between(user_id, friend_id)
    if existing is not None:
        return existing

    reverse = await gateway.get_friendship_between(friend_id, user_id)
    if reverse is not None and reverse.status == PENDING:
        await accept_friend_request(gateway, user_id, reverse.id)
        accepted = await gateway.get_friendship_between(user_id, friend_id)
        if accepted is None:
            msg = f"Friendship {user_id} -> {friend_id} missing after accept"
            raise FriendshipError(msg)
        return accepted

    friendship = await gateway.create_friendship(user_id, friend_id, PENDING)
    logger.info("Friend request %s -> %s", user_id, friend_id)
    return friendship


async def accept_friend_request(gateway: StorageGateway, user_id: str, friendship_id: int) -> Friendship:
    """Accept a pending request addressed to ``user_id`` and add the reverse edge."""
    friendship = await gateway.get_friendship(friendship_id)
    if friendship is None or friendship.friend_id != user_id:
        msg = f"Friend request {friendship_id} not found"
        raise FriendshipNotFoundError(msg)

    if friendship.status == ACCEPTED:
        return friendship

    updated = await gateway.update_friendship_status(friendship_id, ACCEPTED)
    if updated is None:
        msg = f"Friend request {friendship_id} not found"
        raise FriendshipNotFoundError(msg)

    requester_id = friendship.user_id
    reverse = await gateway.get_friendship_between(user_id, requester_id)
    if reverse is None:
        await gateway.create_friendship(user_id, requester_id, ACCEPTED)
    elif reverse.status != ACCEPTED:
        await gateway.update_friendship_status(reverse.id, ACCEPTED)

    logger.info("Friendship %s <-> %s accepted", requester_id, user_id)
    return updated
