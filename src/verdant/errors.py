"""Domain exceptions raised by the engine, gateway and orchestrator."""

from __future__ import annotations


class VerdantError(Exception):
    """Base class for all domain errors."""


class UnknownChoiceError(VerdantError, LookupError):
    """Choice id is not in the catalog for the requested polarity."""

    def __init__(self, choice_id: str, is_good: bool) -> None:
        self.choice_id = choice_id
        self.is_good = is_good
        polarity = "good" if is_good else "bad"
        super().__init__(f"Unknown {polarity} choice: {choice_id!r}")


class ProfileNotFoundError(VerdantError, LookupError):
    """No profile row exists for the user."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"Profile not found for user {user_id}")


class StorageUnavailableError(VerdantError):
    """A storage gateway call failed. The current choice must be aborted."""

    def __init__(self, operation: str, reason: str = "") -> None:
        self.operation = operation
        self.reason = reason
        msg = f"Storage operation '{operation}' failed"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class FriendshipError(VerdantError, ValueError):
    """Invalid friend request (self-request, duplicate, or not addressed to the user)."""


class UsernameTakenError(VerdantError, ValueError):
    """Another profile already uses the requested username."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"Username {username!r} is already taken")


class FriendshipNotFoundError(FriendshipError, LookupError):
    """Target user or friend request does not exist for the caller."""
