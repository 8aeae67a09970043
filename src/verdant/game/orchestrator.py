"""Session orchestrator — runs one logged choice end to end.

Sequence:
1. Validate the choice and load the profile
2. Lazily create user-challenge rows for active challenges
3. Apply the pure engine transition
4. Persist the action record and the new profile
5. Daily stat, category stat
6. Challenge progress (good choices only)
7. Achievements, then badges
8. Level-up / plant-evolution notifications for the choice as a whole

Each step awaits the previous one. A ``StorageUnavailableError`` anywhere
aborts the remaining steps and propagates; the caller owns the transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from typing import Any

import structlog

from verdant.db.models import Action, Notification, Profile
from verdant.errors import ProfileNotFoundError, UsernameTakenError
from verdant.game.achievement_service import check_achievements, check_badges
from verdant.game.challenge_service import ensure_user_challenges, track_challenge_progress
from verdant.game.engine import ProfileState, apply_choice, resolve_choice
from verdant.game.level_thresholds import level_progress
from verdant.game.notification_service import emit_level_up, emit_stage_change
from verdant.game.stats_service import category_totals, update_category_stat, update_daily_stat
from verdant.storage.gateway import StorageGateway

logger = structlog.get_logger()


@dataclass(frozen=True)
class ProfileSnapshot:
    """Point-in-time copy of a profile row, detached from the session.

    The session's identity map hands back the same ``Profile`` object on every
    read, so a later choice would otherwise rewrite an earlier outcome.
    """

    id: str
    username: str
    email: str | None
    avatar_url: str | None
    health: int
    level: int
    xp: int
    total_xp: int
    streak_days: int
    longest_streak: int
    good_choices: int
    bad_choices: int
    plant_stage: str
    last_action_date: date | None
    created_at: datetime

    @classmethod
    def from_row(cls, row: Profile) -> ProfileSnapshot:
        return cls(**{f.name: getattr(row, f.name) for f in fields(cls)})


@dataclass
class ChoiceOutcome:
    """Everything the presentation layer needs to refresh after a choice."""

    profile: ProfileSnapshot
    action: Action
    leveled_up: bool
    stage_changed: bool
    notifications: list[Notification] = field(default_factory=list)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


async def register_profile(
    gateway: StorageGateway,
    user_id: str,
    username: str,
    email: str | None = None,
) -> tuple[Profile, bool]:
    """Create the profile at signup. Returns (profile, created); idempotent per user.

    Raises UsernameTakenError if another user already holds ``username``.
    """
    existing = await gateway.get_profile(user_id)
    if existing is not None:
        return existing, False

    if await gateway.get_profile_by_username(username) is not None:
        raise UsernameTakenError(username)

    profile = await gateway.create_profile(user_id, username, email)
    logger.info("profile_created", user_id=user_id, username=username)
    return profile, True


async def make_choice(
    gateway: StorageGateway,
    user_id: str,
    choice_id: str,
    is_good: bool,
    today: date | None = None,
) -> ChoiceOutcome:
    """Apply one good or bad choice for ``user_id``.

    Raises UnknownChoiceError before any write, ProfileNotFoundError if the
    user never registered, StorageUnavailableError on any store failure.
    """
    if today is None:
        today = utc_today()

    choice = resolve_choice(choice_id, is_good)

    row = await gateway.get_profile(user_id)
    if row is None:
        raise ProfileNotFoundError(user_id)

    active = await gateway.get_active_challenges(today)
    await ensure_user_challenges(gateway, user_id, active)

    start = ProfileState.from_row(row)
    transition = apply_choice(start, choice_id, is_good, today)
    state = transition.profile

    action = await gateway.append_action(user_id, transition.action)
    await gateway.update_profile(user_id, state.to_fields())

    await update_daily_stat(gateway, user_id, today, is_good, transition.action.xp_earned, state.health)
    await update_category_stat(gateway, user_id, choice.category)

    notifications: list[Notification] = []

    state, challenge_notes = await track_challenge_progress(gateway, user_id, state, is_good, today)
    notifications += challenge_notes

    state, achievement_notes = await check_achievements(gateway, user_id, state)
    notifications += achievement_notes

    notifications += await check_badges(gateway, user_id, state)

    leveled_up = state.level > start.level
    stage_changed = state.plant_stage != start.plant_stage
    if leveled_up:
        notifications.append(await emit_level_up(gateway, user_id, state.level))
    if stage_changed:
        notifications.append(await emit_stage_change(gateway, user_id, state.plant_stage))

    profile = await gateway.get_profile(user_id)
    if profile is None:
        raise ProfileNotFoundError(user_id)

    logger.info(
        "choice_applied",
        user_id=user_id,
        choice_id=choice_id,
        is_good=is_good,
        health=state.health,
        profile_level=state.level,
        total_xp=state.total_xp,
        streak_days=state.streak_days,
        leveled_up=leveled_up,
        stage_changed=stage_changed,
        notifications=len(notifications),
    )

    return ChoiceOutcome(
        profile=ProfileSnapshot.from_row(profile),
        action=action,
        leveled_up=leveled_up,
        stage_changed=stage_changed,
        notifications=notifications,
    )


async def load_dashboard(
    gateway: StorageGateway,
    user_id: str,
    action_limit: int = 10,
    days: int = 7,
    today: date | None = None,
) -> dict[str, Any]:
    """Profile plus the derived data the main game screen renders."""
    if today is None:
        today = utc_today()

    profile = await gateway.get_profile(user_id)
    if profile is None:
        raise ProfileNotFoundError(user_id)

    return {
        "profile": profile,
        "progress": level_progress(profile.total_xp),
        "recent_actions": await gateway.get_actions(user_id, action_limit),
        "daily_stats": await gateway.get_daily_stats(user_id, days, today),
        "category_stats": category_totals(await gateway.get_category_stats(user_id)),
        "unread_notifications": len(await gateway.get_notifications(user_id, unread_only=True)),
    }
