"""Challenge progress tracking.

Only good choices advance challenges. Completion is one-way and pays the
challenge's XP reward exactly once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any

from verdant.db.models import Challenge, Notification
from verdant.game.engine import ProfileState
from verdant.game.notification_service import emit_challenge_completed
from verdant.game.xp_service import grant_xp
from verdant.storage.gateway import StorageGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChallengeStep:
    """Next persisted state of one user-challenge row."""

    challenge: Any
    progress: int
    completed: bool


def is_challenge_open(challenge: Any, today: date) -> bool:
    """Active flag set and end date not yet passed."""
    if challenge is None or not challenge.is_active:
        return False
    return challenge.end_date is None or challenge.end_date >= today


def advance_challenges(user_challenges: list[Any], is_good: bool, today: date) -> list[ChallengeStep]:
    """Progress +1 for every open, uncompleted challenge. Bad choices advance nothing."""
    if not is_good:
        return []

    steps = []
    for uc in user_challenges:
        if uc.completed:
            continue
        challenge = uc.challenge
        if not is_challenge_open(challenge, today):
            continue
        progress = uc.progress + 1
        steps.append(ChallengeStep(challenge=challenge, progress=progress, completed=progress >= challenge.goal))
    return steps


async def ensure_user_challenges(gateway: StorageGateway, user_id: str, active: list[Challenge]) -> int:
    """Create a progress=0 row for every active challenge the user lacks. Returns rows created."""
    if not active:
        return 0
    existing = {uc.challenge_id for uc in await gateway.get_user_challenges(user_id)}
    created = 0
    for challenge in active:
        if challenge.id in existing:
            continue
        await gateway.update_challenge_progress(user_id, challenge.id, 0, False)
        created += 1
    if created:
        logger.info("Initialized %d challenges for %s", created, user_id)
    return created


async def track_challenge_progress(
    gateway: StorageGateway,
    user_id: str,
    profile: ProfileState,
    is_good: bool,
    today: date,
) -> tuple[ProfileState, list[Notification]]:
    """Advance challenges after a choice and pay out completions.

    Returns the profile after any rewards and the notifications emitted.
    """
    if not is_good:
        return profile, []

    user_challenges = await gateway.get_user_challenges(user_id)
    notifications: list[Notification] = []

    for step in advance_challenges(user_challenges, is_good, today):
        await gateway.update_challenge_progress(user_id, step.challenge.id, step.progress, step.completed)
        if not step.completed:
            continue

        reward = await grant_xp(gateway, user_id, profile, step.challenge.xp_reward, f"challenge:{step.challenge.id}")
        profile = reward.profile
        notifications.append(await emit_challenge_completed(gateway, user_id, step.challenge))
        logger.info("Challenge %s completed by %s", step.challenge.id, user_id)

    return profile, notifications
