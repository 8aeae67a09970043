"""Reward XP grants with level and stage recomputation."""

from __future__ import annotations

import logging

from verdant.game.engine import ProfileState, Transition, apply_xp_reward
from verdant.storage.gateway import StorageGateway

logger = logging.getLogger(__name__)


async def grant_xp(
    gateway: StorageGateway,
    user_id: str,
    profile: ProfileState,
    amount: int,
    source: str,
) -> Transition:
    """Grant reward XP and persist the XP, level and stage fields.

    Level-up and stage-change flags are returned for the caller; the
    orchestrator emits those notifications once per choice.
    """
    transition = apply_xp_reward(profile, amount)
    if transition.profile == profile:
        return transition

    new = transition.profile
    await gateway.update_profile(
        user_id,
        {
            "xp": new.xp,
            "total_xp": new.total_xp,
            "level": new.level,
            "plant_stage": new.plant_stage,
        },
    )
    logger.info(
        "User %s gained %d XP from %s. Total: %d, Level: %d",
        user_id, amount, source, new.total_xp, new.level,
    )
    return transition
