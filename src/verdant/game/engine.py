"""Progression engine — pure state transitions for a single logged choice.

No I/O happens here. The orchestrator loads a ``ProfileState``, calls
``apply_choice`` / ``apply_xp_reward`` and persists the result.

Rules:
1. Good choice: +5 health, +10 XP. Bad choice: -5 health, no XP.
2. Health is clamped to [0, 100].
3. Level is derived from lifetime XP, stage from level (see level_thresholds).
4. Streak counts consecutive calendar days with at least one choice.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import date, timedelta
from typing import Any

from verdant.errors import UnknownChoiceError
from verdant.game.catalog import ChoiceDefinition, find_choice
from verdant.game.level_thresholds import compute_level, stage_for

HEALTH_MIN = 0
HEALTH_MAX = 100
HEALTH_IMPACT = 5
GOOD_CHOICE_XP = 10
BAD_CHOICE_XP = 0

# Profile columns owned by the engine; everything else on the row is identity data
PROGRESS_FIELDS = (
    "health",
    "level",
    "xp",
    "total_xp",
    "streak_days",
    "longest_streak",
    "good_choices",
    "bad_choices",
    "plant_stage",
    "last_action_date",
)


@dataclass(frozen=True)
class ProfileState:
    """Snapshot of the progression fields of a profile."""

    health: int = 50
    level: int = 1
    xp: int = 0
    total_xp: int = 0
    streak_days: int = 0
    longest_streak: int = 0
    good_choices: int = 0
    bad_choices: int = 0
    plant_stage: str = "seedling"
    last_action_date: date | None = None

    @classmethod
    def from_row(cls, row: Any) -> ProfileState:
        """Build a snapshot from any object exposing the profile columns."""
        return cls(**{name: getattr(row, name) for name in PROGRESS_FIELDS})

    def to_fields(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ActionDraft:
    """Action log entry produced by a choice, persisted by the caller."""

    choice_id: str
    text: str
    icon: str
    category: str
    is_good: bool
    impact: int
    xp_earned: int


@dataclass(frozen=True)
class Transition:
    profile: ProfileState
    leveled_up: bool
    stage_changed: bool
    action: ActionDraft | None = None


def clamp_health(value: int) -> int:
    return max(HEALTH_MIN, min(HEALTH_MAX, value))


def xp_reward_for(is_good: bool) -> int:
    return GOOD_CHOICE_XP if is_good else BAD_CHOICE_XP


def next_streak(streak_days: int, last_action_date: date | None, today: date) -> int:
    """Streak after an action on ``today``.

    - first action ever: 1
    - already acted today: unchanged
    - acted yesterday: +1
    - gap of two or more days: reset to 1
    """
    if last_action_date is None:
        return 1
    if last_action_date == today:
        return streak_days
    if last_action_date == today - timedelta(days=1):
        return streak_days + 1
    return 1


def resolve_choice(choice_id: str, is_good: bool) -> ChoiceDefinition:
    """Return the catalog entry or raise UnknownChoiceError."""
    choice = find_choice(choice_id, is_good)
    if choice is None:
        raise UnknownChoiceError(choice_id, is_good)
    return choice


def apply_choice(profile: ProfileState, choice_id: str, is_good: bool, today: date) -> Transition:
    """Compute the profile after logging one choice on ``today``."""
    choice = resolve_choice(choice_id, is_good)

    impact = HEALTH_IMPACT if is_good else -HEALTH_IMPACT
    reward = xp_reward_for(is_good)

    total_xp = profile.total_xp + reward
    level = max(compute_level(total_xp), profile.level)
    stage = stage_for(level)
    streak = next_streak(profile.streak_days, profile.last_action_date, today)

    new_profile = replace(
        profile,
        health=clamp_health(profile.health + impact),
        xp=profile.xp + reward,
        total_xp=total_xp,
        level=level,
        plant_stage=stage,
        streak_days=streak,
        longest_streak=max(profile.longest_streak, streak),
        good_choices=profile.good_choices + (1 if is_good else 0),
        bad_choices=profile.bad_choices + (0 if is_good else 1),
        last_action_date=today,
    )

    action = ActionDraft(
        choice_id=choice.id,
        text=choice.text,
        icon=choice.icon,
        category=choice.category,
        is_good=is_good,
        impact=impact,
        xp_earned=reward,
    )

    return Transition(
        profile=new_profile,
        leveled_up=new_profile.level > profile.level,
        stage_changed=new_profile.plant_stage != profile.plant_stage,
        action=action,
    )


def apply_xp_reward(profile: ProfileState, amount: int) -> Transition:
    """Grant bonus XP (challenge or achievement reward) and recompute level and stage."""
    if amount <= 0:
        return Transition(profile=profile, leveled_up=False, stage_changed=False)

    total_xp = profile.total_xp + amount
    level = max(compute_level(total_xp), profile.level)
    new_profile = replace(
        profile,
        xp=profile.xp + amount,
        total_xp=total_xp,
        level=level,
        plant_stage=stage_for(level),
    )
    return Transition(
        profile=new_profile,
        leveled_up=new_profile.level > profile.level,
        stage_changed=new_profile.plant_stage != profile.plant_stage,
    )
