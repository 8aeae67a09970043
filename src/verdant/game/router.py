"""Game API endpoints — catalog, profile, choices, stats and progression."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from verdant.auth.dependencies import CurrentUser, get_current_user
from verdant.config import get_settings
from verdant.database import get_session
from verdant.db.models import DailyStat, Profile
from verdant.errors import ProfileNotFoundError, VerdantError
from verdant.game.catalog import BAD_CHOICES, GOOD_CHOICES, ChoiceDefinition
from verdant.game.level_thresholds import PLANT_STAGES
from verdant.game.orchestrator import load_dashboard, make_choice, register_profile, utc_today
from verdant.game.schemas import (
    AchievementResponse,
    AchievementsResponse,
    ActionFeedResponse,
    ActionResponse,
    BadgeResponse,
    BadgesResponse,
    CategoryStatsResponse,
    ChallengeResponse,
    ChallengesResponse,
    ChoiceCatalogResponse,
    ChoiceEntry,
    ChoiceOutcomeResponse,
    ChoiceRequest,
    DailyStatResponse,
    DailyStatsResponse,
    DashboardResponse,
    LevelProgressResponse,
    NotificationResponse,
    ProfileResponse,
    RegisterProfileRequest,
    StageCatalogResponse,
    StageEntry,
)
from verdant.game.stats_service import category_totals
from verdant.storage.dependencies import get_gateway
from verdant.storage.sql_gateway import SqlAlchemyGateway

router = APIRouter(prefix="/api/v1", tags=["Game"])


def _choice_entry(choice: ChoiceDefinition) -> ChoiceEntry:
    return ChoiceEntry(
        id=choice.id,
        text=choice.text,
        icon=choice.icon,
        category=choice.category,
        is_good=choice.is_good,
    )


def _daily_stat(row: DailyStat) -> DailyStatResponse:
    return DailyStatResponse(
        day=row.stat_date,
        good_count=row.good_count,
        bad_count=row.bad_count,
        xp_earned=row.xp_earned,
        health_start=row.health_start,
        health_end=row.health_end,
    )


async def _require_profile(gateway: SqlAlchemyGateway, user_id: str) -> Profile:
    profile = await gateway.get_profile(user_id)
    if profile is None:
        raise ProfileNotFoundError(user_id)
    return profile


# ── Public endpoints ──


@router.get("/catalog/choices", response_model=ChoiceCatalogResponse)
async def list_choices():
    """All good and bad choices a user can log."""
    return ChoiceCatalogResponse(
        good=[_choice_entry(c) for c in GOOD_CHOICES],
        bad=[_choice_entry(c) for c in BAD_CHOICES],
    )


@router.get("/catalog/stages", response_model=StageCatalogResponse)
async def list_stages():
    """Plant stage thresholds."""
    return StageCatalogResponse(stages=[StageEntry(**s) for s in PLANT_STAGES])


# ── Profile ──


@router.post("/profile", response_model=ProfileResponse, status_code=201)
async def create_profile(
    body: RegisterProfileRequest,
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Register the caller's profile. Repeat calls return the existing profile."""
    try:
        profile, created = await register_profile(gateway, user.id, body.username, user.email)
    except VerdantError:
        await db.rollback()
        raise
    await db.commit()
    if not created:
        response.status_code = 200
    return ProfileResponse.model_validate(profile)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Current user's profile."""
    return ProfileResponse.model_validate(await _require_profile(gateway, user.id))


@router.get("/profile/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Profile, level progress, recent actions and weekly stats in one call."""
    data = await load_dashboard(gateway, user.id)
    return DashboardResponse(
        profile=ProfileResponse.model_validate(data["profile"]),
        progress=LevelProgressResponse(**data["progress"]),
        recent_actions=[ActionResponse.model_validate(a) for a in data["recent_actions"]],
        daily_stats=[_daily_stat(s) for s in data["daily_stats"]],
        category_stats=CategoryStatsResponse(**data["category_stats"]),
        unread_notifications=data["unread_notifications"],
    )


# ── Choices ──


@router.post("/choices", response_model=ChoiceOutcomeResponse)
async def log_choice(
    body: ChoiceRequest,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Log one good or bad choice. All resulting writes commit together or not at all."""
    try:
        outcome = await make_choice(gateway, user.id, body.choice_id, body.is_good)
    except VerdantError:
        await db.rollback()
        raise
    await db.commit()

    return ChoiceOutcomeResponse(
        profile=ProfileResponse.model_validate(outcome.profile),
        action=ActionResponse.model_validate(outcome.action),
        leveled_up=outcome.leveled_up,
        stage_changed=outcome.stage_changed,
        notifications=[NotificationResponse.model_validate(n) for n in outcome.notifications],
    )


# ── History / stats ──


@router.get("/actions", response_model=ActionFeedResponse)
async def list_actions(
    limit: int = Query(20, ge=1),
    user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Most recent actions first."""
    limit = min(limit, get_settings().action_feed_limit)
    actions = await gateway.get_actions(user.id, limit)
    return ActionFeedResponse(actions=[ActionResponse.model_validate(a) for a in actions])


@router.get("/stats/daily", response_model=DailyStatsResponse)
async def get_daily_stats(
    days: int = Query(7, ge=1, le=365),
    user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Per-day totals for the last ``days`` days, oldest first."""
    rows = await gateway.get_daily_stats(user.id, days, utc_today())
    return DailyStatsResponse(days=days, stats=[_daily_stat(r) for r in rows])


@router.get("/stats/categories", response_model=CategoryStatsResponse)
async def get_category_stats(
    user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Lifetime choice counts per category."""
    return CategoryStatsResponse(**category_totals(await gateway.get_category_stats(user.id)))


# ── Progression catalogs ──


@router.get("/achievements", response_model=AchievementsResponse)
async def list_achievements(
    user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Every achievement, flagged with the caller's earned state."""
    achievements = await gateway.get_all_achievements()
    earned = {ua.achievement_id: ua.earned_at for ua in await gateway.get_user_achievements(user.id)}

    return AchievementsResponse(
        achievements=[
            AchievementResponse(
                code=a.code,
                title=a.title,
                description=a.description,
                icon=a.icon,
                category=a.category,
                requirement=a.requirement,
                xp_reward=a.xp_reward,
                earned=a.id in earned,
                earned_at=earned.get(a.id),
            )
            for a in achievements
        ],
        total_available=len(achievements),
        total_earned=len(earned),
    )


@router.get("/badges", response_model=BadgesResponse)
async def list_badges(
    user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """Every badge, flagged with the caller's earned state."""
    badges = await gateway.get_all_badges()
    earned = {ub.badge_id: ub.earned_at for ub in await gateway.get_user_badges(user.id)}

    return BadgesResponse(
        badges=[
            BadgeResponse(
                code=b.code,
                title=b.title,
                description=b.description,
                icon=b.icon,
                earned=b.id in earned,
                earned_at=earned.get(b.id),
            )
            for b in badges
        ],
        total_available=len(badges),
        total_earned=len(earned),
    )


@router.get("/challenges", response_model=ChallengesResponse)
async def list_challenges(
    user: CurrentUser = Depends(get_current_user),
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """The caller's challenge progress, plus open challenges not yet started."""
    user_challenges = await gateway.get_user_challenges(user.id)
    joined = {uc.challenge_id for uc in user_challenges}

    items = [
        ChallengeResponse(
            code=uc.challenge.code,
            title=uc.challenge.title,
            description=uc.challenge.description,
            challenge_type=uc.challenge.challenge_type,
            goal=uc.challenge.goal,
            xp_reward=uc.challenge.xp_reward,
            end_date=uc.challenge.end_date,
            progress=uc.progress,
            completed=uc.completed,
            completed_at=uc.completed_at,
        )
        for uc in user_challenges
    ]
    for challenge in await gateway.get_active_challenges(utc_today()):
        if challenge.id in joined:
            continue
        items.append(
            ChallengeResponse(
                code=challenge.code,
                title=challenge.title,
                description=challenge.description,
                challenge_type=challenge.challenge_type,
                goal=challenge.goal,
                xp_reward=challenge.xp_reward,
                end_date=challenge.end_date,
                progress=0,
                completed=False,
            )
        )

    return ChallengesResponse(challenges=items)
