"""Pydantic request/response models for game endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


# --- Catalog ---


class ChoiceEntry(BaseModel):
    id: str
    text: str
    icon: str
    category: str
    is_good: bool


class ChoiceCatalogResponse(BaseModel):
    good: list[ChoiceEntry]
    bad: list[ChoiceEntry]


class StageEntry(BaseModel):
    stage: str
    name: str
    min_level: int
    description: str
    color: str


class StageCatalogResponse(BaseModel):
    stages: list[StageEntry]


# --- Profile ---


class RegisterProfileRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_.-]+$")


class ProfileResponse(BaseModel):
    id: str
    username: str
    avatar_url: str | None = None
    health: int
    level: int
    xp: int
    total_xp: int
    streak_days: int
    longest_streak: int
    good_choices: int
    bad_choices: int
    plant_stage: str
    last_action_date: date | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class LevelProgressResponse(BaseModel):
    level: int
    stage: str
    xp_into_level: int
    xp_for_level: int
    xp_for_next: int


# --- Actions / stats ---


class ActionResponse(BaseModel):
    id: int
    choice_id: str
    text: str
    icon: str | None = None
    impact: int
    xp_earned: int
    is_good: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ActionFeedResponse(BaseModel):
    actions: list[ActionResponse]


class DailyStatResponse(BaseModel):
    day: date
    good_count: int
    bad_count: int
    xp_earned: int
    health_start: int | None = None
    health_end: int | None = None


class DailyStatsResponse(BaseModel):
    days: int
    stats: list[DailyStatResponse]


class CategoryStatsResponse(BaseModel):
    recycling: int = 0
    public_transport: int = 0
    energy_saving: int = 0
    water_conservation: int = 0
    sustainable_shopping: int = 0


class DashboardResponse(BaseModel):
    profile: ProfileResponse
    progress: LevelProgressResponse
    recent_actions: list[ActionResponse]
    daily_stats: list[DailyStatResponse]
    category_stats: CategoryStatsResponse
    unread_notifications: int


# --- Choices ---


class ChoiceRequest(BaseModel):
    choice_id: str = Field(..., min_length=1, max_length=32)
    is_good: bool


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ChoiceOutcomeResponse(BaseModel):
    profile: ProfileResponse
    action: ActionResponse
    leveled_up: bool
    stage_changed: bool
    notifications: list[NotificationResponse]


# --- Achievements / badges / challenges ---


class AchievementResponse(BaseModel):
    code: str
    title: str
    description: str
    icon: str | None = None
    category: str
    requirement: int
    xp_reward: int
    earned: bool = False
    earned_at: datetime | None = None


class AchievementsResponse(BaseModel):
    achievements: list[AchievementResponse]
    total_available: int
    total_earned: int


class BadgeResponse(BaseModel):
    code: str
    title: str
    description: str
    icon: str | None = None
    earned: bool = False
    earned_at: datetime | None = None


class BadgesResponse(BaseModel):
    badges: list[BadgeResponse]
    total_available: int
    total_earned: int


class ChallengeResponse(BaseModel):
    code: str
    title: str
    description: str
    challenge_type: str
    goal: int
    xp_reward: int
    end_date: date
    progress: int
    completed: bool
    completed_at: datetime | None = None


class ChallengesResponse(BaseModel):
    challenges: list[ChallengeResponse]
