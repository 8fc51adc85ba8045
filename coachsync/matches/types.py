"""Match, aggregate and overview models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, ValidationInfo, field_validator

from coachsync.core.ordering import ensure_utc, utc_now
from coachsync.core.schema import CamelModel
from coachsync.recommendations.types import RestRecommendation, Suggestion, Trend
from coachsync.scoring.parameters import SUPPORTED_SPORTS


class MatchSubmission(CamelModel):
    """Coach-entered match input, before scoring.

    Validation collects every structural violation. The future-date check
    compares against ``context["now"]`` when supplied.
    """

    player_id: str
    coach_id: str
    sport: str
    parameters: dict[str, Any]
    date: datetime
    player_email: str | None = None

    @field_validator("player_id", mode="before")
    @classmethod
    def require_player_id(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Player ID is required")
        return value

    @field_validator("coach_id", mode="before")
    @classmethod
    def require_coach_id(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Coach ID is required")
        return value

    @field_validator("sport", mode="before")
    @classmethod
    def validate_sport(cls, value: Any) -> str:
        if not value:
            raise ValueError("Sport is required")
        if not isinstance(value, str) or value.lower() not in SUPPORTED_SPORTS:
            raise ValueError("Invalid sport type")
        return value.lower()

    @field_validator("parameters", mode="before")
    @classmethod
    def require_parameters(cls, value: Any) -> Any:
        if not value or not isinstance(value, dict):
            raise ValueError("Parameters are required")
        return value

    @field_validator("date", mode="before")
    @classmethod
    def require_date(cls, value: Any) -> Any:
        if value is None or value == "":
            raise ValueError("Match date is required")
        return value

    @field_validator("date")
    @classmethod
    def reject_future_date(cls, value: datetime, info: ValidationInfo) -> datetime:
        now = (info.context or {}).get("now") or utc_now()
        value = ensure_utc(value)
        if value > ensure_utc(now):
            raise ValueError("Match date cannot be in the future")
        return value


class MatchRecord(CamelModel):
    """A persisted match with its derived score and recommendations."""

    id: str | None = None
    player_id: str
    coach_id: str
    player_email: str | None = None
    sport: str
    parameters: dict[str, Any]
    date: datetime
    calculated_score: int = Field(ge=0, le=100)
    suggestions: list[str] = Field(default_factory=list)
    rest_recommendation: RestRecommendation | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PlayerAggregate(CamelModel):
    """Running statistics of one player, keyed by player id."""

    player_id: str
    name: str | None = None
    email: str | None = None
    sport: str | None = None
    coach_id: str | None = None
    current_score: float = 0
    match_count: int = 0
    total_score: float = 0
    average_score: float = 0
    last_match_date: datetime | None = None


class AggregateStats(CamelModel):
    """Statistics rebuilt from a complete set of matches."""

    match_count: int = 0
    total_score: float = 0
    average_score: float = 0
    current_score: float = 0
    last_match_date: datetime | None = None


class RecentActivity(CamelModel):
    match_id: str
    player_id: str
    player_name: str
    sport: str
    score: int
    date: datetime


class TopPerformer(CamelModel):
    player_id: str
    name: str | None = None
    average_score: float


class TeamOverview(CamelModel):
    coach_id: str
    total_players: int = 0
    total_matches: int = 0
    average_team_score: float = 0
    top_performer: TopPerformer | None = None
    recent_activity: list[RecentActivity] = Field(default_factory=list)


class ScoreHistoryEntry(CamelModel):
    match_id: str
    date: datetime
    score: int
    sport: str


class PerformanceSummary(CamelModel):
    """Dashboard summary for a player."""

    player_id: str
    name: str | None = None
    sport: str | None = None
    total_matches: int = 0
    average_score: float = 0
    current_score: float = 0
    last_match_date: datetime | None = None
    recent_scores: list[int] = Field(default_factory=list)
    trend: Trend = "stable"
    category: str = "below-average"
    history: list[ScoreHistoryEntry] = Field(default_factory=list)


class ScorePreview(CamelModel):
    """Score and recommendations for parameters that are not persisted."""

    sport: str
    score: int
    category: str
    category_description: str
    motivational_message: str
    rest_recommendation: RestRecommendation
    suggestions: list[Suggestion]
