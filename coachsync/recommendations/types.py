"""Recommendation value types.

Suggestions are transient: only their messages are persisted on a match.
"""

from datetime import datetime
from typing import Literal

from pydantic import Field

from coachsync.core.ordering import utc_now
from coachsync.core.schema import CamelModel

SuggestionType = Literal["rest", "training", "technique", "general"]
SuggestionPriority = Literal["high", "medium", "low"]
Trend = Literal["improving", "declining", "stable"]


class Suggestion(CamelModel):
    """A single coaching suggestion.

    Attributes:
        type: Suggestion category
        message: Human-readable recommendation
        priority: Urgency
        trend: Set only on trend-derived suggestions
    """

    type: SuggestionType
    message: str
    priority: SuggestionPriority = "medium"
    trend: Trend | None = None
    created_at: datetime = Field(default_factory=utc_now)


class RestRecommendation(CamelModel):
    hours: int = Field(ge=0, le=168)
    description: str
    created_at: datetime = Field(default_factory=utc_now)


class RecommendationPackage(CamelModel):
    """Rest guidance and ordered suggestions derived from one score."""

    rest_recommendation: RestRecommendation
    suggestions: list[Suggestion]
    score: int
    sport: str
    generated_at: datetime = Field(default_factory=utc_now)

    @property
    def messages(self) -> list[str]:
        return [suggestion.message for suggestion in self.suggestions]
