"""Rest guidance, training suggestions and trend analysis."""

from coachsync.recommendations.engine import (
    classify_trend,
    generate_comprehensive_suggestions,
    generate_rest_recommendation,
    generate_training_suggestions,
    generate_trend_suggestions,
    get_motivational_message,
)
from coachsync.recommendations.types import RecommendationPackage, RestRecommendation, Suggestion

__all__ = [
    "RecommendationPackage",
    "RestRecommendation",
    "Suggestion",
    "classify_trend",
    "generate_comprehensive_suggestions",
    "generate_rest_recommendation",
    "generate_training_suggestions",
    "generate_trend_suggestions",
    "get_motivational_message",
]
