"""Performance scoring for cricket, football and basketball."""

from coachsync.scoring.calculator import (
    calculate_basketball_score,
    calculate_cricket_score,
    calculate_football_score,
    calculate_performance_change,
    calculate_performance_score,
    get_performance_category,
)
from coachsync.scoring.parameters import SPORT_PARAMETER_MODELS, SUPPORTED_SPORTS, Sport

__all__ = [
    "SPORT_PARAMETER_MODELS",
    "SUPPORTED_SPORTS",
    "Sport",
    "calculate_basketball_score",
    "calculate_cricket_score",
    "calculate_football_score",
    "calculate_performance_change",
    "calculate_performance_score",
    "get_performance_category",
]
