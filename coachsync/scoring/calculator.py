"""Sport-specific performance scoring.

Converts raw match parameters into a 0-100 integer score. Coefficients are
part of the scoring contract and must not be tuned:

- Cricket: batting 50%, bowling 30%, fielding 20%
- Football: per-90-minute goals, assists, passing and tackling
- Basketball: per-48-minute points, rebounds, assists and steals

Properties:
- Deterministic: same input always produces the same score
- Bounded: totals are clamped to [0, 100] and rounded half-up
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from typing import Any, TypedDict

from coachsync.core.errors import InvalidInputError


class PerformanceCategory(TypedDict):
    category: str
    description: str
    color: str


class PerformanceChange(TypedDict):
    change: float
    percentage: int
    trend: str


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp_score(total: float) -> int:
    return _round_half_up(min(100.0, max(0.0, total)))


def _number(parameters: Mapping[str, Any], field: str) -> float:
    """Read a numeric field, treating an absent value as 0."""
    value = parameters.get(field, 0)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"Parameter '{field}' must be numeric, got {type(value).__name__}")
    if math.isnan(value):
        raise InvalidInputError(f"Parameter '{field}' must not be NaN")
    return float(value)


def _require_mapping(parameters: Any, sport: str) -> Mapping[str, Any]:
    if parameters is None or not isinstance(parameters, Mapping):
        raise InvalidInputError(f"Invalid {sport} parameters provided")
    return parameters


def calculate_cricket_score(parameters: Mapping[str, Any]) -> int:
    """Score a cricket performance from batting, bowling and fielding.

    Args:
        parameters: runsScored, ballsFaced, wicketsTaken, catches, oversBowled

    Returns:
        Performance score (0-100)
    """
    params = _require_mapping(parameters, "cricket")
    runs = _number(params, "runsScored")
    balls = _number(params, "ballsFaced")
    wickets = _number(params, "wicketsTaken")
    catches = _number(params, "catches")
    overs = _number(params, "oversBowled")

    batting = 0.0
    if balls > 0:
        strike_rate = runs / balls * 100
        batting = min(100.0, strike_rate)
    elif runs > 0:
        # Runs without balls recorded get partial credit
        batting = min(100.0, runs * 10)

    bowling = 0.0
    if overs > 0:
        bowling = min(100.0, wickets / overs * 100)
    elif wickets > 0:
        bowling = min(100.0, wickets * 25)

    fielding = min(100.0, catches * 20)

    return _clamp_score(batting * 0.5 + bowling * 0.3 + fielding * 0.2)


def calculate_football_score(parameters: Mapping[str, Any]) -> int:
    """Score a football performance normalized to 90 minutes.

    Args:
        parameters: goalsScored, assists, passesCompleted, tacklesMade, minutesPlayed

    Returns:
        Performance score (0-100)
    """
    params = _require_mapping(parameters, "football")
    minutes = max(_number(params, "minutesPlayed"), 1.0)

    goal_score = _number(params, "goalsScored") / minutes * 90 * 20
    assist_score = _number(params, "assists") / minutes * 90 * 15
    pass_score = min(30.0, _number(params, "passesCompleted") / minutes * 30)
    defense_score = min(20.0, _number(params, "tacklesMade") / minutes * 90 * 0.22)

    return _clamp_score(goal_score + assist_score + pass_score + defense_score)


def calculate_basketball_score(parameters: Mapping[str, Any]) -> int:
    """Score a basketball performance normalized to 48 minutes.

    Args:
        parameters: pointsScored, rebounds, assists, steals, minutesPlayed

    Returns:
        Performance score (0-100)
    """
    params = _require_mapping(parameters, "basketball")
    minutes = max(_number(params, "minutesPlayed"), 1.0)

    point_score = min(40.0, _number(params, "pointsScored") / minutes * 48 * 0.83)
    rebound_score = min(25.0, _number(params, "rebounds") / minutes * 48 * 2.5)
    assist_score = min(25.0, _number(params, "assists") / minutes * 48 * 3.125)
    steal_score = min(10.0, _number(params, "steals") / minutes * 48 * 5)

    return _clamp_score(point_score + rebound_score + assist_score + steal_score)


_CALCULATORS: dict[str, Callable[[Mapping[str, Any]], int]] = {
    "cricket": calculate_cricket_score,
    "football": calculate_football_score,
    "basketball": calculate_basketball_score,
}


def calculate_performance_score(sport: str, parameters: Mapping[str, Any]) -> int:
    """Calculate the performance score for any supported sport.

    Args:
        sport: "cricket", "football" or "basketball" (case-insensitive)
        parameters: Sport-specific parameter mapping (camelCase keys)

    Returns:
        Integer score in [0, 100]

    Raises:
        InvalidInputError: Unsupported sport, or parameters missing/not a mapping
    """
    if not sport or not isinstance(sport, str):
        raise InvalidInputError("Sport and parameters are required")
    if parameters is None:
        raise InvalidInputError("Sport and parameters are required")

    calculator = _CALCULATORS.get(sport.lower())
    if calculator is None:
        raise InvalidInputError(f"Unsupported sport: {sport}")
    return calculator(parameters)


def get_performance_category(score: float) -> PerformanceCategory:
    """Bucket a score into a display category."""
    if score >= 90:
        return {"category": "excellent", "description": "Outstanding performance", "color": "green"}
    if score >= 80:
        return {"category": "very-good", "description": "Very good performance", "color": "blue"}
    if score >= 70:
        return {"category": "good", "description": "Good performance", "color": "yellow"}
    if score >= 60:
        return {"category": "average", "description": "Average performance", "color": "orange"}
    return {"category": "below-average", "description": "Below average performance", "color": "red"}


def calculate_performance_change(current_score: float, previous_score: float | None) -> PerformanceChange:
    """Change between two consecutive scores; moves within +/-2 are stable."""
    if not previous_score:
        return {"change": 0, "percentage": 0, "trend": "stable"}

    change = current_score - previous_score
    percentage = _round_half_up(change / previous_score * 100)

    trend = "stable"
    if change > 2:
        trend = "improving"
    elif change < -2:
        trend = "declining"

    return {"change": change, "percentage": percentage, "trend": trend}
