"""Recommendation engine for rest guidance and coaching suggestions.

Inputs are a score, a sport, the raw parameters and the player's recent
scores in chronological order (oldest first). Output ordering is fixed:
general suggestion, sport-specific suggestions, then the trend suggestion.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from coachsync.recommendations.types import (
    RecommendationPackage,
    RestRecommendation,
    Suggestion,
    SuggestionPriority,
    Trend,
)

TREND_WINDOW = 3
MIN_TREND_SCORES = TREND_WINDOW * 2

# (min hours, span) per band; hours = min + randrange(span)
EXTENDED_REST = (48, 24)
MODERATE_REST = (24, 24)
LIGHT_REST = (12, 12)


def _value(parameters: Mapping[str, Any], field: str) -> float:
    value = parameters.get(field) or 0
    return float(value)


def _technique(message: str, priority: SuggestionPriority) -> Suggestion:
    return Suggestion(type="technique", message=message, priority=priority)


def generate_rest_recommendation(score: float, rng: random.Random | None = None) -> RestRecommendation:
    """Draw a rest window from the band matching the score.

    Args:
        score: Performance score (0-100)
        rng: Random source; module-level random when omitted

    Returns:
        RestRecommendation with hours inside the band
    """
    draw = rng or random
    if score < 60:
        hours = EXTENDED_REST[0] + draw.randrange(EXTENDED_REST[1])
        description = (
            f"Your performance indicates fatigue. Take {hours} hours of complete rest to recover properly. "
            "Focus on sleep, hydration, and light stretching."
        )
    elif score < 80:
        hours = MODERATE_REST[0] + draw.randrange(MODERATE_REST[1])
        description = (
            f"Good performance but room for improvement. Take {hours} hours of moderate rest. "
            "Light activities like walking or yoga are beneficial."
        )
    else:
        hours = LIGHT_REST[0] + draw.randrange(LIGHT_REST[1])
        description = (
            f"Excellent performance! Take {hours} hours of light rest. "
            "You can engage in light training or active recovery activities."
        )
    return RestRecommendation(hours=hours, description=description)


def _general_suggestion(score: float) -> Suggestion:
    if score >= 90:
        return Suggestion(
            type="general",
            message="Outstanding performance! Maintain your current training routine and focus on consistency.",
            priority="low",
        )
    if score >= 80:
        return Suggestion(
            type="general",
            message="Very good performance! Fine-tune specific skills to reach the next level.",
            priority="medium",
        )
    if score >= 70:
        return Suggestion(
            type="general",
            message="Good performance with room for improvement. Focus on consistent practice.",
            priority="medium",
        )
    if score >= 60:
        return Suggestion(
            type="general",
            message="Average performance. Identify weak areas and dedicate extra practice time.",
            priority="high",
        )
    return Suggestion(
        type="general",
        message="Performance needs improvement. Consider working with a coach on fundamentals.",
        priority="high",
    )


def _cricket_suggestions(parameters: Mapping[str, Any], score: float) -> list[Suggestion]:
    suggestions: list[Suggestion] = []
    runs = _value(parameters, "runsScored")
    balls = _value(parameters, "ballsFaced")
    wickets = _value(parameters, "wicketsTaken")
    catches = _value(parameters, "catches")
    overs = _value(parameters, "oversBowled")

    if balls > 0:
        strike_rate = runs / balls * 100
        if strike_rate < 80:
            suggestions.append(_technique(
                "Work on batting technique and shot selection. Practice in the nets to improve strike rate.",
                "high",
            ))
        elif strike_rate > 150:
            suggestions.append(_technique(
                "Excellent strike rate! Focus on maintaining consistency and playing according to match situation.",
                "low",
            ))

    if overs > 0:
        wickets_per_over = wickets / overs
        if wickets_per_over < 0.2:
            suggestions.append(_technique(
                "Focus on bowling accuracy and variation. Practice different deliveries and work on line and length.",
                "high",
            ))
        elif wickets_per_over > 0.5:
            suggestions.append(_technique(
                "Great bowling performance! Continue working on consistency and developing new variations.",
                "low",
            ))

    if catches == 0 and score < 70:
        suggestions.append(_technique(
            "Work on fielding skills. Practice catching drills and improve positioning.",
            "medium",
        ))
    elif catches >= 2:
        suggestions.append(_technique(
            "Excellent fielding! Your catching ability is a valuable asset to the team.",
            "low",
        ))

    return suggestions


def _football_suggestions(parameters: Mapping[str, Any], score: float) -> list[Suggestion]:
    suggestions: list[Suggestion] = []
    goals = _value(parameters, "goalsScored")
    assists = _value(parameters, "assists")
    minutes = max(_value(parameters, "minutesPlayed"), 1.0)

    if goals == 0 and score < 70:
        suggestions.append(_technique(
            "Work on finishing skills. Practice shooting from different angles and distances.",
            "high",
        ))
    elif goals >= 2:
        suggestions.append(_technique(
            "Great goal-scoring performance! Continue working on movement in the box.",
            "low",
        ))

    passes_per_minute = _value(parameters, "passesCompleted") / minutes
    if passes_per_minute < 0.5:
        suggestions.append(_technique(
            "Improve passing accuracy and frequency. Work on short and long passing drills.",
            "medium",
        ))
    elif passes_per_minute > 1.0:
        suggestions.append(_technique(
            "Excellent passing game! Focus on creating more scoring opportunities.",
            "low",
        ))

    tackles_per_minute = _value(parameters, "tacklesMade") / minutes
    if tackles_per_minute < 0.05 and score < 70:
        suggestions.append(_technique(
            "Work on defensive positioning and tackling technique. Practice 1v1 defending.",
            "medium",
        ))
    elif tackles_per_minute > 0.1:
        suggestions.append(_technique(
            "Strong defensive performance! Continue working on reading the game.",
            "low",
        ))

    if assists == 0 and goals == 0 and score < 60:
        suggestions.append(_technique(
            "Focus on creating chances for teammates. Work on vision and through balls.",
            "high",
        ))

    return suggestions


def _basketball_suggestions(parameters: Mapping[str, Any], score: float) -> list[Suggestion]:
    suggestions: list[Suggestion] = []
    minutes = max(_value(parameters, "minutesPlayed"), 1.0)

    points_per_minute = _value(parameters, "pointsScored") / minutes
    if points_per_minute < 0.5:
        suggestions.append(_technique(
            "Work on shooting technique and shot selection. Practice free throws and mid-range shots.",
            "high",
        ))
    elif points_per_minute > 1.0:
        suggestions.append(_technique(
            "Excellent scoring efficiency! Focus on creating shots for teammates as well.",
            "low",
        ))

    rebounds_per_minute = _value(parameters, "rebounds") / minutes
    if rebounds_per_minute < 0.2:
        suggestions.append(_technique(
            "Improve rebounding by working on positioning and boxing out. Practice timing jumps.",
            "medium",
        ))
    elif rebounds_per_minute > 0.4:
        suggestions.append(_technique(
            "Great rebounding! Your presence in the paint is valuable to the team.",
            "low",
        ))

    assists_per_minute = _value(parameters, "assists") / minutes
    if assists_per_minute < 0.1 and score < 70:
        suggestions.append(_technique(
            "Work on court vision and passing skills. Practice different types of passes.",
            "medium",
        ))
    elif assists_per_minute > 0.25:
        suggestions.append(_technique(
            "Excellent playmaking! Continue developing leadership on the court.",
            "low",
        ))

    steals_per_minute = _value(parameters, "steals") / minutes
    if steals_per_minute < 0.02 and score < 70:
        suggestions.append(_technique(
            "Focus on defensive anticipation and active hands. Work on reading passing lanes.",
            "medium",
        ))
    elif steals_per_minute > 0.08:
        suggestions.append(_technique(
            "Great defensive instincts! Balance aggression with smart positioning.",
            "low",
        ))

    return suggestions


_SPORT_SUGGESTIONS: dict[str, Callable[[Mapping[str, Any], float], list[Suggestion]]] = {
    "cricket": _cricket_suggestions,
    "football": _football_suggestions,
    "basketball": _basketball_suggestions,
}


def generate_training_suggestions(score: float, sport: str, parameters: Mapping[str, Any] | None) -> list[Suggestion]:
    """General suggestion followed by sport-specific threshold suggestions.

    Unsupported sports get the general suggestion only.
    """
    suggestions = [_general_suggestion(score)]
    generator = _SPORT_SUGGESTIONS.get((sport or "").lower())
    if generator is not None and parameters:
        suggestions.extend(generator(parameters, score))
    return suggestions


def _trend_difference(recent_scores: Sequence[float]) -> float | None:
    """Mean of the newest window minus mean of the window before it."""
    if not recent_scores or len(recent_scores) < MIN_TREND_SCORES:
        return None
    recent = recent_scores[-TREND_WINDOW:]
    older = recent_scores[-MIN_TREND_SCORES:-TREND_WINDOW]
    return sum(recent) / len(recent) - sum(older) / len(older)


def generate_trend_suggestions(recent_scores: Sequence[float] | None) -> list[Suggestion]:
    """Trend suggestion from chronological scores (oldest first).

    Returns an empty list with fewer than six scores.
    """
    difference = _trend_difference(list(recent_scores or []))
    if difference is None:
        return []

    if difference > 10:
        suggestion = Suggestion(
            type="general",
            message="Excellent improvement trend! Your hard work is paying off. Maintain this momentum.",
            priority="low",
            trend="improving",
        )
    elif difference > 5:
        suggestion = Suggestion(
            type="general",
            message="Good improvement trend! Continue your current training approach.",
            priority="low",
            trend="improving",
        )
    elif difference < -10:
        suggestion = Suggestion(
            type="general",
            message="Performance has declined recently. Consider reviewing your training routine and getting adequate rest.",
            priority="high",
            trend="declining",
        )
    elif difference < -5:
        suggestion = Suggestion(
            type="general",
            message="Slight decline in performance. Focus on fundamentals and ensure proper recovery.",
            priority="medium",
            trend="declining",
        )
    else:
        suggestion = Suggestion(
            type="general",
            message="Consistent performance! Consider adding new challenges to break through plateaus.",
            priority="medium",
            trend="stable",
        )
    return [suggestion]


def classify_trend(recent_scores: Sequence[float] | None) -> Trend:
    """Classify chronological scores as improving, declining or stable (+/-5 band)."""
    difference = _trend_difference(list(recent_scores or []))
    if difference is None:
        return "stable"
    if difference > 5:
        return "improving"
    if difference < -5:
        return "declining"
    return "stable"


def generate_comprehensive_suggestions(
    score: int,
    sport: str,
    parameters: Mapping[str, Any] | None,
    recent_scores: Sequence[float] | None = None,
    rng: random.Random | None = None,
) -> RecommendationPackage:
    """Build the full recommendation package for one match.

    Args:
        score: Calculated performance score
        sport: Sport tag
        parameters: Raw sport parameters used for the score
        recent_scores: Prior scores, chronological (oldest first)
        rng: Random source for the rest draw

    Returns:
        RecommendationPackage with training suggestions first and the trend suggestion last
    """
    rest_recommendation = generate_rest_recommendation(score, rng)
    suggestions = generate_training_suggestions(score, sport, parameters)
    suggestions.extend(generate_trend_suggestions(recent_scores))

    return RecommendationPackage(
        rest_recommendation=rest_recommendation,
        suggestions=suggestions,
        score=score,
        sport=sport,
    )


def get_motivational_message(score: float) -> str:
    if score >= 90:
        return "Outstanding performance! You're at the top of your game!"
    if score >= 80:
        return "Great job! You're performing at a high level!"
    if score >= 70:
        return "Good work! Keep pushing to reach the next level!"
    if score >= 60:
        return "Solid effort! Focus on improvement areas to boost your performance!"
    return "Every champion was once a beginner. Keep working hard!"
