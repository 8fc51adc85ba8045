"""Sport-specific parameter schemas.

Each model is the single source of truth for a sport's field names and
ranges. Counts are integers; overs and minutes accept fractions.
"""

from typing import Literal

from pydantic import Field

from coachsync.core.schema import CamelModel

Sport = Literal["cricket", "football", "basketball"]

SUPPORTED_SPORTS: tuple[str, ...] = ("cricket", "football", "basketball")


class CricketParameters(CamelModel):
    runs_scored: int = Field(ge=0, le=500)
    balls_faced: int = Field(ge=0, le=600)
    wickets_taken: int = Field(ge=0, le=10)
    catches: int = Field(ge=0, le=20)
    overs_bowled: float = Field(ge=0, le=50)


class FootballParameters(CamelModel):
    goals_scored: int = Field(ge=0, le=20)
    assists: int = Field(ge=0, le=20)
    # Form cap; the same bound is enforced at every layer.
    passes_completed: int = Field(ge=0, le=200)
    tackles_made: int = Field(ge=0, le=50)
    minutes_played: float = Field(ge=0, le=120)


class BasketballParameters(CamelModel):
    points_scored: int = Field(ge=0, le=100)
    rebounds: int = Field(ge=0, le=50)
    assists: int = Field(ge=0, le=30)
    steals: int = Field(ge=0, le=20)
    minutes_played: float = Field(ge=0, le=48)


SPORT_PARAMETER_MODELS: dict[str, type[CamelModel]] = {
    "cricket": CricketParameters,
    "football": FootballParameters,
    "basketball": BasketballParameters,
}

SPORT_PARAMETER_LABELS: dict[str, dict[str, str]] = {
    "cricket": {
        "runsScored": "Runs Scored",
        "ballsFaced": "Balls Faced",
        "wicketsTaken": "Wickets Taken",
        "catches": "Catches",
        "oversBowled": "Overs Bowled",
    },
    "football": {
        "goalsScored": "Goals Scored",
        "assists": "Assists",
        "passesCompleted": "Passes Completed",
        "tacklesMade": "Tackles Made",
        "minutesPlayed": "Minutes Played",
    },
    "basketball": {
        "pointsScored": "Points Scored",
        "rebounds": "Rebounds",
        "assists": "Assists",
        "steals": "Steals",
        "minutesPlayed": "Minutes Played",
    },
}


def default_parameters(sport: str) -> dict[str, int]:
    """All-zero parameter set for a sport (camelCase keys)."""
    return dict.fromkeys(SPORT_PARAMETER_LABELS[sport.lower()], 0)


def parameter_range(sport: str, field: str) -> tuple[float, float]:
    """(min, max) bounds of a camelCase parameter, read from the sport model."""
    model = SPORT_PARAMETER_MODELS[sport.lower()]
    for name, info in model.model_fields.items():
        if info.alias != field and name != field:
            continue
        low = high = None
        for constraint in info.metadata:
            low = getattr(constraint, "ge", low)
            high = getattr(constraint, "le", high)
        return low, high
    raise KeyError(f"Unknown {sport} parameter: {field}")


def parameter_error_message(sport: str, field: str) -> str:
    """Range message for a parameter, e.g. "Runs scored must be between 0 and 500"."""
    label = SPORT_PARAMETER_LABELS[sport.lower()].get(field, field)
    low, high = parameter_range(sport, field)
    return f"{label[:1]}{label[1:].lower()} must be between {low:g} and {high:g}"
