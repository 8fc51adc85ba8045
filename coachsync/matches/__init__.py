"""Match submission, deletion and aggregate maintenance."""

from coachsync.matches.service import MatchService, compute_aggregate_stats, preview_score
from coachsync.matches.types import (
    AggregateStats,
    MatchRecord,
    MatchSubmission,
    PerformanceSummary,
    PlayerAggregate,
    ScorePreview,
    TeamOverview,
)
from coachsync.matches.validators import validate_match_submission, validate_sport_parameters

__all__ = [
    "AggregateStats",
    "MatchRecord",
    "MatchService",
    "MatchSubmission",
    "PerformanceSummary",
    "PlayerAggregate",
    "ScorePreview",
    "TeamOverview",
    "compute_aggregate_stats",
    "preview_score",
    "validate_match_submission",
    "validate_sport_parameters",
]
