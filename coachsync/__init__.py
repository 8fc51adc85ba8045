"""coachsync: athlete performance scoring, recommendations and live sync."""

__version__ = "0.1.0"
