"""Tests for match structure and sport parameter validation."""

from datetime import timedelta

import pytest

from coachsync.core.errors import ValidationError
from coachsync.matches.validators import validate_match_submission, validate_sport_parameters


class TestMatchSubmission:
    def test_valid_submission(self, make_match_input, fixed_now):
        submission = validate_match_submission(make_match_input(sport="FOOTBALL"), now=fixed_now)
        assert submission.sport == "football"
        assert submission.player_id == "player-1"
        assert submission.date.tzinfo is not None

    def test_date_string_is_parsed(self, make_match_input, fixed_now):
        submission = validate_match_submission(make_match_input(date="2024-05-20T18:30:00Z"), now=fixed_now)
        assert submission.date.day == 20

    def test_date_equal_to_now_is_accepted(self, make_match_input, fixed_now):
        assert validate_match_submission(make_match_input(date=fixed_now), now=fixed_now).date == fixed_now

    def test_future_date_rejected(self, make_match_input, fixed_now):
        with pytest.raises(ValidationError) as exc_info:
            validate_match_submission(make_match_input(date=fixed_now + timedelta(days=1)), now=fixed_now)
        assert exc_info.value.errors == {"date": "Match date cannot be in the future"}

    def test_invalid_date_format(self, make_match_input, fixed_now):
        with pytest.raises(ValidationError) as exc_info:
            validate_match_submission(make_match_input(date="last tuesday"), now=fixed_now)
        assert exc_info.value.errors["date"] == "Invalid date format"

    def test_every_violation_reported(self, fixed_now):
        with pytest.raises(ValidationError) as exc_info:
            validate_match_submission({"sport": "tennis"}, now=fixed_now)

        errors = exc_info.value.errors
        assert errors == {
            "playerId": "Player ID is required",
            "coachId": "Coach ID is required",
            "sport": "Invalid sport type",
            "parameters": "Parameters are required",
            "date": "Match date is required",
        }

    def test_blank_values(self, make_match_input, fixed_now):
        data = make_match_input(playerId="  ", sport="", parameters={})
        with pytest.raises(ValidationError) as exc_info:
            validate_match_submission(data, now=fixed_now)
        assert exc_info.value.errors == {
            "playerId": "Player ID is required",
            "sport": "Sport is required",
            "parameters": "Parameters are required",
        }

    def test_non_mapping_input(self, fixed_now):
        with pytest.raises(ValidationError):
            validate_match_submission(None, now=fixed_now)


class TestSportParameters:
    def test_normalizes_to_camel_case(self):
        params = validate_sport_parameters(
            "cricket",
            {"runs_scored": 40, "ballsFaced": 30, "wicketsTaken": 1, "catches": 0, "oversBowled": 4.2},
        )
        assert params == {"runsScored": 40, "ballsFaced": 30, "wicketsTaken": 1, "catches": 0, "oversBowled": 4.2}

    def test_pass_cap(self):
        params = {"goalsScored": 0, "assists": 0, "passesCompleted": 201, "tacklesMade": 0, "minutesPlayed": 90}
        with pytest.raises(ValidationError) as exc_info:
            validate_sport_parameters("football", params)
        assert exc_info.value.errors == {
            "parameters.passesCompleted": "Passes completed must be between 0 and 200",
        }

    def test_boundaries_accepted(self):
        params = {"pointsScored": 100, "rebounds": 0, "assists": 30, "steals": 20, "minutesPlayed": 48}
        assert validate_sport_parameters("basketball", params)["pointsScored"] == 100

    def test_multiple_field_errors(self):
        params = {"runsScored": -1, "ballsFaced": 10, "wicketsTaken": 11, "catches": 0}
        with pytest.raises(ValidationError, match="Invalid sport parameters") as exc_info:
            validate_sport_parameters("cricket", params)
        assert exc_info.value.errors == {
            "parameters.runsScored": "Runs scored must be between 0 and 500",
            "parameters.wicketsTaken": "Wickets taken must be between 0 and 10",
            "parameters.oversBowled": "Overs bowled must be between 0 and 50",
        }

    def test_unknown_sport(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_sport_parameters("hockey", {"goals": 1})
        assert exc_info.value.errors == {"sport": "Invalid sport type"}
