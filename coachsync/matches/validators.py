"""Match input validation.

Both passes report every violated field at once. Structural errors are keyed
by the camelCase input field; parameter errors by ``parameters.<field>``.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

import pydantic

from coachsync.core.errors import ValidationError
from coachsync.matches.types import MatchSubmission
from coachsync.scoring.parameters import SPORT_PARAMETER_MODELS, parameter_error_message

_REQUIRED_MESSAGES = {
    "playerId": "Player ID is required",
    "coachId": "Coach ID is required",
    "sport": "Sport is required",
    "parameters": "Parameters are required",
    "date": "Match date is required",
}

_DATE_PARSE_ERRORS = {"datetime_parsing", "datetime_type", "datetime_from_date_parsing", "datetime_object_invalid"}


def _structural_message(error: Mapping[str, Any]) -> str:
    field = str(error["loc"][0]) if error["loc"] else ""
    if error["type"] == "missing":
        return _REQUIRED_MESSAGES.get(field, "Field is required")
    if error["type"] == "value_error":
        return str(error["ctx"]["error"])
    if field == "date" and error["type"] in _DATE_PARSE_ERRORS:
        return "Invalid date format"
    return error["msg"]


def validate_match_submission(data: Mapping[str, Any], now: datetime | None = None) -> MatchSubmission:
    """Validate the structure of a match submission.

    Args:
        data: Raw input with camelCase (or snake_case) keys
        now: Reference time for the future-date check

    Returns:
        Parsed MatchSubmission with a lower-cased sport and UTC date

    Raises:
        ValidationError: With one entry per violated field
    """
    if not isinstance(data, Mapping):
        raise ValidationError({"match": "Match data is required"})
    try:
        return MatchSubmission.model_validate(dict(data), context={"now": now})
    except pydantic.ValidationError as e:
        errors: dict[str, str] = {}
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"][:1]) or "match"
            errors.setdefault(field, _structural_message(error))
        raise ValidationError(errors) from e


def validate_sport_parameters(sport: str, parameters: Mapping[str, Any]) -> dict[str, Any]:
    """Validate parameters against the sport's schema.

    Every field is required and range-checked.

    Returns:
        Normalized camelCase parameters

    Raises:
        ValidationError: Keyed ``parameters.<field>``
    """
    model = SPORT_PARAMETER_MODELS.get(sport.lower())
    if model is None:
        raise ValidationError({"sport": "Invalid sport type"})
    try:
        validated = model.model_validate(dict(parameters))
    except pydantic.ValidationError as e:
        errors: dict[str, str] = {}
        for error in e.errors():
            field = str(error["loc"][0])
            errors.setdefault(f"parameters.{field}", parameter_error_message(sport, field))
        raise ValidationError(errors, message="Invalid sport parameters") from e
    return validated.to_document()
