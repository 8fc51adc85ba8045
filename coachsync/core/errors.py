"""Canonical error types for coachsync.

Validation and lookup failures are business errors raised before any write.
Anything the document store raises is wrapped in StoreError so callers can
classify it by the store's native code.
"""

from __future__ import annotations

STORE_ERROR_MESSAGES: dict[str, str] = {
    "permission-denied": "You do not have permission to perform this action.",
    "not-found": "The requested data was not found.",
    "already-exists": "This data already exists.",
    "resource-exhausted": "Database quota exceeded. Please try again later.",
    "failed-precondition": "Operation failed due to invalid conditions.",
    "aborted": "Operation was aborted due to a conflict. Please try again.",
    "out-of-range": "Invalid data range provided.",
    "unimplemented": "This operation is not supported.",
    "internal": "Internal server error. Please try again later.",
    "unavailable": "Service is currently unavailable. Please check your connection.",
    "data-loss": "Data loss detected. Please contact support.",
    "unauthenticated": "You must be logged in to perform this action.",
    "invalid-argument": "Invalid data provided. Please check your input.",
    "deadline-exceeded": "Operation timed out. Please try again.",
    "cancelled": "Operation was cancelled.",
}

DEFAULT_STORE_ERROR_MESSAGE = "An unexpected database error occurred. Please try again."


class CoachSyncError(Exception):
    """Base class for all coachsync errors."""


class InvalidInputError(CoachSyncError, ValueError):
    """Raised by the score calculator for malformed sport or parameter input."""


class ValidationError(CoachSyncError):
    """Raised when match input fails validation.

    Attributes:
        errors: Mapping of field path to message, one entry per violated field
    """

    def __init__(self, errors: dict[str, str], message: str = "Invalid match data"):
        self.errors = dict(errors)
        joined = ", ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"{message}: {joined}" if joined else message)


class NotFoundError(CoachSyncError):
    """Raised when a referenced player, profile or match does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class StoreError(CoachSyncError):
    """Wraps a persistence failure.

    Attributes:
        code: Native store error code (e.g. "permission-denied", "unavailable")
        original: The underlying exception, if any
    """

    def __init__(self, code: str, message: str | None = None, original: BaseException | None = None):
        self.code = code
        self.original = original
        super().__init__(message or STORE_ERROR_MESSAGES.get(code, DEFAULT_STORE_ERROR_MESSAGE))

    @classmethod
    def wrap(cls, error: BaseException, code: str = "internal") -> StoreError:
        """Wrap an arbitrary exception, passing StoreErrors through untouched."""
        if isinstance(error, StoreError):
            return error
        native_code = getattr(error, "code", None)
        if isinstance(native_code, str) and native_code:
            code = native_code
        message = STORE_ERROR_MESSAGES.get(code) or str(error) or DEFAULT_STORE_ERROR_MESSAGE
        return cls(code, message, original=error)
