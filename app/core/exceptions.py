"""
Domain errors raised by the progression services.

Routers let these propagate; ``app.main`` maps them to HTTP responses.
"""
from fastapi import status


class LessonError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LessonError):
    """Malformed input: wrong answer count, out-of-range score or step, bad payload."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(LessonError):
    """Referenced lesson, test or question does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class StepLockedError(LessonError):
    """Submission for a step whose prerequisites are incomplete."""

    status_code = status.HTTP_409_CONFLICT


class PersistenceError(LessonError):
    """Database or transaction failure. Nothing was written; safe to retry."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Failed to save changes, please try again"):
        super().__init__(message)
