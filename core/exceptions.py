"""
Application error taxonomy.

Services raise these instead of building HTTP responses themselves; the
handlers registered in ``main.py`` turn every ``AppError`` into a JSON body
of the form ``{"message": ...}`` with the matching status code.
"""
from typing import Any, Dict, Optional

from fastapi import status


class AppError(Exception):
    """Base exception for all expected application errors."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Server error"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.message
        self.context: Dict[str, Any] = context
        super().__init__(self.message)


class NotFound(AppError):
    """Target or a related entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class Unauthorized(AppError):
    """Missing or invalid credentials, or the actor may not touch the resource."""
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authorized"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Conflict"


class ReactionConflict(Conflict):
    """
    A concurrent request changed the (actor, target) reaction row between
    our read and our write. Recovered by the reaction engine with a retry.
    """
    message = "Reaction changed concurrently"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server error"


class CounterUnderflow(InternalError):
    """A counter adjustment would have driven likes or dislikes below zero."""
    message = "Counter underflow"


class PayloadTooLarge(ValidationError):
    status_code = status.HTTP_413_CONTENT_TOO_LARGE
    message = "File too large"
