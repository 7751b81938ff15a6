"""Typed errors raised by the service layer.

Services never build HTTP responses themselves; the handler registered in
``tocafy.main`` turns any ``TocafyError`` into ``{"detail", "error"}`` JSON
with the status code declared on the class.
"""
from fastapi import status


class TocafyError(Exception):
    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TocafyError):
    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(TocafyError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(TocafyError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidTransitionError(TocafyError):
    code = "invalid_transition"
    status_code = status.HTTP_409_CONFLICT


class ShowNotLiveError(TocafyError):
    code = "show_not_live"
    status_code = status.HTTP_409_CONFLICT


class ModerationRejectedError(TocafyError):
    code = "moderation_rejected"
    status_code = 422

    def __init__(self, reason: str):
        super().__init__(f"Request rejected by moderation ({reason})")
        self.reason = reason


class ConflictError(TocafyError):
    """Lost update detected on a show; safe to retry."""

    code = "conflict"
    status_code = status.HTTP_409_CONFLICT
    retryable = True


class PersistenceTimeoutError(TocafyError, TimeoutError):
    """A lock wait or database call exceeded its bound; safe to retry."""

    code = "timeout"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True
