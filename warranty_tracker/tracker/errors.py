from __future__ import annotations

from datetime import datetime
from enum import Enum

from warranty_tracker.utils.time import utc_now


class ErrorType(str, Enum):
    INVALID_TRACKING_CODE = "invalid_tracking_code"
    NETWORK_ERROR = "network_error"
    DATABASE_ERROR = "database_error"
    VALIDATION_ERROR = "validation_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"


ERROR_MESSAGES: dict[ErrorType, str] = {
    ErrorType.INVALID_TRACKING_CODE: "The tracking code you entered is invalid or has expired.",
    ErrorType.NETWORK_ERROR: (
        "Unable to connect to our servers. "
        "Please check your internet connection and try again."
    ),
    ErrorType.DATABASE_ERROR: (
        "We're experiencing technical difficulties. Please try again in a few minutes."
    ),
    ErrorType.VALIDATION_ERROR: (
        "The information provided is invalid. Please check your input and try again."
    ),
    ErrorType.UNAUTHORIZED: "You don't have permission to access this ticket.",
    ErrorType.NOT_FOUND: "The ticket you're looking for could not be found.",
    ErrorType.RATE_LIMITED: "Too many requests. Please wait a moment before trying again.",
}
DEFAULT_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


def get_error_message(error_type: ErrorType) -> str:
    return ERROR_MESSAGES.get(error_type, DEFAULT_ERROR_MESSAGE)


def map_http_status_to_error_type(status_code: int) -> ErrorType:
    if status_code == 400:
        return ErrorType.VALIDATION_ERROR
    if status_code == 401:
        return ErrorType.UNAUTHORIZED
    if status_code == 404:
        return ErrorType.NOT_FOUND
    if status_code == 429:
        return ErrorType.RATE_LIMITED
    if status_code in {500, 502, 503}:
        return ErrorType.DATABASE_ERROR
    return ErrorType.NETWORK_ERROR


class TrackerError(Exception):
    """Failure surfaced to the tracker's user-visible state.

    ``message`` is a short internal summary; what a user sees is
    ``user_message``, fixed per error type.
    """

    def __init__(
        self,
        error_type: ErrorType,
        message: str,
        details: str | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.type = error_type
        self.message = message
        self.details = details
        self.code = code
        self.timestamp: datetime = utc_now()

    @property
    def user_message(self) -> str:
        return get_error_message(self.type)
