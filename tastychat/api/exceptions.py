"""API exception hierarchy.

Every API exception carries status_code and error_code, which the global
exception handler turns into an ErrorResponse.
"""

from tastychat.api.models.errors import ErrorCode


class TastyChatAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(TastyChatAPIError):
    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class SessionNotFoundError(TastyChatAPIError):
    status_code = 404
    error_code = ErrorCode.SESSION_NOT_FOUND
