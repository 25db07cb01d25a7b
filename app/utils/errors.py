"""
Taste Palette API - Custom Exception Classes.

Exception hierarchy for application error handling. Every exception
carries the HTTP status it maps to; the handlers in ``main.py`` render
them as ``{"success": false, "message": ...}``.
"""

from typing import Optional


class TastePaletteException(Exception):
    """
    Base exception class for the Taste Palette application.

    All custom exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message returned to the client.
        status_code: HTTP status code for the error.
        detail: Additional error details, logged but not returned.
    """

    status_code: int = 500
    default_message: str = "An error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        detail: Optional[str] = None
    ):
        """
        Initialize TastePaletteException.

        Args:
            message: Human-readable error message.
            detail: Additional error details.
        """
        self.message = message or self.default_message
        self.detail = detail or self.message
        super().__init__(self.message)


class ValidationError(TastePaletteException):
    """
    Exception raised for input validation failures.

    Used when:
    - Invalid input format or size
    - Missing required fields
    - Invalid or expired one-time tokens
    """

    status_code = 400
    default_message = "Validation error"


class ConflictError(TastePaletteException):
    """Raised when an account with the same email already exists."""

    status_code = 400
    default_message = "User already exists"


class AuthenticationError(TastePaletteException):
    """
    Exception raised for missing or invalid sessions.

    Used when:
    - No bearer token
    - Expired or revoked tokens
    - Session belongs to a deleted user
    """

    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password."""

    default_message = "Invalid email or password"


class EmailNotVerifiedError(TastePaletteException):
    status_code = 403
    default_message = "Please verify your email before logging in"


class QuotaExceededError(TastePaletteException):
    """Raised when the user's plan has no scans left."""

    status_code = 403
    default_message = "You have reached your scan limit. Please upgrade your plan."


class NotFoundError(TastePaletteException):
    """
    Exception raised when a resource is not found.

    Also used for resources owned by another user, so ownership is
    never disclosed.
    """

    status_code = 404
    default_message = "Resource not found"


class ModelResponseError(TastePaletteException):
    """
    The language model returned content that could not be used.

    The client only ever sees the generic message; the offending payload
    goes into ``detail`` for the logs.
    """

    status_code = 500
    default_message = "We couldn't read that menu right now. Please try again."


class PersistenceError(TastePaletteException):
    status_code = 500
    default_message = "A database error occurred. Please try again."
