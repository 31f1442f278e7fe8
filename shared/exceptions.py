"""
Base exception classes for the OnlySwap backend.

Each module should define its own exceptions that inherit from these bases.
The API layer maps each base to an HTTP status, so a module exception only
has to pick the right parent and a stable ``code``.
"""

from typing import Optional, Any


class OnlySwapError(Exception):
    """
    Base exception for all OnlySwap errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(OnlySwapError):
    """Resource not found."""

    pass


class ValidationError(OnlySwapError):
    """Input validation failed."""

    pass


class ConflictError(OnlySwapError):
    """Request conflicts with the current state of a resource."""

    pass


class AuthenticationError(OnlySwapError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(OnlySwapError):
    """Authorization failed (insufficient permissions)."""

    pass


class ExternalServiceError(OnlySwapError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
