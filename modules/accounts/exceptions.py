"""
Accounts module exceptions.

Every failure the account lifecycle can report has its own class and code,
because clients branch on them (e.g. offer "resend code" only on
VERIFICATION_REQUIRED or CODE_EXPIRED).
"""

from datetime import datetime
from typing import Optional

from shared.exceptions import (
    NotFoundError,
    ValidationError,
    ConflictError,
    AuthenticationError,
    AuthorizationError,
)


class AccountValidationError(ValidationError):
    """Raised when signup or profile fields break a field rule."""

    def __init__(self, message: str, errors: Optional[dict[str, str]] = None):
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"errors": errors or {}},
        )


class DuplicateEmailError(ConflictError):
    """Raised when signing up with an email that is already registered."""

    def __init__(self, email: str):
        super().__init__(
            "User with this email already exists",
            code="DUPLICATE_EMAIL",
            details={"email": email},
        )


class AccountNotFoundError(NotFoundError):
    """Raised when an account lookup by id or email finds nothing."""

    def __init__(self, identifier: str):
        super().__init__(
            "User not found",
            code="NOT_FOUND",
            details={"account": identifier},
        )


class AdminCodeError(AuthorizationError):
    """Raised when an admin signup is attempted with a wrong admin code."""

    def __init__(self):
        super().__init__("Invalid admin code", code="INVALID_ADMIN_CODE")


class InsufficientPermissionsError(AuthorizationError):
    """Raised when the caller lacks the role an operation requires."""

    def __init__(self, required_role: str, user_role: str):
        super().__init__(
            f"Insufficient permissions. Required: {required_role}, has: {user_role}",
            code="INSUFFICIENT_PERMISSIONS",
            details={"required_role": required_role, "user_role": user_role},
        )


class ProtectedAccountError(AuthorizationError):
    """Raised when an admin tries to moderate another admin account."""

    def __init__(self, action: str):
        super().__init__(
            f"Cannot {action} another admin",
            code="PROTECTED_ACCOUNT",
            details={"action": action},
        )


class InvalidCredentialsError(AuthenticationError):
    """
    Raised for a wrong password or an unknown email during sign-in.

    The two cases are deliberately indistinguishable.
    """

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class AccountLockedError(AuthenticationError):
    """Raised while a lockout window from repeated failures is open."""

    def __init__(self, locked_until: Optional[datetime] = None):
        super().__init__(
            "Account is temporarily locked due to too many failed attempts. "
            "Please try again later.",
            code="ACCOUNT_LOCKED",
            details={"locked_until": locked_until.isoformat() if locked_until else None},
        )


class AccountBlockedError(AuthorizationError):
    """Raised on sign-in to an account an admin has blocked."""

    def __init__(self, reason: Optional[str], contact: Optional[str] = None):
        message = "Your account has been blocked by an administrator"
        if reason:
            message += f": {reason}"
        if contact:
            message += f". To continue, contact {contact}"
        super().__init__(
            message,
            code="ACCOUNT_BLOCKED",
            details={"reason": reason},
        )


class AccountSuspendedError(AuthorizationError):
    """Raised on sign-in to an account an admin has suspended."""

    def __init__(self, reason: Optional[str], contact: Optional[str] = None):
        message = "Your account is currently suspended"
        if reason:
            message += f": {reason}"
        if contact:
            message += f". To continue, contact {contact}"
        super().__init__(
            message,
            code="ACCOUNT_SUSPENDED",
            details={"reason": reason},
        )


class VerificationRequiredError(AuthorizationError):
    """Raised on sign-in before the email address has been verified."""

    def __init__(self, email: str):
        super().__init__(
            "Please verify your email address before signing in",
            code="VERIFICATION_REQUIRED",
            details={"email": email, "requires_verification": True},
        )


class AlreadyVerifiedError(ConflictError):
    """Raised when verifying (or resending for) an already verified email."""

    def __init__(self):
        super().__init__("Email is already verified", code="ALREADY_VERIFIED")


class NoPendingRequestError(ValidationError):
    """Raised when there is no outstanding code to check against."""

    def __init__(self, purpose: str = "verification"):
        super().__init__(
            f"No {purpose} request found",
            code="NO_PENDING_REQUEST",
            details={"purpose": purpose},
        )


class InvalidCodeError(ValidationError):
    """Raised when a submitted one-time code does not match."""

    def __init__(self, purpose: str = "verification"):
        super().__init__(
            f"Invalid {purpose} code",
            code="INVALID_CODE",
            details={"purpose": purpose},
        )


class CodeExpiredError(ValidationError):
    """Raised when a one-time code is past its expiry."""

    def __init__(self, purpose: str = "verification"):
        super().__init__(
            f"The {purpose} code has expired",
            code="CODE_EXPIRED",
            details={"purpose": purpose},
        )


class MissingFieldsError(ValidationError):
    """Raised when onboarding is finalized with profile fields still empty."""

    def __init__(self, fields: list[str]):
        super().__init__(
            f"Missing required fields: {', '.join(fields)}",
            code="MISSING_FIELDS",
            details={"fields": fields},
        )


class WrongRoleError(ValidationError):
    """Raised when an operation only applies to a different role."""

    def __init__(self, expected_role: str, actual_role: str):
        super().__init__(
            f"Operation only applies to {expected_role} accounts",
            code="WRONG_ROLE",
            details={"expected_role": expected_role, "actual_role": actual_role},
        )


class AlreadyInStateError(ConflictError):
    """Raised when a toggle or approval would not change anything."""

    def __init__(self, message: str, state: str):
        super().__init__(message, code="ALREADY_IN_STATE", details={"state": state})


class InvalidTokenError(AuthenticationError):
    """Raised when a token is malformed, mis-signed or its account is gone."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when a token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class MissingTokenError(AuthenticationError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")


class StaleUpdateError(ConflictError):
    """Raised by a store when a guarded update finds the record has changed."""

    def __init__(self, account_id: str, fields: list[str]):
        super().__init__(
            "Account changed since it was read",
            code="STALE_UPDATE",
            details={"account": account_id, "fields": fields},
        )
