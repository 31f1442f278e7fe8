"""
Accounts module.

Owns the account lifecycle: signup, email verification, sign-in with
lockout, password reset, onboarding, reviewer approval and admin moderation.

Public API:
- IAccountService: Interface for account operations
- AccountService: The implementation, built from a store, activity log,
  notifier and token issuer
- Account / AccountPublic: Stored record and client-safe payload
- Account exceptions: AccountLockedError, InvalidCredentialsError, etc.
"""

from .interfaces import (
    IAccountService,
    IAccountStore,
    IActivityLog,
    INotifier,
    ITokenIssuer,
)
from .models import (
    Account,
    AccountPublic,
    AccountUpdate,
    ActivityAction,
    ActivityEntry,
    AuthResult,
    RequestContext,
    Role,
    SignInRequest,
    SignUpRequest,
)
from .exceptions import (
    AccountBlockedError,
    AccountLockedError,
    AccountNotFoundError,
    AccountSuspendedError,
    AccountValidationError,
    InvalidCredentialsError,
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
    VerificationRequiredError,
)
from .service import AccountService

__all__ = [
    # Interfaces
    "IAccountService",
    "IAccountStore",
    "IActivityLog",
    "INotifier",
    "ITokenIssuer",
    # Service
    "AccountService",
    # Models
    "Account",
    "AccountPublic",
    "AccountUpdate",
    "ActivityAction",
    "ActivityEntry",
    "AuthResult",
    "RequestContext",
    "Role",
    "SignInRequest",
    "SignUpRequest",
    # Exceptions
    "AccountBlockedError",
    "AccountLockedError",
    "AccountNotFoundError",
    "AccountSuspendedError",
    "AccountValidationError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "MissingTokenError",
    "VerificationRequiredError",
]
