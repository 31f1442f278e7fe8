"""
Accounts module interfaces.

The service depends on these protocols, never on a concrete store,
notifier or token implementation. Tests plug in the in-memory store and a
recording notifier; production wires Supabase and SMTP.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from shared.models import AuthenticatedUser

from .models import (
    Account,
    AccountPublic,
    AccountUpdate,
    ActivityEntry,
    AuthResult,
    MessageResponse,
    ProfileUpdate,
    RequestContext,
    SignInRequest,
    SignUpRequest,
    SignUpResult,
)
from .tokens import TokenClaims


@runtime_checkable
class IAccountStore(Protocol):
    """
    Persistence for account records.

    Email uniqueness (case-insensitive) is enforced by the store.
    ``atomic_update`` must apply set/inc/unset as one per-record atomic
    operation, and ``record_login_failure`` must read and write the failure
    count and lock in one step, so concurrent failure counts are never lost.
    """

    def find_by_email(self, email: str) -> Optional[Account]:
        ...

    def find_by_id(self, account_id: str) -> Optional[Account]:
        ...

    def insert(self, account: Account) -> Account:
        """
        Persist a new account.

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        ...

    def atomic_update(self, account_id: str, update: AccountUpdate) -> Account:
        """
        Apply a partial update and return the updated account.

        When ``update.where`` is set the write only happens if the stored
        record still holds those values.

        Raises:
            AccountNotFoundError: If no account has this id
            StaleUpdateError: If a ``where`` value no longer matches
        """
        ...

    def record_login_failure(
        self, account_id: str, now: datetime, max_attempts: int, lock_until: datetime
    ) -> Account:
        """
        Count one failed password check as a single atomic write.

        A lock that has lapsed by ``now`` restarts the count at 1. When the
        count reaches ``max_attempts`` and no lock is open, ``locked_until``
        is set to ``lock_until``.

        Raises:
            AccountNotFoundError: If no account has this id
        """
        ...

    def delete(self, account_id: str) -> bool:
        """Delete an account. Returns False if it did not exist."""
        ...

    def list_accounts(self, email_query: Optional[str] = None) -> list[Account]:
        """List accounts, optionally filtered by a case-insensitive email substring."""
        ...


@runtime_checkable
class IActivityLog(Protocol):
    """Append-only activity log keyed by account id."""

    def append(self, entry: ActivityEntry) -> None:
        ...

    def list_for_account(self, account_id: str, limit: Optional[int] = None) -> list[ActivityEntry]:
        """Entries for an account, oldest first."""
        ...


@runtime_checkable
class INotifier(Protocol):
    """Fire-and-forget outbound messages (email in production)."""

    async def send(self, to_address: str, subject: str, plain_text: str, html: str) -> None:
        ...


@runtime_checkable
class ITokenIssuer(Protocol):
    """Token signing with separate short-lived and long-lived key scopes."""

    def sign(self, account_id: str, long_lived: bool = False) -> str:
        ...

    def verify(self, token: str) -> TokenClaims:
        ...


@runtime_checkable
class IAccountService(Protocol):
    """
    Interface for the account lifecycle.

    Routes and other modules should depend on this protocol, not on
    AccountService directly.
    """

    async def sign_up(
        self, request: SignUpRequest, context: Optional[RequestContext] = None
    ) -> SignUpResult:
        ...

    async def verify_email(
        self, email: str, code: str, context: Optional[RequestContext] = None
    ) -> AuthResult:
        ...

    async def resend_verification(
        self, email: str, context: Optional[RequestContext] = None
    ) -> MessageResponse:
        ...

    async def sign_in(
        self, request: SignInRequest, context: Optional[RequestContext] = None
    ) -> AuthResult:
        ...

    async def request_password_reset(
        self, email: str, context: Optional[RequestContext] = None
    ) -> MessageResponse:
        ...

    async def reset_password(
        self,
        email: str,
        code: str,
        new_password: str,
        context: Optional[RequestContext] = None,
    ) -> MessageResponse:
        ...

    async def validate_token(self, token: str) -> AuthenticatedUser:
        ...

    async def get_account(self, account_id: str) -> AccountPublic:
        ...

    async def update_profile(
        self,
        account_id: str,
        update: ProfileUpdate,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        ...

    async def complete_onboarding(
        self, account_id: str, context: Optional[RequestContext] = None
    ) -> AccountPublic:
        ...

    async def delete_account(
        self, account_id: str, password: str, context: Optional[RequestContext] = None
    ) -> MessageResponse:
        ...

    async def get_activity(
        self, actor: AuthenticatedUser, account_id: str
    ) -> list[ActivityEntry]:
        ...

    async def list_accounts(
        self, actor: AuthenticatedUser, email_query: Optional[str] = None
    ) -> list[AccountPublic]:
        ...

    async def block_account(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        reason: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        ...

    async def unblock_account(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        ...

    async def suspend_account(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        reason: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        ...

    async def unsuspend_account(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        ...

    async def admin_delete_account(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        context: Optional[RequestContext] = None,
    ) -> MessageResponse:
        ...

    async def reset_onboarding(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        ...

    async def approve_reviewer(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        ...

    async def reject_reviewer(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        reason: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        ...
