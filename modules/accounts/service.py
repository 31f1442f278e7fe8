"""
Account lifecycle service.

Owns signup, email verification, sign-in with lockout, password reset,
onboarding, reviewer approval and admin moderation. Persistence, mail and
tokens are injected collaborators (see interfaces.py).

Sign-in states: unverified -> active after verification. "locked" (too
many failures, self-clearing) and "blocked"/"suspended" (admin toggles) are
independent flags; any of them stops token issuance.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from shared.config import Settings
from shared.exceptions import ExternalServiceError
from shared.models import AuthenticatedUser

from .codes import check_code, code_expiry, generate_code
from .exceptions import (
    AccountBlockedError,
    AccountLockedError,
    AccountNotFoundError,
    AccountSuspendedError,
    AccountValidationError,
    AdminCodeError,
    AlreadyInStateError,
    AlreadyVerifiedError,
    DuplicateEmailError,
    InsufficientPermissionsError,
    InvalidCodeError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingFieldsError,
    NoPendingRequestError,
    ProtectedAccountError,
    StaleUpdateError,
    VerificationRequiredError,
    WrongRoleError,
)
from .interfaces import IAccountService, IAccountStore, IActivityLog, INotifier, ITokenIssuer
from .models import (
    ONBOARDING_FIELDS,
    Account,
    AccountPublic,
    AccountUpdate,
    ActivityAction,
    ActivityEntry,
    AuthResult,
    MessageResponse,
    ModerationRecord,
    OutboundMessage,
    ProfileUpdate,
    RequestContext,
    ReviewerApproval,
    ReviewerApprovalStatus,
    Role,
    SignInRequest,
    SignUpRequest,
    SignUpResult,
)
from .notifications import password_reset_message, status_change_message, verification_message
from .passwords import hash_password, validate_password, verify_password

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)

MIN_NAME_LENGTH = 2
RESET_REQUESTED_MESSAGE = "If an account exists for that email, a reset code has been sent"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountService(IAccountService):
    """
    Account lifecycle manager.

    Every operation is a short sequence of store calls. Counters and
    lock timestamps only change through single atomic store writes, and
    one-time codes are consumed with a where guard so each is used once.
    Notifier failures are logged and never undo a state change.
    """

    def __init__(
        self,
        store: IAccountStore,
        activity: IActivityLog,
        notifier: INotifier,
        tokens: ITokenIssuer,
        settings: Settings,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._activity = activity
        self._notifier = notifier
        self._tokens = tokens
        self._settings = settings
        self._clock = clock or _utcnow

    # =========================================================================
    # Signup & verification
    # =========================================================================

    async def sign_up(
        self, request: SignUpRequest, context: Optional[RequestContext] = None
    ) -> SignUpResult:
        """
        Create an unverified account and send its verification code.

        Raises:
            AccountValidationError: A field breaks its rule
            AdminCodeError: Admin role requested with the wrong admin code
            DuplicateEmailError: Email already registered
        """
        name = self._validate_name(request.name)
        email = self._validate_email(request.email)
        validate_password(request.password, self._settings.password_policy)
        role = self._resolve_role(request.role, request.admin_code)

        if self._store.find_by_email(email) is not None:
            raise DuplicateEmailError(email)

        now = self._clock()
        code = generate_code()
        account = Account(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            password_hash=hash_password(request.password, self._settings.bcrypt_rounds),
            role=role,
            created_at=now,
            pending_verification_code=code,
            pending_verification_expiry=code_expiry(now, self._settings.verification_code_minutes),
            reviewer_approval=ReviewerApproval() if role == Role.REVIEWER else None,
        )
        account = self._store.insert(account)
        logger.info(f"Account created: {account.id} ({account.role.value})")

        await self._notify(
            verification_message(
                account.email, account.name, code, self._settings.verification_code_minutes
            )
        )
        self._log(account.id, ActivityAction.SIGNUP, context)
        if role == Role.REVIEWER:
            self._log(account.id, ActivityAction.REVIEWER_REQUEST, context)

        return SignUpResult(
            message="Account created successfully. Please check your email to verify your account.",
            user=account.to_public(),
        )

    async def verify_email(
        self, email: str, code: str, context: Optional[RequestContext] = None
    ) -> AuthResult:
        """
        Consume the pending verification code and activate the account.

        Raises:
            AccountNotFoundError, AlreadyVerifiedError, NoPendingRequestError,
            InvalidCodeError, CodeExpiredError
        """
        account = self._require_by_email(email)
        if account.email_verified:
            raise AlreadyVerifiedError()

        check_code(
            account.pending_verification_code,
            account.pending_verification_expiry,
            code,
            self._clock(),
            purpose="verification",
        )

        try:
            account = self._store.atomic_update(
                account.id,
                AccountUpdate(
                    set={"email_verified": True},
                    unset=["pending_verification_code", "pending_verification_expiry"],
                    where={"pending_verification_code": account.pending_verification_code},
                ),
            )
        except StaleUpdateError:
            raise NoPendingRequestError("verification")
        logger.info(f"Email verified for account {account.id}")
        self._log(account.id, ActivityAction.EMAIL_VERIFIED, context)

        return AuthResult(
            message="Email verified successfully",
            token=self._tokens.sign(account.id),
            user=account.to_public(),
        )

    async def resend_verification(
        self, email: str, context: Optional[RequestContext] = None
    ) -> MessageResponse:
        """Replace any outstanding verification code with a fresh one."""
        account = self._require_by_email(email)
        if account.email_verified:
            raise AlreadyVerifiedError()

        minutes = self._settings.verification_code_minutes
        code = generate_code()
        account = self._store.atomic_update(
            account.id,
            AccountUpdate(
                set={
                    "pending_verification_code": code,
                    "pending_verification_expiry": code_expiry(self._clock(), minutes),
                }
            ),
        )
        await self._notify(
            verification_message(account.email, account.name, code, minutes, resend=True)
        )
        self._log(account.id, ActivityAction.VERIFICATION_RESENT, context)
        return MessageResponse(message="Verification email sent successfully")

    # =========================================================================
    # Sign-in
    # =========================================================================

    async def sign_in(
        self, request: SignInRequest, context: Optional[RequestContext] = None
    ) -> AuthResult:
        """
        Authenticate with email and password.

        Each check short-circuits the rest: unknown email, open lockout,
        block, suspension, password, then email verification.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            AccountLockedError: Lockout window still open
            AccountBlockedError / AccountSuspendedError: Admin action in force
            VerificationRequiredError: Password ok but email not verified
        """
        account = self._store.find_by_email(request.email.strip().lower())
        if account is None:
            raise InvalidCredentialsError()

        now = self._clock()
        if account.is_locked(now):
            raise AccountLockedError(account.locked_until)

        contact = self._settings.support_contact
        if account.blocked:
            raise AccountBlockedError(account.block.reason if account.block else None, contact)
        if account.suspended:
            raise AccountSuspendedError(
                account.suspension.reason if account.suspension else None, contact
            )

        if not verify_password(request.password, account.password_hash):
            self._record_login_failure(account, now)
            raise InvalidCredentialsError()

        account = self._store.atomic_update(
            account.id,
            AccountUpdate(
                set={"last_login_at": now},
                unset=["login_failure_count", "locked_until"],
            ),
        )

        if not account.email_verified and not account.social_logins:
            raise VerificationRequiredError(account.email)

        token = self._tokens.sign(account.id, long_lived=request.remember_me)
        self._log(account.id, ActivityAction.LOGIN, context)

        return AuthResult(
            message="Signed in successfully",
            token=token,
            user=account.to_public(),
        )

    def _record_login_failure(self, account: Account, now: datetime) -> Account:
        """
        Count a failed password check and lock the account at the threshold.

        A failure after an expired lock restarts the count at 1.
        """
        updated = self._store.record_login_failure(
            account.id,
            now,
            self._settings.max_login_attempts,
            now + timedelta(minutes=self._settings.lockout_minutes),
        )
        if updated.is_locked(now):
            logger.info(
                f"Account {account.id} locked until {updated.locked_until.isoformat()} "
                f"after {updated.login_failure_count} failed attempts"
            )
        return updated

    async def validate_token(self, token: str) -> AuthenticatedUser:
        """
        Resolve a bearer token to the current account.

        Raises:
            MissingTokenError, ExpiredTokenError, InvalidTokenError
        """
        claims = self._tokens.verify(token)
        account = self._store.find_by_id(claims.account_id)
        if account is None:
            raise InvalidTokenError("Account no longer exists")
        return AuthenticatedUser(
            id=account.id,
            email=account.email,
            email_verified=account.email_verified,
            role=account.role.value,
            last_sign_in=account.last_login_at,
            long_lived=claims.long_lived,
        )

    # =========================================================================
    # Password reset
    # =========================================================================

    async def request_password_reset(
        self, email: str, context: Optional[RequestContext] = None
    ) -> MessageResponse:
        """
        Issue a reset code.

        Unknown emails get the same response as known ones unless
        ``reset_reveals_unknown_email`` is set.
        """
        account = self._store.find_by_email(email.strip().lower())
        if account is None:
            if self._settings.reset_reveals_unknown_email:
                raise AccountNotFoundError(email)
            logger.info("Password reset requested for unknown email")
            return MessageResponse(message=RESET_REQUESTED_MESSAGE)

        minutes = self._settings.reset_code_minutes
        code = generate_code()
        account = self._store.atomic_update(
            account.id,
            AccountUpdate(
                set={
                    "pending_reset_code": code,
                    "pending_reset_expiry": code_expiry(self._clock(), minutes),
                }
            ),
        )
        await self._notify(password_reset_message(account.email, account.name, code, minutes))
        self._log(account.id, ActivityAction.PASSWORD_RESET_REQUESTED, context)
        return MessageResponse(message=RESET_REQUESTED_MESSAGE)

    async def reset_password(
        self,
        email: str,
        code: str,
        new_password: str,
        context: Optional[RequestContext] = None,
    ) -> MessageResponse:
        """
        Consume a reset code and store a new password hash.

        Raises:
            InvalidCodeError (or AccountNotFoundError when enumeration is
            allowed), NoPendingRequestError, CodeExpiredError,
            AccountValidationError
        """
        account = self._store.find_by_email(email.strip().lower())
        if account is None:
            if self._settings.reset_reveals_unknown_email:
                raise AccountNotFoundError(email)
            raise InvalidCodeError("reset")

        check_code(
            account.pending_reset_code,
            account.pending_reset_expiry,
            code,
            self._clock(),
            purpose="reset",
        )
        validate_password(new_password, self._settings.password_policy, field="new_password")

        try:
            self._store.atomic_update(
                account.id,
                AccountUpdate(
                    set={
                        "password_hash": hash_password(new_password, self._settings.bcrypt_rounds)
                    },
                    unset=["pending_reset_code", "pending_reset_expiry"],
                    where={"pending_reset_code": account.pending_reset_code},
                ),
            )
        except StaleUpdateError:
            raise NoPendingRequestError("reset")
        logger.info(f"Password reset for account {account.id}")
        self._log(account.id, ActivityAction.PASSWORD_RESET, context)
        return MessageResponse(message="Password reset successful")

    # =========================================================================
    # Self-service profile
    # =========================================================================

    async def get_account(self, account_id: str) -> AccountPublic:
        return self._require(account_id).to_public()

    async def update_profile(
        self,
        account_id: str,
        update: ProfileUpdate,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        """Apply the fields present in ``update``; absent fields are untouched."""
        account = self._require(account_id)
        changes = update.model_dump(exclude_unset=True)
        if not changes:
            return account.to_public()
        if "name" in changes:
            changes["name"] = self._validate_name(changes["name"])

        account = self._store.atomic_update(account.id, AccountUpdate(set=changes))
        self._log(
            account.id,
            ActivityAction.PROFILE_UPDATED,
            context,
            details=", ".join(sorted(changes)),
        )
        return account.to_public()

    async def complete_onboarding(
        self, account_id: str, context: Optional[RequestContext] = None
    ) -> AccountPublic:
        """
        Mark onboarding finished once every required profile field is set.

        Raises:
            WrongRoleError: Account is not a user
            MissingFieldsError: Lists each empty required field
        """
        account = self._require(account_id)
        if account.role != Role.USER:
            raise WrongRoleError(Role.USER.value, account.role.value)

        missing = account.missing_onboarding_fields()
        if missing:
            raise MissingFieldsError(missing)
        if account.onboarding_complete:
            return account.to_public()

        account = self._store.atomic_update(
            account.id,
            AccountUpdate(
                set={"onboarding_complete": True, "onboarding_completed_at": self._clock()}
            ),
        )
        self._log(account.id, ActivityAction.ONBOARDING_COMPLETED, context)
        return account.to_public()

    async def delete_account(
        self, account_id: str, password: str, context: Optional[RequestContext] = None
    ) -> MessageResponse:
        """
        Self-service deletion. Requires the current password.

        Raises:
            AccountValidationError: No password given
            InvalidCredentialsError: Password does not match
        """
        if not password:
            raise AccountValidationError(
                "Password is required to delete account",
                errors={"password": "required"},
            )
        account = self._require(account_id)
        if not verify_password(password, account.password_hash):
            raise InvalidCredentialsError("Invalid password")

        self._store.delete(account.id)
        logger.info(f"Account {account.id} deleted by its owner")
        self._log(account.id, ActivityAction.ACCOUNT_DELETED, context, details="self-service")
        return MessageResponse(message="Account deleted successfully")

    async def get_activity(
        self, actor: AuthenticatedUser, account_id: str
    ) -> list[ActivityEntry]:
        """Activity for an account. Callers may read their own; admins any."""
        if actor.id != account_id:
            self._require_admin(actor)
        self._require(account_id)
        return self._activity.list_for_account(account_id)

    # =========================================================================
    # Admin moderation
    # =========================================================================

    async def list_accounts(
        self, actor: AuthenticatedUser, email_query: Optional[str] = None
    ) -> list[AccountPublic]:
        self._require_admin(actor)
        return [account.to_public() for account in self._store.list_accounts(email_query)]

    async def block_account(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        reason: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        """
        Block an account. Blocked accounts cannot sign in.

        Raises:
            InsufficientPermissionsError, AccountNotFoundError,
            ProtectedAccountError, AlreadyInStateError
        """
        target = self._moderation_target(actor, account_id, "block")
        if target.blocked:
            raise AlreadyInStateError("User is already blocked", "blocked")

        record = ModerationRecord(reason=reason or None, actor_id=actor.id, timestamp=self._clock())
        target = self._store.atomic_update(
            target.id, AccountUpdate(set={"blocked": True, "block": record})
        )
        logger.info(f"Account {target.id} blocked by admin {actor.id}")
        self._log(
            target.id,
            ActivityAction.USER_BLOCKED,
            context,
            details=self._moderation_details("Blocked", actor, reason),
        )
        await self._notify(
            status_change_message(
                target.email,
                target.name,
                "Your account has been blocked",
                "An administrator has blocked your account. You will not be able to sign in.",
                reason=reason,
                contact=self._settings.support_contact,
            )
        )
        return target.to_public()

    async def unblock_account(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        target = self._moderation_target(actor, account_id, "unblock")
        if not target.blocked:
            raise AlreadyInStateError("User is not blocked", "unblocked")

        target = self._store.atomic_update(
            target.id, AccountUpdate(set={"blocked": False}, unset=["block"])
        )
        logger.info(f"Account {target.id} unblocked by admin {actor.id}")
        self._log(
            target.id,
            ActivityAction.USER_UNBLOCKED,
            context,
            details=self._moderation_details("Unblocked", actor),
        )
        await self._notify(
            status_change_message(
                target.email,
                target.name,
                "Your account has been unblocked",
                "An administrator has unblocked your account. You can sign in again.",
            )
        )
        return target.to_public()

    async def suspend_account(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        reason: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        target = self._moderation_target(actor, account_id, "suspend")
        if target.suspended:
            raise AlreadyInStateError("User is already suspended", "suspended")

        record = ModerationRecord(reason=reason or None, actor_id=actor.id, timestamp=self._clock())
        target = self._store.atomic_update(
            target.id, AccountUpdate(set={"suspended": True, "suspension": record})
        )
        logger.info(f"Account {target.id} suspended by admin {actor.id}")
        self._log(
            target.id,
            ActivityAction.USER_SUSPENDED,
            context,
            details=self._moderation_details("Suspended", actor, reason),
        )
        await self._notify(
            status_change_message(
                target.email,
                target.name,
                "Your account has been suspended",
                "An administrator has suspended your account.",
                reason=reason,
                contact=self._settings.support_contact,
            )
        )
        return target.to_public()

    async def unsuspend_account(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        target = self._moderation_target(actor, account_id, "unsuspend")
        if not target.suspended:
            raise AlreadyInStateError("User is not suspended", "unsuspended")

        target = self._store.atomic_update(
            target.id, AccountUpdate(set={"suspended": False}, unset=["suspension"])
        )
        logger.info(f"Account {target.id} unsuspended by admin {actor.id}")
        self._log(
            target.id,
            ActivityAction.USER_UNSUSPENDED,
            context,
            details=self._moderation_details("Unsuspended", actor),
        )
        await self._notify(
            status_change_message(
                target.email,
                target.name,
                "Your account suspension has been lifted",
                "An administrator has lifted the suspension on your account.",
            )
        )
        return target.to_public()

    async def admin_delete_account(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        context: Optional[RequestContext] = None,
    ) -> MessageResponse:
        """Delete any non-admin account. No password is involved on this path."""
        target = self._moderation_target(actor, account_id, "delete")
        self._store.delete(target.id)
        logger.info(f"Account {target.id} deleted by admin {actor.id}")
        self._log(
            target.id,
            ActivityAction.ACCOUNT_DELETED,
            context,
            details=self._moderation_details("Deleted", actor),
        )
        return MessageResponse(message="Account deleted successfully")

    async def reset_onboarding(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        """Clear every onboarding field and the completion flag. Idempotent."""
        self._require_admin(actor)
        target = self._require(account_id)
        target = self._store.atomic_update(
            target.id,
            AccountUpdate(
                set={"onboarding_complete": False},
                unset=[*ONBOARDING_FIELDS, "onboarding_completed_at"],
            ),
        )
        self._log(
            target.id,
            ActivityAction.ONBOARDING_RESET,
            context,
            details=self._moderation_details("Onboarding reset", actor),
        )
        return target.to_public()

    # =========================================================================
    # Reviewer approval
    # =========================================================================

    async def approve_reviewer(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        target = self._pending_reviewer(actor, account_id)
        approval = ReviewerApproval(
            status=ReviewerApprovalStatus.APPROVED,
            actor_id=actor.id,
            timestamp=self._clock(),
        )
        target = self._store.atomic_update(
            target.id, AccountUpdate(set={"reviewer_approval": approval})
        )
        self._log(
            target.id,
            ActivityAction.REVIEWER_APPROVED,
            context,
            details=self._moderation_details("Approved", actor),
        )
        await self._notify(
            status_change_message(
                target.email,
                target.name,
                "Your reviewer account has been approved",
                "An administrator has approved your reviewer account. You can now sign in as a reviewer.",
            )
        )
        return target.to_public()

    async def reject_reviewer(
        self,
        actor: AuthenticatedUser,
        account_id: str,
        reason: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> AccountPublic:
        target = self._pending_reviewer(actor, account_id)
        approval = ReviewerApproval(
            status=ReviewerApprovalStatus.REJECTED,
            actor_id=actor.id,
            timestamp=self._clock(),
            rejection_reason=reason or None,
        )
        target = self._store.atomic_update(
            target.id, AccountUpdate(set={"reviewer_approval": approval})
        )
        self._log(
            target.id,
            ActivityAction.REVIEWER_REJECTED,
            context,
            details=self._moderation_details("Rejected", actor, reason),
        )
        await self._notify(
            status_change_message(
                target.email,
                target.name,
                "Your reviewer application was not approved",
                "An administrator has reviewed your reviewer application and did not approve it.",
                reason=reason,
                contact=self._settings.support_contact,
            )
        )
        return target.to_public()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _validate_name(self, name: Optional[str]) -> str:
        cleaned = (name or "").strip()
        if len(cleaned) < MIN_NAME_LENGTH:
            raise AccountValidationError(
                f"Name must be at least {MIN_NAME_LENGTH} characters long",
                errors={"name": "too short"},
            )
        return cleaned

    def _validate_email(self, email: str) -> str:
        try:
            normalized = _email_adapter.validate_python((email or "").strip()).lower()
        except PydanticValidationError:
            raise AccountValidationError(
                "Please enter a valid email", errors={"email": "invalid format"}
            )
        domain = self._settings.allowed_email_domain
        if domain and not normalized.endswith(domain.lower()):
            raise AccountValidationError(
                f"Please use a valid {domain} email address",
                errors={"email": f"must end with {domain}"},
            )
        return normalized

    def _resolve_role(self, requested: Optional[Role], admin_code: Optional[str]) -> Role:
        expected = self._settings.admin_signup_code
        code_ok = bool(expected) and admin_code == expected
        if requested == Role.ADMIN:
            if not code_ok:
                raise AdminCodeError()
            return Role.ADMIN
        if requested is None:
            return Role.ADMIN if code_ok else Role.USER
        return requested

    def _require(self, account_id: str) -> Account:
        account = self._store.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def _require_by_email(self, email: str) -> Account:
        account = self._store.find_by_email((email or "").strip().lower())
        if account is None:
            raise AccountNotFoundError(email)
        return account

    @staticmethod
    def _require_admin(actor: AuthenticatedUser) -> None:
        if actor.role != Role.ADMIN.value:
            raise InsufficientPermissionsError(Role.ADMIN.value, actor.role)

    def _moderation_target(self, actor: AuthenticatedUser, account_id: str, action: str) -> Account:
        self._require_admin(actor)
        target = self._require(account_id)
        if target.role == Role.ADMIN:
            raise ProtectedAccountError(action)
        return target

    def _pending_reviewer(self, actor: AuthenticatedUser, account_id: str) -> Account:
        self._require_admin(actor)
        target = self._require(account_id)
        if target.role != Role.REVIEWER:
            raise WrongRoleError(Role.REVIEWER.value, target.role.value)
        approval = target.reviewer_approval or ReviewerApproval()
        if approval.status != ReviewerApprovalStatus.PENDING:
            raise AlreadyInStateError(
                f"Reviewer request already {approval.status.value}", approval.status.value
            )
        return target

    @staticmethod
    def _moderation_details(
        verb: str, actor: AuthenticatedUser, reason: Optional[str] = None
    ) -> str:
        details = f"{verb} by admin: {actor.email} ({actor.id})"
        if reason:
            details += f" - Reason: {reason}"
        return details

    def _log(
        self,
        account_id: str,
        action: ActivityAction,
        context: Optional[RequestContext],
        details: Optional[str] = None,
    ) -> None:
        """Append an activity entry. A failing log write does not fail the request."""
        context = context or RequestContext()
        entry = ActivityEntry(
            account_id=account_id,
            action=action,
            timestamp=self._clock(),
            details=details,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
        )
        try:
            self._activity.append(entry)
        except ExternalServiceError as e:
            logger.warning(f"Failed to record {action.value} for account {account_id}: {e.message}")

    async def _notify(self, message: OutboundMessage) -> None:
        """Send a message. Delivery errors are logged, never raised."""
        try:
            await self._notifier.send(
                message.to_address, message.subject, message.plain_text, message.html
            )
        except Exception as e:
            logger.warning(f"Failed to send '{message.subject}' to {message.to_address}: {e}")
