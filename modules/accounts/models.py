"""
Accounts module data models.

``Account`` is the persisted identity record. Everything the service returns
to callers goes through ``AccountPublic``, which never carries the password
hash or any pending one-time code.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


class Role(str, Enum):
    """Account roles. Fixed at signup, never self-escalated."""

    USER = "user"
    REVIEWER = "reviewer"
    ADMIN = "admin"


class ReviewerApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ActivityAction(str, Enum):
    """Actions recorded in the per-account activity log."""

    SIGNUP = "signup"
    EMAIL_VERIFIED = "email_verified"
    VERIFICATION_RESENT = "verification_resent"
    LOGIN = "login"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET = "password_reset"
    PROFILE_UPDATED = "profile_updated"
    ONBOARDING_COMPLETED = "onboarding_completed"
    ONBOARDING_RESET = "onboarding_reset"
    ACCOUNT_DELETED = "account_deleted"
    USER_BLOCKED = "user_blocked"
    USER_UNBLOCKED = "user_unblocked"
    USER_SUSPENDED = "user_suspended"
    USER_UNSUSPENDED = "user_unsuspended"
    REVIEWER_REQUEST = "reviewer_request"
    REVIEWER_APPROVED = "reviewer_approved"
    REVIEWER_REJECTED = "reviewer_rejected"


# Profile fields that must all be present before a user can finish onboarding.
ONBOARDING_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "birth_date",
    "country",
    "region",
    "gender",
    "phone",
)


# =============================================================================
# Account record
# =============================================================================


class ModerationRecord(BaseModel):
    """Who blocked or suspended an account, when, and why."""

    reason: Optional[str] = None
    actor_id: str
    timestamp: datetime


class ReviewerApproval(BaseModel):
    """Approval state of a reviewer account."""

    status: ReviewerApprovalStatus = ReviewerApprovalStatus.PENDING
    actor_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    rejection_reason: Optional[str] = None


class SocialLogin(BaseModel):
    """A social identity linked to the account."""

    provider: str
    social_id: str
    social_email: Optional[str] = None


class Account(BaseModel):
    """
    The persisted account record.

    Invariants checked on every construction (and therefore on every store
    write, since stores rebuild the model after applying an update):
    - a pending verification code implies the email is not yet verified
    - only reviewer accounts carry a reviewer approval
    - a blocked/suspended flag always comes with its moderation record
    """

    id: str
    name: str
    email: EmailStr
    password_hash: str
    role: Role = Role.USER
    created_at: datetime

    # Email verification
    email_verified: bool = False
    pending_verification_code: Optional[str] = None
    pending_verification_expiry: Optional[datetime] = None

    # Password reset
    pending_reset_code: Optional[str] = None
    pending_reset_expiry: Optional[datetime] = None

    # Lockout
    login_failure_count: int = Field(default=0, ge=0)
    locked_until: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    # Moderation
    blocked: bool = False
    block: Optional[ModerationRecord] = None
    suspended: bool = False
    suspension: Optional[ModerationRecord] = None

    # Profile / onboarding
    avatar_url: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    birth_date: Optional[date] = None
    country: Optional[str] = None
    region: Optional[str] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    onboarding_complete: bool = False
    onboarding_completed_at: Optional[datetime] = None

    reviewer_approval: Optional[ReviewerApproval] = None
    social_logins: list[SocialLogin] = Field(default_factory=list)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.lower()

    @model_validator(mode="after")
    def _check_invariants(self) -> "Account":
        if self.pending_verification_code is not None and self.email_verified:
            raise ValueError("a verified account cannot hold a pending verification code")
        if self.reviewer_approval is not None and self.role != Role.REVIEWER:
            raise ValueError("reviewer approval is only valid for reviewer accounts")
        if self.blocked and self.block is None:
            raise ValueError("blocked accounts need a moderation record")
        if self.suspended and self.suspension is None:
            raise ValueError("suspended accounts need a moderation record")
        return self

    def is_locked(self, now: datetime) -> bool:
        """True while a lockout window is still open."""
        return self.locked_until is not None and self.locked_until > now

    def missing_onboarding_fields(self) -> list[str]:
        missing = []
        for name in ONBOARDING_FIELDS:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing

    def to_public(self) -> "AccountPublic":
        return AccountPublic.model_validate(self.model_dump())


class AccountPublic(BaseModel):
    """Account payload safe to hand back to clients."""

    model_config = {"extra": "ignore"}

    id: str
    name: str
    email: EmailStr
    role: Role
    email_verified: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None

    blocked: bool = False
    block: Optional[ModerationRecord] = None
    suspended: bool = False
    suspension: Optional[ModerationRecord] = None

    avatar_url: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    birth_date: Optional[date] = None
    country: Optional[str] = None
    region: Optional[str] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    onboarding_complete: bool = False
    onboarding_completed_at: Optional[datetime] = None

    reviewer_approval: Optional[ReviewerApproval] = None


class AccountUpdate(BaseModel):
    """
    A partial update applied atomically to one account.

    - set: field -> new value
    - inc: field -> amount to add
    - unset: fields reset to their default (None, 0 or False)
    - where: field -> value the stored record must still hold; otherwise
      nothing is written and the store raises StaleUpdateError
    """

    set: dict[str, Any] = Field(default_factory=dict)
    inc: dict[str, int] = Field(default_factory=dict)
    unset: list[str] = Field(default_factory=list)
    where: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_fields(self) -> "AccountUpdate":
        known = set(Account.model_fields)
        touched = list(self.set) + list(self.inc) + list(self.unset)
        unknown = [name for name in touched + list(self.where) if name not in known]
        if unknown:
            raise ValueError(f"unknown account fields: {', '.join(sorted(unknown))}")
        if "id" in touched:
            raise ValueError("account id is immutable")
        return self

    def is_empty(self) -> bool:
        return not (self.set or self.inc or self.unset)


# =============================================================================
# Activity log
# =============================================================================


class RequestContext(BaseModel):
    """Caller metadata captured at request time. Both fields are optional."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class ActivityEntry(BaseModel):
    """One append-only activity log entry."""

    account_id: str
    action: ActivityAction
    timestamp: datetime
    details: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


# =============================================================================
# Outbound messages
# =============================================================================


class OutboundMessage(BaseModel):
    """A message handed to the notifier."""

    model_config = {"frozen": True}

    to_address: str
    subject: str
    plain_text: str
    html: str


# =============================================================================
# Requests / responses
# =============================================================================


class SignUpRequest(BaseModel):
    """Signup payload. Field rules are enforced by the service."""

    name: str
    email: str
    password: str
    admin_code: Optional[str] = None
    role: Optional[Role] = None


class SignInRequest(BaseModel):
    email: str
    password: str
    remember_me: bool = False


class VerifyEmailRequest(BaseModel):
    email: str
    code: str


class EmailRequest(BaseModel):
    """Body for endpoints that only need an email (resend, forgot password)."""

    email: str


class ResetPasswordRequest(BaseModel):
    email: str
    code: str
    new_password: str


class DeleteAccountRequest(BaseModel):
    password: str


class ModerationRequest(BaseModel):
    reason: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Self-service profile changes. Only explicitly sent fields are applied."""

    name: Optional[str] = None
    avatar_url: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    birth_date: Optional[date] = None
    country: Optional[str] = None
    region: Optional[str] = None
    gender: Optional[str] = None
    phone: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class SignUpResult(BaseModel):
    message: str
    user: AccountPublic


class AuthResult(BaseModel):
    """Returned by verification and sign-in: a token plus the user payload."""

    message: str
    token: str
    user: AccountPublic


class AccountListResponse(BaseModel):
    accounts: list[AccountPublic]
    count: int


class ActivityListResponse(BaseModel):
    account_id: str
    activities: list[ActivityEntry]
