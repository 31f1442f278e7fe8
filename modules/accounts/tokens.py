"""
Token issuance with two independent key scopes.

Session tokens (default 7 days) and remember-me tokens (longer) are signed
with different secrets and carry their scope as a claim. A token is only
accepted when it verifies under the key of the scope it claims, so a leaked
remember-me key cannot mint or validate session tokens and vice versa.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

import jwt  # PyJWT
from pydantic import BaseModel, Field

from shared.config import Settings

from .exceptions import ExpiredTokenError, InvalidTokenError, MissingTokenError


class TokenScope(str, Enum):
    SESSION = "session"
    REMEMBER_ME = "remember_me"


class TokenClaims(BaseModel):
    """Decoded token payload."""

    sub: str = Field(..., description="Account ID")
    scope: TokenScope
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")

    model_config = {"frozen": True}

    @property
    def account_id(self) -> str:
        return self.sub

    @property
    def long_lived(self) -> bool:
        return self.scope == TokenScope.REMEMBER_ME


class TokenIssuer:
    """Signs and verifies account tokens with one key per scope."""

    def __init__(
        self,
        session_secret: str,
        remember_me_secret: str,
        session_lifetime: timedelta = timedelta(days=7),
        remember_me_lifetime: timedelta = timedelta(days=30),
        algorithm: str = "HS256",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if session_secret == remember_me_secret:
            raise ValueError("session and remember-me tokens must use different secrets")
        self._keys = {
            TokenScope.SESSION: (session_secret, session_lifetime),
            TokenScope.REMEMBER_ME: (remember_me_secret, remember_me_lifetime),
        }
        self._algorithm = algorithm
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        if not settings.jwt_secret or not settings.jwt_remember_me_secret:
            raise RuntimeError(
                "JWT configuration missing. "
                "Set JWT_SECRET and JWT_REMEMBER_ME_SECRET environment variables."
            )
        return cls(
            session_secret=settings.jwt_secret,
            remember_me_secret=settings.jwt_remember_me_secret,
            session_lifetime=timedelta(days=settings.jwt_expires_days),
            remember_me_lifetime=timedelta(days=settings.jwt_remember_me_expires_days),
            algorithm=settings.jwt_algorithm,
        )

    def sign(self, account_id: str, long_lived: bool = False) -> str:
        """Issue a token for an account."""
        scope = TokenScope.REMEMBER_ME if long_lived else TokenScope.SESSION
        secret, lifetime = self._keys[scope]
        now = self._clock()
        payload = {
            "sub": account_id,
            "scope": scope.value,
            "iat": int(now.timestamp()),
            "exp": int((now + lifetime).timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify a token and return its claims.

        Raises:
            MissingTokenError: Empty token
            ExpiredTokenError: Signature valid but token expired
            InvalidTokenError: Malformed, unknown scope or wrong key
        """
        if not token:
            raise MissingTokenError()

        try:
            unverified = jwt.decode(token, options={"verify_signature": False})
            scope = TokenScope(unverified.get("scope"))
        except (jwt.InvalidTokenError, ValueError) as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        secret, _ = self._keys[scope]
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"], "verify_exp": False},
            )
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        # Expiry is judged by the issuer's clock, the same one that set it
        if payload["exp"] <= int(self._clock().timestamp()):
            raise ExpiredTokenError()

        return TokenClaims(**payload)
