"""Tests for the two-scope token issuer."""

import pytest
from datetime import datetime, timedelta, timezone

import jwt  # PyJWT

from modules.accounts.exceptions import (
    ExpiredTokenError,
    InvalidTokenError,
    MissingTokenError,
)
from modules.accounts.tokens import TokenIssuer, TokenScope
from shared.config import Settings

SESSION_SECRET = "session-secret"
REMEMBER_SECRET = "remember-secret"
NOW = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)


class TestTokenIssuer:
    @pytest.fixture
    def now(self):
        return {"value": NOW}

    @pytest.fixture
    def issuer(self, now):
        return TokenIssuer(SESSION_SECRET, REMEMBER_SECRET, clock=lambda: now["value"])

    def test_rejects_shared_secret(self):
        with pytest.raises(ValueError):
            TokenIssuer("same", "same")

    @pytest.mark.parametrize(
        "secrets",
        [
            {},
            {"jwt_secret": SESSION_SECRET},
            {"jwt_remember_me_secret": REMEMBER_SECRET},
        ],
    )
    def test_from_settings_requires_both_secrets(self, secrets, monkeypatch):
        monkeypatch.delenv("JWT_SECRET", raising=False)
        monkeypatch.delenv("JWT_REMEMBER_ME_SECRET", raising=False)
        settings = Settings(_env_file=None, **secrets)
        with pytest.raises(RuntimeError, match="JWT configuration missing"):
            TokenIssuer.from_settings(settings)

    def test_from_settings(self):
        settings = Settings(
            _env_file=None,
            jwt_secret=SESSION_SECRET,
            jwt_remember_me_secret=REMEMBER_SECRET,
        )
        token = TokenIssuer.from_settings(settings).sign("acct-1")
        claims = jwt.decode(token, SESSION_SECRET, algorithms=["HS256"])
        assert claims["sub"] == "acct-1"

    def test_session_token_round_trip(self, issuer):
        token = issuer.sign("acct-1")
        claims = issuer.verify(token)
        assert claims.account_id == "acct-1"
        assert claims.scope == TokenScope.SESSION
        assert claims.long_lived is False

    def test_session_lifetime_is_seven_days(self, issuer):
        claims = issuer.verify(issuer.sign("acct-1"))
        assert claims.exp - claims.iat == int(timedelta(days=7).total_seconds())

    def test_remember_me_token(self, issuer):
        token = issuer.sign("acct-1", long_lived=True)
        claims = issuer.verify(token)
        assert claims.scope == TokenScope.REMEMBER_ME
        assert claims.long_lived is True
        assert claims.exp - claims.iat == int(timedelta(days=30).total_seconds())

    def test_remember_me_token_signed_with_its_own_key(self, issuer):
        token = issuer.sign("acct-1", long_lived=True)
        jwt.decode(token, REMEMBER_SECRET, algorithms=["HS256"], options={"verify_exp": False})
        with pytest.raises(jwt.InvalidSignatureError):
            jwt.decode(token, SESSION_SECRET, algorithms=["HS256"], options={"verify_exp": False})

    def test_scope_claim_cannot_borrow_other_key(self, issuer):
        """A session-signed token claiming remember_me scope is rejected."""
        payload = {
            "sub": "acct-1",
            "scope": "remember_me",
            "iat": int(NOW.timestamp()),
            "exp": int((NOW + timedelta(days=30)).timestamp()),
        }
        forged = jwt.encode(payload, SESSION_SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            issuer.verify(forged)

    def test_expired_token(self, issuer, now):
        token = issuer.sign("acct-1")
        now["value"] = NOW + timedelta(days=7, seconds=1)
        with pytest.raises(ExpiredTokenError):
            issuer.verify(token)

    def test_remember_me_outlives_session(self, issuer, now):
        session = issuer.sign("acct-1")
        remembered = issuer.sign("acct-1", long_lived=True)
        now["value"] = NOW + timedelta(days=10)
        with pytest.raises(ExpiredTokenError):
            issuer.verify(session)
        assert issuer.verify(remembered).account_id == "acct-1"

    def test_missing_token(self, issuer):
        with pytest.raises(MissingTokenError):
            issuer.verify("")

    def test_malformed_token(self, issuer):
        with pytest.raises(InvalidTokenError):
            issuer.verify("not-a-valid-token")

    def test_unknown_scope(self, issuer):
        payload = {"sub": "acct-1", "scope": "admin", "iat": 0, "exp": 9999999999}
        token = jwt.encode(payload, SESSION_SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_wrong_secret(self, issuer):
        payload = {
            "sub": "acct-1",
            "scope": "session",
            "iat": int(NOW.timestamp()),
            "exp": int((NOW + timedelta(days=1)).timestamp()),
        }
        token = jwt.encode(payload, "wrong-secret", algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)
