"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
an in-memory account service with a controllable clock, a notifier that
records outbound mail, and helpers to create accounts in a given state.
"""

import pytest
from datetime import datetime, timezone, timedelta
from typing import Optional

from fastapi.testclient import TestClient

from api import app
from api.dependencies import get_account_service, reset_container
from modules.accounts.activity import InMemoryActivityLog
from modules.accounts.memory_store import InMemoryAccountStore
from modules.accounts.models import OutboundMessage, Role, SignUpRequest
from modules.accounts.service import AccountService
from modules.accounts.tokens import TokenIssuer
from shared.config import Settings, get_settings
from shared.database import reset_client_cache
from shared.models import AuthenticatedUser


# Test JWT secrets (only for testing)
TEST_SESSION_SECRET = "test-session-secret-for-testing-only"
TEST_REMEMBER_ME_SECRET = "test-remember-me-secret-for-testing-only"

START_TIME = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable clock shared by the service and token issuer."""

    def __init__(self, now: datetime = START_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class RecordingNotifier:
    """INotifier that keeps every message instead of sending it."""

    def __init__(self, fail: bool = False):
        self.sent: list[OutboundMessage] = []
        self.fail = fail

    async def send(self, to_address: str, subject: str, plain_text: str, html: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append(
            OutboundMessage(to_address=to_address, subject=subject, plain_text=plain_text, html=html)
        )

    def last_code(self) -> str:
        """The six-digit code from the most recent message."""
        return self.sent[-1].plain_text.rsplit(" ", 1)[-1]


def make_settings(**overrides) -> Settings:
    """Settings for tests: memory store, fast bcrypt, no .env file."""
    values = {
        "jwt_secret": TEST_SESSION_SECRET,
        "jwt_remember_me_secret": TEST_REMEMBER_ME_SECRET,
        "account_store_backend": "memory",
        "bcrypt_rounds": 4,
        "admin_signup_code": "705",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def admin_user(account_id: str = "admin-1", email: str = "admin@u.edu") -> AuthenticatedUser:
    return AuthenticatedUser(id=account_id, email=email, email_verified=True, role="admin")


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset the service container and cached clients before and after each test."""
    reset_container()
    reset_client_cache()
    get_settings.cache_clear()
    yield
    reset_container()
    reset_client_cache()
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def activity() -> InMemoryActivityLog:
    return InMemoryActivityLog()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def tokens(clock: FakeClock) -> TokenIssuer:
    return TokenIssuer(TEST_SESSION_SECRET, TEST_REMEMBER_ME_SECRET, clock=clock)


@pytest.fixture
def service(store, activity, notifier, tokens, settings, clock) -> AccountService:
    """Account service wired to in-memory collaborators."""
    return AccountService(
        store=store,
        activity=activity,
        notifier=notifier,
        tokens=tokens,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def settings_factory():
    """Build test settings with overrides."""
    return make_settings


@pytest.fixture
def service_factory(store, activity, notifier, tokens, clock):
    """Build a service sharing the fixtures' collaborators, with settings overrides."""

    def _build(**overrides) -> AccountService:
        return AccountService(
            store=store,
            activity=activity,
            notifier=notifier,
            tokens=tokens,
            settings=make_settings(**overrides),
            clock=clock,
        )

    return _build


@pytest.fixture
def register(service, notifier):
    """
    Create an account through the service.

    Returns the stored account id. ``verified=True`` also confirms the
    emailed code.
    """

    async def _register(
        email: str = "a@u.edu",
        password: str = "Abcdef1!",
        name: str = "Test User",
        role: Optional[Role] = None,
        admin_code: Optional[str] = None,
        verified: bool = True,
    ) -> str:
        result = await service.sign_up(
            SignUpRequest(name=name, email=email, password=password, role=role, admin_code=admin_code)
        )
        if verified:
            await service.verify_email(email, notifier.last_code())
        return result.user.id

    return _register


@pytest.fixture
def admin() -> AuthenticatedUser:
    return admin_user()


@pytest.fixture
def client(service, settings) -> TestClient:
    """TestClient with the in-memory service and test settings injected."""
    app.dependency_overrides[get_account_service] = lambda: service
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def signed_in(client, notifier):
    """
    Sign up, verify and sign in over HTTP.

    Returns ``(account_id, headers)`` with a bearer header for the new account.
    """

    def _signed_in(
        email: str = "a@u.edu",
        password: str = "Abcdef1!",
        admin_code: Optional[str] = None,
    ) -> tuple[str, dict[str, str]]:
        body = {"name": "Test User", "email": email, "password": password}
        if admin_code is not None:
            body["admin_code"] = admin_code
        response = client.post("/api/auth/signup", json=body)
        assert response.status_code == 201, response.text
        client.post("/api/auth/verify-email", json={"email": email, "code": notifier.last_code()})
        response = client.post("/api/auth/signin", json={"email": email, "password": password})
        data = response.json()
        return data["user"]["id"], {"Authorization": f"Bearer {data['token']}"}

    return _signed_in
