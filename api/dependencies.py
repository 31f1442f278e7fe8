"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together the accounts
module's collaborators: account store, activity log, notifier and token
issuer. The store backend is picked by ``account_store_backend``.

Tests either reset the container or replace individual collaborators
through the setters before the service is first built.
"""

from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.accounts.interfaces import (
        IAccountService,
        IAccountStore,
        IActivityLog,
        INotifier,
        ITokenIssuer,
    )


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached as singletons
    within the container. Use reset() to clear them for testing.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings
        self._account_store: "IAccountStore | None" = None
        self._activity_log: "IActivityLog | None" = None
        self._notifier: "INotifier | None" = None
        self._token_issuer: "ITokenIssuer | None" = None
        self._account_service: "IAccountService | None" = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def account_store(self) -> "IAccountStore":
        """Get the account store for the configured backend."""
        if self._account_store is None:
            if self.settings.account_store_backend == "memory":
                from modules.accounts.memory_store import InMemoryAccountStore
                self._account_store = InMemoryAccountStore()
            else:
                from modules.accounts.repository import SupabaseAccountStore
                from shared.database import get_supabase_client
                self._account_store = SupabaseAccountStore(get_supabase_client())
        return self._account_store

    @account_store.setter
    def account_store(self, store: "IAccountStore") -> None:
        self._account_store = store
        self._account_service = None

    @property
    def activity_log(self) -> "IActivityLog":
        """Get the activity log, stored alongside the accounts."""
        if self._activity_log is None:
            retention = self.settings.activity_retention
            if self.settings.account_store_backend == "memory":
                from modules.accounts.activity import InMemoryActivityLog
                self._activity_log = InMemoryActivityLog(retention)
            else:
                from modules.accounts.activity import SupabaseActivityLog
                from shared.database import get_supabase_client
                self._activity_log = SupabaseActivityLog(get_supabase_client(), retention)
        return self._activity_log

    @activity_log.setter
    def activity_log(self, log: "IActivityLog") -> None:
        self._activity_log = log
        self._account_service = None

    @property
    def notifier(self) -> "INotifier":
        """Get the notifier (SMTP when configured, otherwise logging)."""
        if self._notifier is None:
            from modules.accounts.notifications import build_notifier
            self._notifier = build_notifier(self.settings)
        return self._notifier

    @notifier.setter
    def notifier(self, notifier: "INotifier") -> None:
        self._notifier = notifier
        self._account_service = None

    @property
    def tokens(self) -> "ITokenIssuer":
        """Get the JWT issuer holding both key scopes."""
        if self._token_issuer is None:
            from modules.accounts.tokens import TokenIssuer
            self._token_issuer = TokenIssuer.from_settings(self.settings)
        return self._token_issuer

    @tokens.setter
    def tokens(self, tokens: "ITokenIssuer") -> None:
        self._token_issuer = tokens
        self._account_service = None

    @property
    def accounts(self) -> "IAccountService":
        """Get the account service instance."""
        if self._account_service is None:
            from modules.accounts.service import AccountService
            self._account_service = AccountService(
                store=self.account_store,
                activity=self.activity_log,
                notifier=self.notifier,
                tokens=self.tokens,
                settings=self.settings,
            )
        return self._account_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._account_store = None
        self._activity_log = None
        self._notifier = None
        self._token_issuer = None
        self._account_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_account_service() -> "IAccountService":
    """FastAPI dependency for the account service."""
    return get_container().accounts
