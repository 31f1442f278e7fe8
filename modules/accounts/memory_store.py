"""
In-memory account store.

Used by the test suite and for local development
(``ACCOUNT_STORE_BACKEND=memory``). A single lock makes every operation
atomic per process, which gives atomic_update the same guarantees the
Supabase function gives per row.
"""

import threading
from datetime import datetime
from typing import Any, Optional

from .exceptions import AccountNotFoundError, DuplicateEmailError, StaleUpdateError
from .models import Account, AccountUpdate


def _field_default(name: str) -> Any:
    return Account.model_fields[name].get_default(call_default_factory=True)


def apply_update(account: Account, update: AccountUpdate) -> Account:
    """
    Apply set/inc/unset to an account and re-validate the result.

    Re-validation means an update that would break an Account invariant
    fails instead of being stored. A ``where`` mismatch raises
    StaleUpdateError before anything changes.
    """
    stale = [name for name, value in update.where.items() if getattr(account, name) != value]
    if stale:
        raise StaleUpdateError(account.id, stale)

    data = account.model_dump()
    for name in update.unset:
        data[name] = _field_default(name)
    for name, amount in update.inc.items():
        data[name] = (data.get(name) or 0) + amount
    for name, value in update.set.items():
        data[name] = value
    return Account.model_validate(data)


def apply_login_failure(
    account: Account, now: datetime, max_attempts: int, lock_until: datetime
) -> Account:
    """
    Count one failed password check.

    A lapsed lock restarts the count at 1. Reaching ``max_attempts`` while no
    lock is open sets ``locked_until``; an open lock is never extended.
    """
    lapsed = account.locked_until is not None and account.locked_until <= now
    count = 1 if lapsed else account.login_failure_count + 1
    if account.is_locked(now):
        locked_until = account.locked_until
    elif count >= max_attempts:
        locked_until = lock_until
    else:
        locked_until = None
    return apply_update(
        account,
        AccountUpdate(set={"login_failure_count": count, "locked_until": locked_until}),
    )


class InMemoryAccountStore:
    """Dict-backed IAccountStore."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._accounts: dict[str, Account] = {}
        self._ids_by_email: dict[str, str] = {}

    def find_by_email(self, email: str) -> Optional[Account]:
        with self._lock:
            account_id = self._ids_by_email.get(email.strip().lower())
            return self._accounts.get(account_id) if account_id else None

    def find_by_id(self, account_id: str) -> Optional[Account]:
        with self._lock:
            return self._accounts.get(account_id)

    def insert(self, account: Account) -> Account:
        with self._lock:
            if account.email in self._ids_by_email:
                raise DuplicateEmailError(account.email)
            if account.id in self._accounts:
                raise ValueError(f"Account id already exists: {account.id}")
            self._accounts[account.id] = account
            self._ids_by_email[account.email] = account.id
            return account

    def atomic_update(self, account_id: str, update: AccountUpdate) -> Account:
        with self._lock:
            current = self._accounts.get(account_id)
            if current is None:
                raise AccountNotFoundError(account_id)
            updated = apply_update(current, update)
            if updated.email != current.email:
                if updated.email in self._ids_by_email:
                    raise DuplicateEmailError(updated.email)
                del self._ids_by_email[current.email]
                self._ids_by_email[updated.email] = account_id
            self._accounts[account_id] = updated
            return updated

    def record_login_failure(
        self, account_id: str, now: datetime, max_attempts: int, lock_until: datetime
    ) -> Account:
        with self._lock:
            current = self._accounts.get(account_id)
            if current is None:
                raise AccountNotFoundError(account_id)
            updated = apply_login_failure(current, now, max_attempts, lock_until)
            self._accounts[account_id] = updated
            return updated

    def delete(self, account_id: str) -> bool:
        with self._lock:
            account = self._accounts.pop(account_id, None)
            if account is None:
                return False
            self._ids_by_email.pop(account.email, None)
            return True

    def list_accounts(self, email_query: Optional[str] = None) -> list[Account]:
        with self._lock:
            accounts = sorted(self._accounts.values(), key=lambda a: a.created_at)
        if email_query:
            needle = email_query.lower()
            accounts = [a for a in accounts if needle in a.email]
        return accounts
