"""
Account repository for Supabase.

Rows in the ``accounts`` table mirror the Account model one column per
field; moderation records, reviewer approval and social logins are jsonb.
Partial updates go through the ``account_atomic_update`` Postgres function
so set/inc/unset (and the optional where guard) happen in one statement
under the row lock. Failed sign-ins use ``account_record_login_failure``
for the same reason. Both are defined under migrations/.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic_core import to_jsonable_python

from shared.exceptions import ExternalServiceError
from shared.repository import BaseRepository

from .exceptions import AccountNotFoundError, DuplicateEmailError, StaleUpdateError
from .models import Account, AccountUpdate

ACCOUNTS_TABLE = "accounts"
ATOMIC_UPDATE_FUNCTION = "account_atomic_update"
LOGIN_FAILURE_FUNCTION = "account_record_login_failure"
UNIQUE_VIOLATION = "23505"


class SupabaseAccountStore(BaseRepository[Account]):
    """
    IAccountStore backed by Supabase.

    Note: This repository does NOT perform authorization checks.
    The service layer is responsible for that.
    """

    def find_by_email(self, email: str) -> Optional[Account]:
        result = self._execute(
            self._db.table(ACCOUNTS_TABLE).select("*").eq("email", email.strip().lower()),
            "find_by_email",
        )
        if not result.data:
            return None
        return self._map_to_account(result.data[0])

    def find_by_id(self, account_id: str) -> Optional[Account]:
        result = self._execute(
            self._db.table(ACCOUNTS_TABLE).select("*").eq("id", account_id),
            "find_by_id",
        )
        if not result.data:
            return None
        return self._map_to_account(result.data[0])

    def insert(self, account: Account) -> Account:
        row = account.model_dump(mode="json")
        try:
            result = self._execute(self._db.table(ACCOUNTS_TABLE).insert(row), "insert")
        except ExternalServiceError as e:
            cause_code = getattr(e.__cause__, "code", None)
            if cause_code == UNIQUE_VIOLATION or UNIQUE_VIOLATION in e.details.get("original_error", ""):
                raise DuplicateEmailError(account.email) from e
            raise
        return self._map_to_account(result.data[0])

    def atomic_update(self, account_id: str, update: AccountUpdate) -> Account:
        params = {
            "p_id": account_id,
            "p_set": to_jsonable_python(update.set),
            "p_inc": update.inc,
            "p_unset": update.unset,
            "p_where": to_jsonable_python(update.where),
        }
        result = self._execute(
            self._db.rpc(ATOMIC_UPDATE_FUNCTION, params),
            "atomic_update",
        )
        rows = self._rows(result.data)
        if not rows:
            if update.where and self.find_by_id(account_id) is not None:
                raise StaleUpdateError(account_id, sorted(update.where))
            raise AccountNotFoundError(account_id)
        return self._map_to_account(rows[0])

    def record_login_failure(
        self, account_id: str, now: datetime, max_attempts: int, lock_until: datetime
    ) -> Account:
        params = {
            "p_id": account_id,
            "p_now": now.isoformat(),
            "p_max_attempts": max_attempts,
            "p_lock_until": lock_until.isoformat(),
        }
        result = self._execute(
            self._db.rpc(LOGIN_FAILURE_FUNCTION, params),
            "record_login_failure",
        )
        rows = self._rows(result.data)
        if not rows:
            raise AccountNotFoundError(account_id)
        return self._map_to_account(rows[0])

    def delete(self, account_id: str) -> bool:
        result = self._execute(
            self._db.table(ACCOUNTS_TABLE).delete().eq("id", account_id),
            "delete",
        )
        return bool(result.data)

    def list_accounts(self, email_query: Optional[str] = None) -> list[Account]:
        query = self._db.table(ACCOUNTS_TABLE).select("*")
        if email_query:
            query = query.ilike("email", f"%{email_query.lower()}%")
        result = self._execute(query.order("created_at"), "list_accounts")
        return [self._map_to_account(row) for row in result.data or []]

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _rows(data: Any) -> list[dict[str, Any]]:
        """RPC results come back as a list of rows or a single row object."""
        if not data:
            return []
        if isinstance(data, dict):
            return [data]
        return list(data)

    @staticmethod
    def _map_to_account(row: dict[str, Any]) -> Account:
        data = {key: value for key, value in row.items() if key in Account.model_fields}
        if data.get("social_logins") is None:
            data["social_logins"] = []
        return Account.model_validate(data)
