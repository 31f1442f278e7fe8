"""
Append-only activity log, kept outside the account record.

Entries are keyed by account id. Both implementations apply the same
per-account retention: once an account has more than ``retention``
entries, the oldest are dropped. A retention of 0 keeps everything.
"""

import threading
from collections import defaultdict, deque
from typing import Any, Optional

from supabase import Client

from shared.repository import BaseRepository

from .models import ActivityEntry

ACTIVITY_TABLE = "account_activity"
TRIM_FUNCTION = "trim_account_activity"


class InMemoryActivityLog:
    """IActivityLog kept in process memory."""

    def __init__(self, retention: int = 0) -> None:
        self._retention = retention
        self._lock = threading.Lock()
        self._entries: dict[str, deque[ActivityEntry]] = defaultdict(
            lambda: deque(maxlen=retention or None)
        )

    def append(self, entry: ActivityEntry) -> None:
        with self._lock:
            self._entries[entry.account_id].append(entry)

    def list_for_account(self, account_id: str, limit: Optional[int] = None) -> list[ActivityEntry]:
        with self._lock:
            entries = list(self._entries.get(account_id, ()))
        if limit is not None:
            entries = entries[-limit:]
        return entries


class SupabaseActivityLog(BaseRepository[ActivityEntry]):
    """IActivityLog stored in the ``account_activity`` table."""

    def __init__(self, db: Client, retention: int = 0) -> None:
        super().__init__(db)
        self._retention = retention

    def append(self, entry: ActivityEntry) -> None:
        self._execute(
            self._db.table(ACTIVITY_TABLE).insert(entry.model_dump(mode="json")),
            "append_activity",
        )
        if self._retention:
            self._execute(
                self._db.rpc(
                    TRIM_FUNCTION,
                    {"p_account_id": entry.account_id, "p_keep": self._retention},
                ),
                "trim_activity",
            )

    def list_for_account(self, account_id: str, limit: Optional[int] = None) -> list[ActivityEntry]:
        query = (
            self._db.table(ACTIVITY_TABLE)
            .select("*")
            .eq("account_id", account_id)
            .order("timestamp", desc=True)
        )
        if limit is not None:
            query = query.limit(limit)
        result = self._execute(query, "list_activity")
        rows: list[dict[str, Any]] = list(result.data or [])
        # Newest-first from the query, oldest-first to callers
        return [ActivityEntry.model_validate(row) for row in reversed(rows)]
