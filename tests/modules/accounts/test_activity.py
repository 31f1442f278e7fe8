"""Tests for the activity log implementations."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from modules.accounts.activity import InMemoryActivityLog, SupabaseActivityLog
from modules.accounts.models import ActivityAction, ActivityEntry
from shared.exceptions import ExternalServiceError

NOW = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)


def entry(account_id: str = "acct-1", minutes: int = 0, action=ActivityAction.LOGIN) -> ActivityEntry:
    return ActivityEntry(
        account_id=account_id,
        action=action,
        timestamp=NOW + timedelta(minutes=minutes),
    )


class TestInMemoryActivityLog:
    def test_append_and_list_oldest_first(self):
        log = InMemoryActivityLog()
        log.append(entry(minutes=0, action=ActivityAction.SIGNUP))
        log.append(entry(minutes=1))
        log.append(entry("acct-2"))

        entries = log.list_for_account("acct-1")
        assert [e.action for e in entries] == [ActivityAction.SIGNUP, ActivityAction.LOGIN]

    def test_unknown_account_is_empty(self):
        assert InMemoryActivityLog().list_for_account("nope") == []

    def test_retention_drops_oldest(self):
        log = InMemoryActivityLog(retention=2)
        for minute in range(3):
            log.append(entry(minutes=minute))
        entries = log.list_for_account("acct-1")
        assert [e.timestamp for e in entries] == [
            NOW + timedelta(minutes=1),
            NOW + timedelta(minutes=2),
        ]

    def test_limit_returns_newest(self):
        log = InMemoryActivityLog()
        for minute in range(5):
            log.append(entry(minutes=minute))
        entries = log.list_for_account("acct-1", limit=2)
        assert entries[-1].timestamp == NOW + timedelta(minutes=4)
        assert len(entries) == 2


class TestSupabaseActivityLog:
    def test_append_inserts_and_trims(self):
        db = MagicMock()
        log = SupabaseActivityLog(db, retention=100)

        log.append(entry())

        db.table.assert_called_with("account_activity")
        inserted = db.table.return_value.insert.call_args[0][0]
        assert inserted["account_id"] == "acct-1"
        assert inserted["action"] == "login"
        db.rpc.assert_called_once_with(
            "trim_account_activity", {"p_account_id": "acct-1", "p_keep": 100}
        )

    def test_append_without_retention_skips_trim(self):
        db = MagicMock()
        SupabaseActivityLog(db, retention=0).append(entry())
        db.rpc.assert_not_called()

    def test_list_reverses_to_oldest_first(self):
        db = MagicMock()
        query = db.table.return_value.select.return_value.eq.return_value.order.return_value
        query.execute.return_value.data = [
            {"account_id": "acct-1", "action": "login", "timestamp": (NOW + timedelta(minutes=1)).isoformat()},
            {"account_id": "acct-1", "action": "signup", "timestamp": NOW.isoformat()},
        ]

        entries = SupabaseActivityLog(db).list_for_account("acct-1")

        assert [e.action for e in entries] == [ActivityAction.SIGNUP, ActivityAction.LOGIN]
        db.table.return_value.select.return_value.eq.return_value.order.assert_called_once_with(
            "timestamp", desc=True
        )

    def test_insert_failure_wrapped(self):
        db = MagicMock()
        db.table.return_value.insert.return_value.execute.side_effect = RuntimeError("down")
        with pytest.raises(ExternalServiceError):
            SupabaseActivityLog(db).append(entry())
