"""
Build ledger on an in-memory SQLite DB: natural-key dedup, retry semantics, NULL companion, fail-open.
"""

from __future__ import annotations

import sqlite3

import pytest

from prebuild_scheduler.core.errors import LedgerWriteError
from prebuild_scheduler.core.types import BuildKey, BuildRecord, BuildStatus
from prebuild_scheduler.db.ledger import BuildLedger
from prebuild_scheduler.db.migrations import run_migrations


@pytest.fixture
def conn():
    c = sqlite3.connect(":memory:")
    run_migrations(c)
    yield c
    c.close()


@pytest.fixture
def ledger(conn):
    return BuildLedger(conn)


KEY = BuildKey("react-native-svg", "15.1.0", "0.79.0", "android")


def _count(conn):
    return conn.execute("SELECT COUNT(*) FROM builds").fetchone()[0]


def test_migrations_are_idempotent(conn):
    run_migrations(conn)
    run_migrations(conn)
    assert _count(conn) == 0


def test_upsert_then_exists(ledger):
    assert not ledger.exists_scheduled(KEY)
    ledger.upsert(BuildRecord.scheduled(KEY))
    assert ledger.exists_scheduled(KEY)
    record = ledger.get(KEY)
    assert record is not None
    assert record.status is BuildStatus.SCHEDULED
    assert record.retry is False
    assert record.created_at and record.updated_at


def test_upsert_twice_keeps_one_row(conn, ledger):
    ledger.upsert(BuildRecord.scheduled(KEY))
    ledger.upsert(BuildRecord.scheduled(KEY))
    assert _count(conn) == 1


def test_null_companion_is_its_own_key(conn, ledger):
    with_companion = BuildKey("react-native-reanimated", "4.1.0", "0.81.0", "android", "0.5.1")
    without_companion = BuildKey("react-native-reanimated", "4.1.0", "0.81.0", "android")
    ledger.upsert(BuildRecord.scheduled(with_companion))
    assert ledger.exists_scheduled(with_companion)
    assert not ledger.exists_scheduled(without_companion)

    ledger.upsert(BuildRecord.scheduled(without_companion))
    ledger.upsert(BuildRecord.scheduled(without_companion))
    assert _count(conn) == 2


def test_platform_is_part_of_the_key(ledger):
    ledger.upsert(BuildRecord.scheduled(KEY))
    ios_key = BuildKey(KEY.package_name, KEY.version, KEY.runtime_version, "ios")
    assert not ledger.exists_scheduled(ios_key)


def test_retry_flag_unblocks_then_reschedule_resets(ledger):
    ledger.upsert(BuildRecord.scheduled(KEY))
    ledger.update_status(KEY, BuildStatus.FAILED, github_run_url="https://github.com/o/r/actions/runs/1")
    assert ledger.mark_retry(KEY) == 1
    assert not ledger.exists_scheduled(KEY)

    created_at = ledger.get(KEY).created_at
    ledger.upsert(BuildRecord.scheduled(KEY))
    record = ledger.get(KEY)
    assert ledger.exists_scheduled(KEY)
    assert record.status is BuildStatus.SCHEDULED
    assert record.retry is False
    assert record.github_run_url is None
    assert record.created_at == created_at


def test_completed_record_blocks_rescheduling(ledger):
    ledger.upsert(BuildRecord.scheduled(KEY))
    ledger.update_status(KEY, BuildStatus.COMPLETED, build_duration_seconds=420)
    assert ledger.exists_scheduled(KEY)
    assert ledger.get(KEY).build_duration_seconds == 420


def test_list_by_status(ledger):
    other = BuildKey("react-native-svg", "15.2.0", "0.79.0", "android")
    ledger.upsert(BuildRecord.scheduled(KEY))
    ledger.upsert(BuildRecord.scheduled(other))
    ledger.update_status(other, BuildStatus.COMPLETED)
    assert [r.version for r in ledger.list_by_status(BuildStatus.SCHEDULED)] == ["15.1.0"]
    assert ledger.list_by_status(BuildStatus.SCHEDULED, created_before="2000-01-01T00:00:00+00:00") == []


def test_update_status_unknown_key_changes_nothing(ledger):
    assert ledger.update_status(KEY, BuildStatus.COMPLETED) == 0


class TestFailOpen:
    def test_read_error_answers_not_scheduled(self):
        conn = sqlite3.connect(":memory:")  # no migrations: builds table is missing
        assert BuildLedger(conn).exists_scheduled(KEY) is False
        conn.close()

    def test_upsert_error_is_swallowed(self):
        conn = sqlite3.connect(":memory:")
        BuildLedger(conn).upsert(BuildRecord.scheduled(KEY))
        conn.close()

    def test_upsert_on_closed_connection_is_swallowed(self):
        conn = sqlite3.connect(":memory:")
        run_migrations(conn)
        conn.close()
        BuildLedger(conn).upsert(BuildRecord.scheduled(KEY))

    def test_update_status_error_raises(self):
        conn = sqlite3.connect(":memory:")
        with pytest.raises(LedgerWriteError):
            BuildLedger(conn).update_status(KEY, BuildStatus.FAILED)
        conn.close()


def test_null_and_empty_companion_are_distinct_keys(conn, ledger):
    null_key = BuildKey("lib", "1.0.0", "0.81.0", "android")
    empty_key = BuildKey("lib", "1.0.0", "0.81.0", "android", "")
    ledger.upsert(BuildRecord.scheduled(null_key))
    ledger.upsert(BuildRecord.scheduled(empty_key))
    assert ledger.exists_scheduled(null_key)
    assert ledger.exists_scheduled(empty_key)
    assert _count(conn) == 2


def test_natural_key_index_replaces_older_index(conn):
    names = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'")}
    assert "idx_builds_natural_key_v2" in names
    assert "idx_builds_natural_key" not in names
