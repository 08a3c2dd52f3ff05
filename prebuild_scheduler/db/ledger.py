"""
Build ledger: one row per build obligation in the builds table.

The ledger is the only deduplication gate. A row with retry = 0 blocks
rescheduling of its natural key; a row with retry = 1 does not. Reads fail
open (an unreadable ledger answers 'not scheduled') and scheduling writes are
best-effort, because by the time they run the build has already been dispatched.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

from ..core.errors import LedgerReadError, LedgerWriteError
from ..core.types import BuildKey, BuildRecord, BuildStatus

logger = logging.getLogger(__name__)

_COLUMNS = (
    "package_name, version, runtime_version, companion_version, platform, status, retry, "
    "github_run_url, build_duration_seconds, created_at, updated_at"
)

_UNSET: Any = object()


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _key_predicate(key: BuildKey) -> Tuple[str, List[Any]]:
    """WHERE clause for a natural key. NULL companion needs IS NULL, not '= NULL'."""
    sql = "package_name = ? AND version = ? AND runtime_version = ? AND platform = ?"
    params: List[Any] = [key.package_name, key.version, key.runtime_version, key.platform]
    if key.companion_version is None:
        sql += " AND companion_version IS NULL"
    else:
        sql += " AND companion_version = ?"
        params.append(key.companion_version)
    return sql, params


def _row_to_record(row: Tuple[Any, ...]) -> BuildRecord:
    return BuildRecord(
        package_name=row[0],
        version=row[1],
        runtime_version=row[2],
        companion_version=row[3],
        platform=row[4],
        status=BuildStatus(row[5]),
        retry=bool(row[6]),
        github_run_url=row[7],
        build_duration_seconds=row[8],
        created_at=row[9],
        updated_at=row[10],
    )


class BuildLedger:
    """Read/write build records from SQLite."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # -- reads -----------------------------------------------------------

    def _select_scheduled(self, key: BuildKey) -> bool:
        where, params = _key_predicate(key)
        try:
            row = self._conn.execute(
                f"SELECT id FROM builds WHERE {where} AND retry = 0 LIMIT 1", params
            ).fetchone()
        except sqlite3.Error as exc:
            raise LedgerReadError(f"Error checking build status for {key.describe()}: {exc}") from exc
        return row is not None

    def exists_scheduled(self, key: BuildKey) -> bool:
        """
        True iff a retry = 0 record exists for key.
        On error, assume not scheduled so a needed build is never blocked.
        """
        try:
            return self._select_scheduled(key)
        except LedgerReadError as exc:
            logger.error("%s", exc)
            return False

    def get(self, key: BuildKey) -> Optional[BuildRecord]:
        where, params = _key_predicate(key)
        try:
            row = self._conn.execute(f"SELECT {_COLUMNS} FROM builds WHERE {where}", params).fetchone()
        except sqlite3.Error as exc:
            raise LedgerReadError(f"Error loading build {key.describe()}: {exc}") from exc
        return _row_to_record(row) if row is not None else None

    def list_by_status(self, status: BuildStatus, created_before: Optional[str] = None) -> List[BuildRecord]:
        """Records in status, oldest first; optionally only those created before an ISO timestamp."""
        sql = f"SELECT {_COLUMNS} FROM builds WHERE status = ?"
        params: List[Any] = [status.value]
        if created_before is not None:
            sql += " AND created_at < ?"
            params.append(created_before)
        sql += " ORDER BY created_at ASC, id ASC"
        try:
            rows = self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise LedgerReadError(f"Error listing {status.value} builds: {exc}") from exc
        return [_row_to_record(r) for r in rows]

    # -- writes ----------------------------------------------------------

    def _rollback(self) -> None:
        try:
            self._conn.rollback()
        except sqlite3.Error as exc:
            logger.debug("Rollback failed: %s", exc)

    def _update(self, key: BuildKey, assignments: List[str], values: List[Any]) -> int:
        where, params = _key_predicate(key)
        cur = self._conn.execute(
            f"UPDATE builds SET {', '.join(assignments)} WHERE {where}", values + params
        )
        return cur.rowcount

    def _write_scheduled(self, record: BuildRecord) -> None:
        key = record.key
        now = _utc_now_iso()
        try:
            updated = self._update(
                key,
                ["status = ?", "retry = 0", "github_run_url = ?", "build_duration_seconds = NULL", "updated_at = ?"],
                [BuildStatus.SCHEDULED.value, record.github_run_url, now],
            )
            if updated == 0:
                self._conn.execute(
                    f"""
                    INSERT INTO builds ({_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, 0, ?, NULL, ?, ?);
                    """,
                    (
                        key.package_name,
                        key.version,
                        key.runtime_version,
                        key.companion_version,
                        key.platform,
                        BuildStatus.SCHEDULED.value,
                        record.github_run_url,
                        now,
                        now,
                    ),
                )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._rollback()
            raise LedgerWriteError(f"Failed to create/update build record {key.describe()}: {exc}") from exc

    def upsert(self, record: BuildRecord) -> None:
        """
        Create or replace the record for record.key as scheduled with retry = 0.
        Failures are logged and ignored.
        """
        try:
            self._write_scheduled(record)
        except LedgerWriteError as exc:
            logger.warning("%s", exc)

    def update_status(
        self,
        key: BuildKey,
        status: BuildStatus,
        *,
        github_run_url: Optional[str] = _UNSET,
        build_duration_seconds: Optional[int] = _UNSET,
    ) -> int:
        """Set status (and optionally run URL / duration) for key. Returns rows changed; raises LedgerWriteError."""
        assignments = ["status = ?", "updated_at = ?"]
        values: List[Any] = [status.value, _utc_now_iso()]
        if github_run_url is not _UNSET:
            assignments.append("github_run_url = ?")
            values.append(github_run_url or None)
        if build_duration_seconds is not _UNSET:
            assignments.append("build_duration_seconds = ?")
            values.append(build_duration_seconds or None)
        try:
            changed = self._update(key, assignments, values)
            self._conn.commit()
        except sqlite3.Error as exc:
            self._rollback()
            raise LedgerWriteError(f"Failed to update build status for {key.describe()}: {exc}") from exc
        return changed

    def mark_retry(self, key: BuildKey, retry: bool = True) -> int:
        """Flag key for rebuild; a retry = 1 record no longer blocks scheduling."""
        try:
            changed = self._update(key, ["retry = ?", "updated_at = ?"], [1 if retry else 0, _utc_now_iso()])
            self._conn.commit()
        except sqlite3.Error as exc:
            self._rollback()
            raise LedgerWriteError(f"Failed to set retry for {key.describe()}: {exc}") from exc
        return changed
