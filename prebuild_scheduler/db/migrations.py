"""
Idempotent database migrations.

All schema changes use CREATE ... IF NOT EXISTS so they can be re-run
safely at any time.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)


def run_migrations(conn: sqlite3.Connection) -> None:
    """
    Apply all schema migrations idempotently.

    Safe to call on every startup; only creates/alters what's missing.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS builds (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            package_name TEXT NOT NULL,
            version TEXT NOT NULL,
            runtime_version TEXT NOT NULL,
            companion_version TEXT,
            platform TEXT NOT NULL CHECK (platform IN ('android', 'ios')),
            status TEXT NOT NULL DEFAULT 'scheduled'
                CHECK (status IN ('scheduled', 'completed', 'failed')),
            retry INTEGER NOT NULL DEFAULT 0,
            github_run_url TEXT,
            build_duration_seconds INTEGER,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    )
    # NULL companion is one key value, not a wildcard, so uniqueness goes through COALESCE.
    # char(0) cannot appear in a version, so NULL and '' stay distinct keys.
    conn.execute("DROP INDEX IF EXISTS idx_builds_natural_key;")
    conn.execute(
        """
        CREATE UNIQUE INDEX IF NOT EXISTS idx_builds_natural_key_v2 ON builds(
            package_name, version, runtime_version, platform, COALESCE(companion_version, char(0))
        );
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_builds_status_created ON builds(status, created_at);")

    conn.commit()
    logger.debug("Database migrations complete")
