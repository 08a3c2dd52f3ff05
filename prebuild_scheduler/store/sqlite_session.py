"""
SQLite connection lifecycle: context manager with guaranteed close and busy timeout.
Use for all ledger access so a crashed run never leaves the file locked.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Union


def connect(db_path: Union[str, Path], busy_timeout_ms: int = 5000) -> sqlite3.Connection:
    """Open a connection with WAL journaling and a busy timeout. ':memory:' is passed through."""
    path = str(db_path) if str(db_path) == ":memory:" else str(Path(db_path).resolve())
    conn = sqlite3.connect(path)
    conn.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
    if path != ":memory:":
        conn.execute("PRAGMA journal_mode=WAL")
    return conn


@contextmanager
def sqlite_conn(db_path: Union[str, Path], busy_timeout_ms: int = 5000) -> Generator[sqlite3.Connection, None, None]:
    """Yield a SQLite connection that is always closed on exit."""
    conn = connect(db_path, busy_timeout_ms)
    try:
        yield conn
    finally:
        conn.close()
