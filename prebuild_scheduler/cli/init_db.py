"""
Initialize the build ledger: create the SQLite file and run migrations.
Use: prebuild-scheduler init-db [--db PATH]
"""

from __future__ import annotations

import argparse
import sqlite3
import sys
from pathlib import Path
from typing import List, Optional

from ..config import db_path as default_db_path
from ..db.migrations import run_migrations
from ..store.sqlite_session import sqlite_conn


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(
        prog="prebuild-scheduler init-db",
        description="Create the build ledger DB and run migrations.",
    )
    ap.add_argument("--db", default=None, help="DB path (default: config db.path)")
    args = ap.parse_args(argv)
    path = Path(args.db or default_db_path()).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with sqlite_conn(path) as conn:
            run_migrations(conn)
        print(f"Initialized DB: {path}")
        return 0
    except (sqlite3.Error, OSError) as e:
        print(f"init failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
