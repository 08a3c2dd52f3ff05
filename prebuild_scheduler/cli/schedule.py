"""
Run the build scheduler once.
Use: prebuild-scheduler schedule [--limit N] [--db PATH] [--libraries PATH] [--runtime-versions PATH]
Without --limit, SCHEDULER_LIMIT from the environment is used; unset means unlimited.
"""

from __future__ import annotations

import argparse
import logging
import sqlite3
import sys
from typing import List, Optional

import yaml

from ..config import parse_limit, scheduler_limit
from ..core.errors import ConfigError, SchedulerError
from ..scheduler import get_scheduler_context, run_scheduler
from .common import setup_logging

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(
        prog="prebuild-scheduler schedule",
        description="Dispatch builds for every library/version/platform combination that lacks an artifact.",
    )
    ap.add_argument("--limit", default=None, help="Maximum number of builds to dispatch (positive integer)")
    ap.add_argument("--db", default=None, help="Build ledger SQLite path (default: config db.path)")
    ap.add_argument("--libraries", default=None, help="libraries.json path")
    ap.add_argument("--runtime-versions", default=None, help="react-native-versions.json path")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)
    setup_logging(args.verbose)

    try:
        limit = parse_limit(args.limit) if args.limit is not None else scheduler_limit()
    except ConfigError as e:
        logger.error("%s", e)
        return 1

    try:
        with get_scheduler_context(
            limit=limit,
            db_path=args.db,
            libraries_path=args.libraries,
            runtime_versions_path=args.runtime_versions,
        ) as ctx:
            report = run_scheduler(ctx)
    except SchedulerError as e:
        logger.error("Scheduler failed: %s", e)
        return 1
    except (sqlite3.Error, OSError, yaml.YAMLError) as e:
        logger.error("Scheduler setup failed: %s", e)
        return 1

    for library, count in report.per_library.items():
        if count:
            logger.debug("%s: %d", library, count)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
