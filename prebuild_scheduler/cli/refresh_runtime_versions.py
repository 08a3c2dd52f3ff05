"""
Append newly published React Native versions to react-native-versions.json.
Use: prebuild-scheduler refresh-runtime-versions [--path PATH] [--lookback-days N]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .. import config
from ..core.errors import SchedulerError
from ..providers.npm import NpmRegistry
from ..runtime_versions import refresh_runtime_versions
from .common import setup_logging

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(
        prog="prebuild-scheduler refresh-runtime-versions",
        description="Check npm for new React Native releases and extend the runtime-version catalog.",
    )
    ap.add_argument("--path", default=None, help="react-native-versions.json path")
    ap.add_argument("--lookback-days", type=int, default=None)
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)
    setup_logging(args.verbose)

    npm = config.npm_settings()
    registry = NpmRegistry(npm["registry_url"], npm["downloads_url"], float(npm["timeout_s"]))
    try:
        refresh_runtime_versions(
            registry,
            args.path or config.runtime_versions_path(),
            package_name=config.runtime_package(),
            lookback_days=args.lookback_days if args.lookback_days is not None else config.runtime_lookback_days(),
        )
    except SchedulerError as e:
        logger.error("Error checking for new React Native versions: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
