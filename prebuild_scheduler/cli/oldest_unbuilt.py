"""
Print the oldest published version of a package that has no artifact yet.
Use: prebuild-scheduler oldest-unbuilt <package> <pattern> [<pattern> ...]
Exit: 0 found, 2 nothing left to build, 1 error.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .. import config
from ..core.errors import SchedulerError
from ..enumerator import find_oldest_unbuilt
from ..providers.maven import MavenArtifactStore
from ..providers.npm import NpmRegistry
from .common import setup_logging

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(
        prog="prebuild-scheduler oldest-unbuilt",
        description="Find the oldest matching version of a package not yet in the artifact store.",
    )
    ap.add_argument("package")
    ap.add_argument("patterns", nargs="+", help="Version patterns (wildcards or semver ranges)")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)
    setup_logging(args.verbose)

    npm = config.npm_settings()
    maven = config.maven_settings()
    registry = NpmRegistry(npm["registry_url"], npm["downloads_url"], float(npm["timeout_s"]))
    store = MavenArtifactStore(maven["api_url"], float(maven["timeout_s"]))
    try:
        found = find_oldest_unbuilt(registry, store, args.package, args.patterns)
    except SchedulerError as e:
        logger.error("%s", e)
        return 1
    if found is None:
        print(f"No unbuilt version of {args.package} matches {' '.join(args.patterns)}")
        return 2
    print(f"{args.package}@{found.version} (published {found.publish_date.date().isoformat()})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
