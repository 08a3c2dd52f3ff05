"""
Top-level CLI dispatcher: prebuild-scheduler <command> [args...].
All commands dispatch to package CLI modules.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

_COMMANDS = {
    "schedule": "Dispatch missing builds",
    "init-db": "Create the build ledger DB",
    "validate-catalog": "Validate libraries.json and react-native-versions.json",
    "refresh-runtime-versions": "Append new React Native releases to the runtime catalog",
    "oldest-unbuilt": "Oldest matching package version without an artifact",
}


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = argparse.ArgumentParser(
        prog="prebuild-scheduler",
        description="Prebuilt native artifact build scheduler",
    )
    subparsers = parser.add_subparsers(dest="command", help="command")
    for name, help_text in _COMMANDS.items():
        subparsers.add_parser(name, help=help_text, add_help=False)

    args, rest = parser.parse_known_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    cmd = args.command

    if cmd == "schedule":
        from prebuild_scheduler.cli import schedule as mod

        return mod.main(rest)
    if cmd == "init-db":
        from prebuild_scheduler.cli import init_db as mod

        return mod.main(rest)
    if cmd == "validate-catalog":
        from prebuild_scheduler.cli import validate_catalog as mod

        return mod.main(rest)
    if cmd == "refresh-runtime-versions":
        from prebuild_scheduler.cli import refresh_runtime_versions as mod

        return mod.main(rest)
    if cmd == "oldest-unbuilt":
        from prebuild_scheduler.cli import oldest_unbuilt as mod

        return mod.main(rest)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
