"""
Validate libraries.json and react-native-versions.json.
Use: prebuild-scheduler validate-catalog [--libraries PATH] [--runtime-versions PATH]
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from ..catalog import load_libraries, load_runtime_versions
from ..config import libraries_path, runtime_versions_path
from ..core.errors import CatalogError


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(
        prog="prebuild-scheduler validate-catalog",
        description="Check that the library and runtime-version catalogs parse.",
    )
    ap.add_argument("--libraries", default=None)
    ap.add_argument("--runtime-versions", default=None)
    args = ap.parse_args(argv)
    try:
        libraries = load_libraries(args.libraries or libraries_path())
        runtimes = load_runtime_versions(args.runtime_versions or runtime_versions_path())
    except CatalogError as e:
        print(f"catalog is invalid: {e}", file=sys.stderr)
        return 1
    print(f"catalog is valid: {len(libraries)} libraries, {len(runtimes)} React Native versions")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
