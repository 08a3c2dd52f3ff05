"""
Refresh the React Native version catalog from npm.

Appends stable versions newer than the last catalog entry and published within
the lookback window, in ascending semver order. Nightly-style versions
containing '1000' are ignored.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Union

from . import versions as semver
from .catalog import load_runtime_versions, save_runtime_versions
from .providers.base import RegistryProbe

logger = logging.getLogger(__name__)


def find_new_runtime_versions(
    registry: RegistryProbe,
    current: List[str],
    package_name: str = "react-native",
    lookback_days: int = 100,
    now: Optional[datetime] = None,
) -> List[str]:
    """Versions to append to current, ascending."""
    now = now or datetime.now(timezone.utc)
    since = (now - timedelta(days=lookback_days)).date().isoformat()
    stable = [v for v in current if semver.is_valid(v) and not semver.is_prerelease(v)]
    matcher = f">{semver.sort_versions(stable)[-1]}" if stable else "*"

    found = registry.find_matching_versions(package_name, matcher, published_after=since)
    known = set(current)
    new = [info.version for info in found if info.version not in known and "1000" not in info.version]
    return semver.sort_versions(new)


def refresh_runtime_versions(
    registry: RegistryProbe,
    path: Union[str, Path],
    package_name: str = "react-native",
    lookback_days: int = 100,
) -> List[str]:
    """Update the catalog file in place; returns the versions added."""
    current = load_runtime_versions(path)
    logger.info("Current React Native versions: %d versions", len(current))
    if current:
        logger.info("   Latest in list: %s", current[-1])

    added = find_new_runtime_versions(registry, current, package_name, lookback_days)
    if not added:
        logger.info("No new React Native versions found. The list is up to date!")
        return []

    logger.info("Found %d new React Native version(s): %s", len(added), ", ".join(added))
    save_runtime_versions(path, current + added)
    return added
