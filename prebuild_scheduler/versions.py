"""
Version pattern matching against npm-style semver.

A pattern is a string or a list of strings; a version matches when any entry
matches. Entries containing '*' are anchored wildcards that only accept valid
semver. Other entries are npm ranges ('>=0.81.0', '^2.1.0', '1.x || 2.x'); an
entry that is not a parseable range is compared by exact string equality.

Prerelease filtering is not done here; callers use filter_prereleases first.
"""

from __future__ import annotations

import functools
import re
from typing import Iterable, List, Optional, Sequence, Union

import nodesemver

Pattern = Union[str, Sequence[str]]

WILDCARD = "*"


def _as_list(pattern: Pattern) -> List[str]:
    if isinstance(pattern, str):
        return [pattern]
    return list(pattern)


def parse(version: str) -> Optional[nodesemver.SemVer]:
    """Strict semver parse; None when the string is not a version."""
    if not isinstance(version, str) or not version:
        return None
    try:
        return nodesemver.parse(version, False)
    except (ValueError, TypeError):
        return None


def is_valid(version: str) -> bool:
    return parse(version) is not None


def is_prerelease(version: str) -> bool:
    """True when version carries a prerelease tag ('1.0.0-rc.1'). Invalid versions are not prereleases."""
    parsed = parse(version)
    return parsed is not None and bool(parsed.prerelease)


@functools.lru_cache(maxsize=256)
def _wildcard_regex(entry: str) -> re.Pattern:
    return re.compile(entry.replace(".", r"\.").replace(WILDCARD, ".*"))


def _matches_entry(version: str, entry: str) -> bool:
    if WILDCARD in entry:
        return bool(_wildcard_regex(entry).fullmatch(version)) and is_valid(version)
    try:
        return bool(nodesemver.make_range(entry, False).test(version))
    except (ValueError, TypeError):
        return version == entry


def matches(version: str, pattern: Pattern) -> bool:
    """Return True if version matches any entry of pattern."""
    return any(_matches_entry(version, entry) for entry in _as_list(pattern))


def filter_prereleases(versions: Iterable[str]) -> List[str]:
    return [v for v in versions if not is_prerelease(v)]


def compare(a: str, b: str) -> int:
    return nodesemver.compare(a, b, False)


def sort_versions(versions: Iterable[str]) -> List[str]:
    """Ascending semver order."""
    return sorted(versions, key=functools.cmp_to_key(compare))
