"""
Library policy catalog (libraries.json) and runtime-version catalog (react-native-versions.json).

libraries.json maps npm package names to policies:

    {
      "react-native-svg": {
        "versionMatcher": ">=15.0.0",
        "runtimeVersionMatcher": ">=0.79.0",
        "publishedAfterDate": "2025-01-01",
        "android": [{"versionMatcher": "15.*"}],
        "ios": false
      }
    }

Per platform: absent or true inherits the library defaults, false disables the
platform, a list holds overrides whose unset fields inherit the defaults. An
empty list behaves like absent. The older key names reactNativeVersion,
withWorkletsVersion and downloadsThreshold are accepted as aliases.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .core.errors import CatalogError
from .versions import Pattern, is_valid

logger = logging.getLogger(__name__)

_FIELD_NAMES = {
    "versionMatcher": "version_matcher",
    "runtimeVersionMatcher": "runtime_version_matcher",
    "reactNativeVersion": "runtime_version_matcher",
    "publishedAfterDate": "published_after_date",
    "weeklyDownloadsThreshold": "weekly_downloads_threshold",
    "downloadsThreshold": "weekly_downloads_threshold",
    "companionVersionMatcher": "companion_version_matcher",
    "withWorkletsVersion": "companion_version_matcher",
}
_PLATFORM_KEYS = ("android", "ios")


@dataclass(frozen=True)
class PolicyOverride:
    """Platform-specific policy entry. None fields inherit the library default."""

    version_matcher: Optional[Pattern] = None
    runtime_version_matcher: Optional[Pattern] = None
    published_after_date: Optional[str] = None
    weekly_downloads_threshold: Optional[int] = None
    companion_version_matcher: Optional[Pattern] = None


@dataclass(frozen=True)
class PlatformPolicy:
    enabled: bool = True
    overrides: Tuple[PolicyOverride, ...] = ()

    def effective_overrides(self) -> Tuple[PolicyOverride, ...]:
        """Declared overrides, or a single empty override that inherits everything."""
        if not self.enabled:
            return ()
        return self.overrides or (PolicyOverride(),)


@dataclass(frozen=True)
class EffectivePolicy:
    """Fully resolved policy for one override of one platform."""

    version_matcher: Optional[Pattern]
    runtime_version_matcher: Optional[Pattern]
    published_after_date: Optional[str]
    weekly_downloads_threshold: int
    companion_version_matcher: Optional[Pattern]


@dataclass(frozen=True)
class LibraryPolicy:
    version_matcher: Optional[Pattern] = None
    runtime_version_matcher: Optional[Pattern] = None
    published_after_date: Optional[str] = None
    weekly_downloads_threshold: Optional[int] = None
    companion_version_matcher: Optional[Pattern] = None
    android: PlatformPolicy = field(default_factory=PlatformPolicy)
    ios: PlatformPolicy = field(default_factory=PlatformPolicy)

    def resolve(self, override: PolicyOverride, default_threshold: int) -> EffectivePolicy:
        """Override value when set, else the library default."""

        def pick(name: str) -> Any:
            value = getattr(override, name)
            return value if value is not None else getattr(self, name)

        threshold = pick("weekly_downloads_threshold")
        return EffectivePolicy(
            version_matcher=pick("version_matcher"),
            runtime_version_matcher=pick("runtime_version_matcher"),
            published_after_date=pick("published_after_date"),
            weekly_downloads_threshold=default_threshold if threshold is None else int(threshold),
            companion_version_matcher=pick("companion_version_matcher"),
        )


def _parse_pattern(where: str, value: Any) -> Optional[Pattern]:
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            raise CatalogError(f"{where}: empty version pattern")
        return value.strip()
    if isinstance(value, list):
        if not value:
            raise CatalogError(f"{where}: empty version pattern list")
        entries = []
        for item in value:
            if not isinstance(item, str) or not item.strip():
                raise CatalogError(f"{where}: pattern entries must be non-empty strings, got {item!r}")
            entries.append(item.strip())
        return tuple(entries)
    raise CatalogError(f"{where}: expected a string or a list of strings, got {type(value).__name__}")


def _parse_fields(where: str, raw: Mapping[str, Any], extra_keys: Tuple[str, ...] = ()) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        if key in extra_keys:
            continue
        name = _FIELD_NAMES.get(key)
        if name is None:
            raise CatalogError(f"{where}: unknown key {key!r}")
        if name in ("version_matcher", "runtime_version_matcher", "companion_version_matcher"):
            out[name] = _parse_pattern(f"{where}.{key}", value)
        elif name == "published_after_date":
            if value is not None and not isinstance(value, str):
                raise CatalogError(f"{where}.{key}: expected YYYY-MM-DD string")
            out[name] = value
        elif name == "weekly_downloads_threshold":
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise CatalogError(f"{where}.{key}: expected a non-negative integer")
            out[name] = value
    return out


def _parse_platform(where: str, raw: Any) -> PlatformPolicy:
    if raw is None or raw is True:
        return PlatformPolicy()
    if raw is False:
        return PlatformPolicy(enabled=False)
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list):
        raise CatalogError(f"{where}: expected false or a list of overrides")
    overrides = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise CatalogError(f"{where}[{i}]: override must be an object")
        overrides.append(PolicyOverride(**_parse_fields(f"{where}[{i}]", entry)))
    return PlatformPolicy(enabled=True, overrides=tuple(overrides))


def parse_library_policy(name: str, raw: Any) -> LibraryPolicy:
    if not isinstance(raw, dict):
        raise CatalogError(f"{name}: policy must be an object")
    fields = _parse_fields(name, raw, extra_keys=_PLATFORM_KEYS)
    return LibraryPolicy(
        android=_parse_platform(f"{name}.android", raw.get("android")),
        ios=_parse_platform(f"{name}.ios", raw.get("ios")),
        **fields,
    )


def parse_libraries(raw: Any) -> Dict[str, LibraryPolicy]:
    """Parse a libraries.json document; insertion order is preserved."""
    if not isinstance(raw, dict):
        raise CatalogError("libraries catalog must be a JSON object")
    return {name: parse_library_policy(name, policy) for name, policy in raw.items()}


def load_libraries(path: Union[str, Path]) -> Dict[str, LibraryPolicy]:
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as exc:
        raise CatalogError(f"Cannot read libraries catalog {path}: {exc}") from exc
    return parse_libraries(raw)


def load_runtime_versions(path: Union[str, Path]) -> List[str]:
    """Ordered list of supported runtime versions."""
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as exc:
        raise CatalogError(f"Cannot read runtime versions {path}: {exc}") from exc
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        raise CatalogError(f"{path}: expected a JSON array of version strings")
    invalid = [v for v in raw if not is_valid(v)]
    if invalid:
        logger.warning("Runtime versions file %s has non-semver entries: %s", path, invalid)
    return list(raw)


def save_runtime_versions(path: Union[str, Path], versions: List[str]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(json.dumps(versions, indent=2) + "\n")
