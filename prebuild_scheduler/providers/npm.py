"""
npm registry probe.

Uses the public npm endpoints (no authentication required):
  GET https://registry.npmjs.org/{package}                     full metadata, 'time' map
  GET https://api.npmjs.org/versions/{package}/last-week       per-version download counts

Publish order comes from the 'time' map values, never from key order.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .. import versions as semver
from ..core.errors import RegistryError
from .base import Pattern, VersionInfo
from .resilience import RetryConfig, get_with_rate_limit_retry

logger = logging.getLogger(__name__)

NPM_REGISTRY_URL = "https://registry.npmjs.org"
NPM_DOWNLOADS_URL = "https://api.npmjs.org"
HTTP_TIMEOUT_S = 30.0


def _parse_timestamp(raw: Any) -> Optional[datetime]:
    if not isinstance(raw, str) or not raw:
        return None
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(text)
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _parse_published_after(raw: Optional[str]) -> Optional[date]:
    """YYYY-MM-DD -> date. Malformed values are logged and ignored."""
    if not raw:
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        logger.warning("Invalid publishedAfterDate format: %s, expected YYYY-MM-DD", raw)
        return None


class NpmRegistry:
    """Fetch version histories and download counts from npm. Caches per package for the process."""

    def __init__(
        self,
        registry_url: str = NPM_REGISTRY_URL,
        downloads_url: str = NPM_DOWNLOADS_URL,
        timeout_s: float = HTTP_TIMEOUT_S,
        retry_config: Optional[RetryConfig] = None,
    ) -> None:
        self._registry_url = registry_url.rstrip("/")
        self._downloads_url = downloads_url.rstrip("/")
        self._timeout_s = timeout_s
        self._retry_config = retry_config or RetryConfig()
        self._versions_cache: Dict[str, List[VersionInfo]] = {}
        self._downloads_cache: Dict[str, Dict[str, int]] = {}

    def clear_cache(self) -> None:
        self._versions_cache.clear()
        self._downloads_cache.clear()

    def fetch_downloads_last_week(self, package_name: str) -> Dict[str, int]:
        """
        Per-version downloads over the last week.

        Rate limits are retried; any other failure is logged and yields an
        empty map, which makes every version count as zero downloads.
        """
        if package_name in self._downloads_cache:
            return self._downloads_cache[package_name]

        url = f"{self._downloads_url}/versions/{quote(package_name, safe='')}/last-week"
        downloads: Dict[str, int] = {}
        try:
            resp = get_with_rate_limit_retry(
                requests.get, url, retry_config=self._retry_config, timeout=self._timeout_s
            )
            if resp.status_code < 200 or resp.status_code >= 300:
                raise RuntimeError(
                    f"Failed to fetch download stats for {package_name}: HTTP {resp.status_code}"
                )
            raw = resp.json().get("downloads") or {}
            for version, count in raw.items():
                try:
                    downloads[version] = int(count)
                except (TypeError, ValueError):
                    continue
        except (requests.RequestException, RuntimeError, ValueError, AttributeError) as exc:
            logger.error("Error fetching download stats for %s: %s", package_name, exc)
            downloads = {}

        self._downloads_cache[package_name] = downloads
        return downloads

    def fetch_versions(self, package_name: str) -> List[VersionInfo]:
        """
        All semver versions of package_name with publish dates and weekly downloads.

        Raises RegistryError on a non-2xx response or transport failure. Keys of the
        'time' map that are not valid semver ('created', 'modified') are skipped.
        """
        cached = self._versions_cache.get(package_name)
        if cached is not None:
            return cached

        url = f"{self._registry_url}/{package_name}"
        try:
            resp = requests.get(url, timeout=self._timeout_s)
        except requests.RequestException as exc:
            raise RegistryError(package_name, f"{type(exc).__name__}: {exc}") from exc
        if resp.status_code < 200 or resp.status_code >= 300:
            raise RegistryError(package_name, resp.reason or "request failed", status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise RegistryError(package_name, f"invalid JSON: {exc}", status_code=resp.status_code) from exc
        time_map = data.get("time") if isinstance(data, dict) else None
        if not isinstance(time_map, dict):
            time_map = {}

        downloads = self.fetch_downloads_last_week(package_name)
        result: List[VersionInfo] = []
        for key, raw_ts in time_map.items():
            if not semver.is_valid(key):
                continue
            published = _parse_timestamp(raw_ts)
            if published is None:
                logger.debug("Skipping %s@%s: unparseable publish time %r", package_name, key, raw_ts)
                continue
            result.append(
                VersionInfo(version=key, publish_date=published, downloads_last_week=downloads.get(key))
            )

        if result:
            self._versions_cache[package_name] = result
        return result

    def find_matching_versions(
        self,
        package_name: str,
        version_matcher: Optional[Pattern],
        published_after: Optional[str] = None,
        weekly_downloads_threshold: int = 0,
    ) -> List[VersionInfo]:
        """
        Versions of package_name that pass the policy filters, sorted oldest first.

        No matcher means no versions and no network call. Prereleases are always
        excluded; published_after is an inclusive calendar-date bound (UTC).
        """
        if not version_matcher:
            return []
        all_versions = self.fetch_versions(package_name)
        min_date = _parse_published_after(published_after)

        selected = []
        for info in all_versions:
            if semver.is_prerelease(info.version):
                continue
            if not semver.matches(info.version, version_matcher):
                continue
            if min_date is not None and info.publish_date.astimezone(timezone.utc).date() < min_date:
                continue
            if (info.downloads_last_week or 0) < weekly_downloads_threshold:
                continue
            selected.append(info)
        return sorted(selected, key=lambda v: v.publish_date)
