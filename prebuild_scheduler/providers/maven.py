"""
Maven artifact store probe.

Artifacts are published under a version directory that combines the package
version and the React Native version, e.g. '4.18.1-rn0.79.0' (with
'-worklets<version>' appended for worklets builds). The JSON API lists those
directory names:
  GET {api_url}/{artifact_name}   ->  {"versions": ["4.18.1-rn0.79.0", ...]}
"""
from __future__ import annotations

import logging
import re
from typing import Dict, Optional, Set

import requests

from ..core.errors import ArtifactStoreError

logger = logging.getLogger(__name__)

MAVEN_API_URL = "https://packages.rnrepo.org/api/maven/versions/releases/org/rnrepo/public"
HTTP_TIMEOUT_S = 15.0

RUNTIME_SEPARATOR = "-rn"


def sanitize_package_name(package_name: str) -> str:
    """
    npm package name -> artifact name: strip a leading '@', '/' becomes '_'.
    Example: @react-native-picker/picker -> react-native-picker_picker
    """
    return re.sub(r"^@", "", package_name).replace("/", "_")


def artifact_name(package_version: str, runtime_version: str, companion_version: Optional[str] = None) -> str:
    name = f"{package_version}{RUNTIME_SEPARATOR}{runtime_version}"
    if companion_version:
        name += f"-worklets{companion_version}"
    return name


class MavenArtifactStore:
    """
    Answer 'is this already built?' from the Maven versions listing.

    The listing is fetched once per package and cached for the process, failures
    included: a failed listing is cached as None and every query for that package
    then answers False.
    """

    def __init__(self, api_url: str = MAVEN_API_URL, timeout_s: float = HTTP_TIMEOUT_S) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout_s = timeout_s
        self._cache: Dict[str, Optional[Set[str]]] = {}

    def clear_cache(self) -> None:
        self._cache.clear()

    def _fetch_listing(self, store_name: str) -> Set[str]:
        url = f"{self._api_url}/{store_name}"
        try:
            resp = requests.get(url, timeout=self._timeout_s)
        except requests.RequestException as exc:
            raise ArtifactStoreError(f"Failed to fetch {store_name}: {type(exc).__name__}: {exc}") from exc
        if resp.status_code < 200 or resp.status_code >= 300:
            raise ArtifactStoreError(f"Failed to fetch {store_name}: HTTP {resp.status_code} {resp.reason or ''}".rstrip())
        try:
            data = resp.json()
        except ValueError as exc:
            raise ArtifactStoreError(f"Failed to fetch {store_name}: invalid JSON: {exc}") from exc
        raw = data.get("versions") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            return set()
        return {str(v).strip() for v in raw if str(v).strip()}

    def fetch_artifacts(self, package_name: str) -> Optional[Set[str]]:
        """Combined version names for package_name, or None if the listing failed."""
        store_name = sanitize_package_name(package_name)
        if store_name in self._cache:
            return self._cache[store_name]
        try:
            artifacts: Optional[Set[str]] = self._fetch_listing(store_name)
        except ArtifactStoreError as exc:
            logger.error("Error fetching artifacts for %s: %s", package_name, exc)
            artifacts = None
        self._cache[store_name] = artifacts
        return artifacts

    def is_built(
        self,
        package_name: str,
        package_version: str,
        runtime_version: Optional[str] = None,
        companion_version: Optional[str] = None,
    ) -> bool:
        """
        Without runtime_version: True if package_version has an artifact for any runtime.
        With runtime_version: True only for the exact combination.
        """
        artifacts = self.fetch_artifacts(package_name)
        if not artifacts:
            return False
        if runtime_version is None:
            prefix = f"{package_version}{RUNTIME_SEPARATOR}"
            return any(name.startswith(prefix) for name in artifacts)
        return artifact_name(package_version, runtime_version, companion_version) in artifacts
