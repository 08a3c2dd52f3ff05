"""
Combination enumeration: library policy -> build candidates.

For one library on one platform, every effective override is resolved against
the library defaults and expanded into library version x runtime version x
companion version. An override without a version matcher (after inheritance)
produces nothing and makes no registry calls; a missing runtime matcher
matches the whole runtime catalog.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from . import versions as semver
from .catalog import EffectivePolicy, LibraryPolicy
from .core.types import BuildCandidate
from .platforms import Platform
from .providers.base import ArtifactStore, Pattern, RegistryProbe, VersionInfo

logger = logging.getLogger(__name__)


class CombinationEnumerator:
    """Expands policies into candidates using the registry and the runtime-version catalog."""

    def __init__(
        self,
        registry: RegistryProbe,
        runtime_versions: Sequence[str],
        companion_package: str,
        default_weekly_downloads_threshold: int = 10000,
    ) -> None:
        self._registry = registry
        self._runtime_versions = list(runtime_versions)
        self._companion_package = companion_package
        self._default_threshold = default_weekly_downloads_threshold

    def effective_policies(self, policy: LibraryPolicy, platform: Platform) -> List[EffectivePolicy]:
        """One resolved policy per override; empty when the platform is disabled."""
        return [policy.resolve(o, self._default_threshold) for o in platform.overrides(policy)]

    def runtime_candidates(self, matcher: Optional[Pattern]) -> List[str]:
        if not matcher:
            return list(self._runtime_versions)
        return [v for v in self._runtime_versions if semver.matches(v, matcher)]

    def companion_candidates(self, matcher: Optional[Pattern]) -> List[Optional[str]]:
        """Companion versions, or [None] when the axis is unused or nothing matches."""
        if not matcher:
            return [None]
        found = [
            info.version
            for info in self._registry.fetch_versions(self._companion_package)
            if not semver.is_prerelease(info.version) and semver.matches(info.version, matcher)
        ]
        return list(found) or [None]

    def enumerate_policy(self, library: str, effective: EffectivePolicy, platform: Platform) -> List[BuildCandidate]:
        """Candidates for one resolved override, minus those the platform reports as built."""
        if not effective.version_matcher:
            logger.debug("%s [%s]: no versionMatcher, skipping override", library, platform.name)
            return []

        companions = self.companion_candidates(effective.companion_version_matcher)
        library_versions = self._registry.find_matching_versions(
            library,
            effective.version_matcher,
            published_after=effective.published_after_date,
            weekly_downloads_threshold=effective.weekly_downloads_threshold,
        )
        runtimes = self.runtime_candidates(effective.runtime_version_matcher)

        candidates: List[BuildCandidate] = []
        for info in library_versions:
            for runtime_version in runtimes:
                for companion in companions:
                    candidate = BuildCandidate(
                        library=library,
                        version=info.version,
                        platform=platform.name,
                        runtime_version=runtime_version,
                        companion_version=companion,
                    )
                    if platform.is_built(candidate):
                        continue
                    candidates.append(candidate)
        return candidates

    def enumerate(self, library: str, policy: LibraryPolicy, platform: Platform) -> List[BuildCandidate]:
        """All candidates for library on platform across its overrides."""
        out: List[BuildCandidate] = []
        for effective in self.effective_policies(policy, platform):
            out.extend(self.enumerate_policy(library, effective, platform))
        return out


def find_oldest_unbuilt(
    registry: RegistryProbe,
    store: ArtifactStore,
    package_name: str,
    version_matcher: Pattern,
) -> Optional[VersionInfo]:
    """
    Oldest (by publish time) non-prerelease version matching version_matcher that
    has no artifact for any runtime version. None when every match is covered.
    """
    matching = [
        info
        for info in registry.fetch_versions(package_name)
        if not semver.is_prerelease(info.version) and semver.matches(info.version, version_matcher)
    ]
    for info in sorted(matching, key=lambda v: v.publish_date):
        if not store.is_built(package_name, info.version):
            return info
    return None
