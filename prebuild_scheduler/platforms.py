"""
Target platforms.

Each platform knows which part of a LibraryPolicy applies to it, which build
workflow it dispatches, how its runs are labelled, and whether an artifact
already exists for a candidate. The driver only talks to the Platform interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from .catalog import LibraryPolicy, PlatformPolicy, PolicyOverride
from .core.types import BuildCandidate
from .providers.base import ArtifactStore


class Platform(ABC):
    """Base class for build targets."""

    name: str = ""
    label: str = ""

    def __init__(self, workflow_file: str) -> None:
        self.workflow_file = workflow_file

    def __repr__(self) -> str:
        return f"{type(self).__name__}(workflow_file={self.workflow_file!r})"

    @abstractmethod
    def platform_policy(self, policy: LibraryPolicy) -> PlatformPolicy:
        """The android or ios section of policy."""

    def is_enabled(self, policy: LibraryPolicy) -> bool:
        return self.platform_policy(policy).enabled

    def overrides(self, policy: LibraryPolicy) -> Tuple[PolicyOverride, ...]:
        """Effective override list; empty when the platform is disabled."""
        return self.platform_policy(policy).effective_overrides()

    def is_built(self, candidate: BuildCandidate) -> bool:
        """True when an artifact for candidate already exists."""
        return False


class AndroidPlatform(Platform):
    """Android AARs, published to the Maven repository."""

    name = "android"
    label = "Android"

    def __init__(self, workflow_file: str, artifact_store: Optional[ArtifactStore] = None) -> None:
        super().__init__(workflow_file)
        self.artifact_store = artifact_store

    def platform_policy(self, policy: LibraryPolicy) -> PlatformPolicy:
        return policy.android

    def is_built(self, candidate: BuildCandidate) -> bool:
        if self.artifact_store is None:
            return False
        return self.artifact_store.is_built(
            candidate.library,
            candidate.version,
            candidate.runtime_version,
            candidate.companion_version,
        )


class IosPlatform(Platform):
    """iOS XCFrameworks. No listing API; the build ledger alone prevents rework."""

    name = "ios"
    label = "iOS"

    def platform_policy(self, policy: LibraryPolicy) -> PlatformPolicy:
        return policy.ios
