"""
Provider interfaces and data contracts.

Three remote services feed the scheduler:
- RegistryProbe: package version history with publish timestamps (npm)
- ArtifactStore: which package/runtime combinations already have artifacts (Maven)
- WorkflowClient: triggers a remote build job (GitHub Actions)

Data is returned via frozen dataclasses for immutability and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Mapping, Optional, Protocol, runtime_checkable

from ..versions import Pattern


@dataclass(frozen=True)
class VersionInfo:
    """One published version of a package."""

    version: str
    publish_date: datetime
    downloads_last_week: Optional[int] = None


@runtime_checkable
class RegistryProbe(Protocol):
    """Protocol for package registries."""

    def fetch_versions(self, package_name: str) -> List[VersionInfo]:
        """All semver versions of a package with publish dates. Raises RegistryError."""
        ...

    def find_matching_versions(
        self,
        package_name: str,
        version_matcher: Optional[Pattern],
        published_after: Optional[str] = None,
        weekly_downloads_threshold: int = 0,
    ) -> List[VersionInfo]:
        """Non-prerelease versions matching the policy, oldest first."""
        ...


@runtime_checkable
class ArtifactStore(Protocol):
    """Protocol for artifact repositories."""

    def is_built(
        self,
        package_name: str,
        package_version: str,
        runtime_version: Optional[str] = None,
        companion_version: Optional[str] = None,
    ) -> bool:
        ...


@runtime_checkable
class WorkflowClient(Protocol):
    """Protocol for remote build job triggers."""

    def dispatch_workflow(self, workflow_id: str, inputs: Mapping[str, str], ref: str) -> None:
        """Trigger one run of workflow_id. Raises DispatchError."""
        ...
