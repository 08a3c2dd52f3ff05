"""
Build obligation records shared by the enumerator, ledger and dispatcher.

BuildKey is the natural key of the ledger. companion_version None is a
distinct key value, never a wildcard.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class BuildStatus(enum.Enum):
    """Lifecycle state of a build record."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class BuildKey:
    """Natural key: (package_name, version, runtime_version, platform, companion_version)."""

    package_name: str
    version: str
    runtime_version: str
    platform: str
    companion_version: Optional[str] = None

    def describe(self) -> str:
        text = f"{self.package_name}@{self.version} RN {self.runtime_version}"
        if self.companion_version:
            text += f" (worklets {self.companion_version})"
        return f"{text} [{self.platform}]"


@dataclass(frozen=True)
class BuildCandidate:
    """One combination the enumerator considers for scheduling."""

    library: str
    version: str
    platform: str
    runtime_version: str
    companion_version: Optional[str] = None

    @property
    def key(self) -> BuildKey:
        return BuildKey(
            package_name=self.library,
            version=self.version,
            runtime_version=self.runtime_version,
            platform=self.platform,
            companion_version=self.companion_version,
        )


@dataclass
class BuildRecord:
    """Row of the builds table."""

    package_name: str
    version: str
    runtime_version: str
    platform: str
    companion_version: Optional[str] = None
    status: BuildStatus = BuildStatus.SCHEDULED
    retry: bool = False
    github_run_url: Optional[str] = None
    build_duration_seconds: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def key(self) -> BuildKey:
        return BuildKey(
            package_name=self.package_name,
            version=self.version,
            runtime_version=self.runtime_version,
            platform=self.platform,
            companion_version=self.companion_version,
        )

    @classmethod
    def scheduled(cls, key: BuildKey, github_run_url: Optional[str] = None) -> BuildRecord:
        return cls(
            package_name=key.package_name,
            version=key.version,
            runtime_version=key.runtime_version,
            platform=key.platform,
            companion_version=key.companion_version,
            github_run_url=github_run_url,
        )


__all__ = ["BuildStatus", "BuildKey", "BuildCandidate", "BuildRecord"]
