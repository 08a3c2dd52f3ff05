"""
Shared exception types for prebuild_scheduler.

Only RegistryError and DispatchError are allowed to end a scheduling run.
ArtifactStoreError, LedgerReadError and LedgerWriteError are raised by the
low-level helpers and absorbed at the boundary of the component that owns them.
"""

from __future__ import annotations

from typing import Optional


class SchedulerError(Exception):
    """Base exception for prebuild_scheduler; catch this for any package-raised error."""

    pass


class ConfigError(SchedulerError):
    """Invalid configuration value (config.yaml or environment)."""


class CatalogError(SchedulerError):
    """Malformed library catalog or runtime-version catalog."""


class RegistryError(SchedulerError):
    """Package registry lookup failed. Fatal for the run."""

    def __init__(self, package_name: str, message: str, status_code: Optional[int] = None) -> None:
        self.package_name = package_name
        self.status_code = status_code
        prefix = f"HTTP {status_code}: " if status_code is not None else ""
        super().__init__(f"Failed to fetch {package_name}: {prefix}{message}")


class ArtifactStoreError(SchedulerError):
    """Artifact repository listing failed. Degrades to 'not built'."""


class LedgerReadError(SchedulerError):
    """Build ledger query failed. Degrades to 'not scheduled'."""


class LedgerWriteError(SchedulerError):
    """Build ledger write failed."""


class DispatchError(SchedulerError):
    """Triggering the remote build workflow failed. Fatal for the run."""


__all__ = [
    "SchedulerError",
    "ConfigError",
    "CatalogError",
    "RegistryError",
    "ArtifactStoreError",
    "LedgerReadError",
    "LedgerWriteError",
    "DispatchError",
]
