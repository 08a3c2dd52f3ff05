"""
Stable facade: shared error taxonomy and record types.
Do not add exports without updating __all__.
"""

from __future__ import annotations

from .errors import (
    ArtifactStoreError,
    CatalogError,
    ConfigError,
    DispatchError,
    LedgerReadError,
    LedgerWriteError,
    RegistryError,
    SchedulerError,
)
from .types import BuildCandidate, BuildKey, BuildRecord, BuildStatus

# Do not add exports without updating __all__.
__all__ = [
    "ArtifactStoreError",
    "BuildCandidate",
    "BuildKey",
    "BuildRecord",
    "BuildStatus",
    "CatalogError",
    "ConfigError",
    "DispatchError",
    "LedgerReadError",
    "LedgerWriteError",
    "RegistryError",
    "SchedulerError",
]
