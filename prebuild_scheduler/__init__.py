"""
Top-level public API surface.
Canonical entrypoint: import prebuild_scheduler; use prebuild_scheduler.scheduler, prebuild_scheduler.catalog, etc.
Does not import cli.
"""

from __future__ import annotations

from . import catalog, core, db, providers, versions
from ._version import __version__

# Do not add exports without updating __all__.
__all__ = [
    "__version__",
    "catalog",
    "core",
    "db",
    "providers",
    "versions",
]
