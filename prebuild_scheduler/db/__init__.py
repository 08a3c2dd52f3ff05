"""
Database layer: migrations and the build ledger.

All ledger reads and writes go through BuildLedger so the natural-key and
retry semantics live in one place.
"""

from __future__ import annotations

from .ledger import BuildLedger
from .migrations import run_migrations

__all__ = ["run_migrations", "BuildLedger"]
