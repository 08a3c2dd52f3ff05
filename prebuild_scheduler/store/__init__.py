"""
Store: SQLite persistence primitives. No business logic.
"""

from __future__ import annotations

from .sqlite_session import connect, sqlite_conn

__all__ = ["connect", "sqlite_conn"]
