"""
Storage adapters for the shutdown tracker.

This module contains the SQLite-backed entity stores for shutdown
records and user profiles.
"""

from .sqlite_store import SQLiteShutdownStore, SQLiteUserStore, init_schema

__all__ = ["SQLiteShutdownStore", "SQLiteUserStore", "init_schema"]
