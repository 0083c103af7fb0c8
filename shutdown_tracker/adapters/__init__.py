"""
Adapters for the shutdown tracker's hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .storage import SQLiteShutdownStore, SQLiteUserStore
from .geocoding import LLMGeocoder, SessionGeocoder
from .auth import HeaderAuth

__all__ = ["SQLiteShutdownStore", "SQLiteUserStore", "LLMGeocoder", "SessionGeocoder", "HeaderAuth"]
