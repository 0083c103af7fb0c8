"""
Port interfaces for the shutdown tracker's hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the core domain and external collaborators.
"""

from .storage import ShutdownStorePort, UserStorePort
from .geocoding import GeocoderPort
from .auth import AuthPort

__all__ = ["ShutdownStorePort", "UserStorePort", "GeocoderPort", "AuthPort"]
