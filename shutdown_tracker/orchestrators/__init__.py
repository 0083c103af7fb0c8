"""
Orchestrators for the shutdown tracker.

This module contains the controllers that coordinate
the flow between the core and the ports.
"""
from .lifecycle import ShutdownLifecycle
from .user_admin import UserAdministration

__all__ = ["ShutdownLifecycle", "UserAdministration"]
