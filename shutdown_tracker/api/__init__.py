"""
HTTP surface for the shutdown tracker.
"""

from .app import create_app

__all__ = ["create_app"]
