"""
Authentication adapters for the shutdown tracker.
"""

from .header_auth import HeaderAuth

__all__ = ["HeaderAuth"]
