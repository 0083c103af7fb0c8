"""
Shared helpers for the shutdown tracker.
"""
