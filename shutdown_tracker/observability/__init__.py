"""
Logging and metrics for the shutdown tracker.
"""
