"""
Core domain models and pure functions for the shutdown tracker.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import ShutdownRecord, ActivityEntry, UserProfile
from .errors import (
    ShutdownError,
    ShutdownValidationError,
    InvalidTransitionError,
    GeocodingError,
    ShutdownPermissionError,
    RecordNotFoundError,
)
from .geometry import Shape, shape_of, bounding_points, fit_bounds
from .styling import style_for, ShapeStyle
from .activity_log import append_entry, diff_for_edit
from .access import effective_level, can_mutate, can_manage_users
from .filters import FilterConfig, filter_records, distinct_regions

__all__ = [
    "ShutdownRecord", "ActivityEntry", "UserProfile",
    "ShutdownError", "ShutdownValidationError", "InvalidTransitionError",
    "GeocodingError", "ShutdownPermissionError", "RecordNotFoundError",
    "Shape", "shape_of", "bounding_points", "fit_bounds",
    "style_for", "ShapeStyle",
    "append_entry", "diff_for_edit",
    "effective_level", "can_mutate", "can_manage_users",
    "FilterConfig", "filter_records", "distinct_regions",
]
