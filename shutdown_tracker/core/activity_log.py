"""
Activity log bookkeeping for shutdown records.

The log is an immutable tuple of ActivityEntry values. Appending
returns a new tuple, so a caller holding the previous log (for an
optimistic update or an undo) never sees it change underneath it.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence, Tuple, Union
from pydantic import BaseModel

from .models import ActivityAction, ActivityEntry

ActivityLog = Tuple[ActivityEntry, ...]

NO_CHANGES = "No changes made"
CLEARED_DETAILS = "Marked as cleared"


def append_entry(
    log: Sequence[ActivityEntry],
    action: ActivityAction,
    user: str,
    details: str = "",
    *,
    timestamp: Optional[datetime] = None,
) -> ActivityLog:
    """
    Return a new log with one entry appended.

    Args:
        log: the current log (left untouched)
        action: created / edited / cleared
        user: acting principal's identifier (email)
        details: human readable summary
        timestamp: event time, defaults to now (UTC)

    Returns:
        The extended log
    """
    entry = ActivityEntry(
        action=action,
        user=user,
        timestamp=timestamp or datetime.now(timezone.utc),
        details=details,
    )
    return tuple(log) + (entry,)


def _as_mapping(value: Union[Mapping[str, Any], BaseModel]) -> Mapping[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump()
    return value


def _normalized(value: Any) -> Any:
    # blank text and a missing value read the same in the edit form
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return value.strip()
    return value


def diff_for_edit(
    before: Union[Mapping[str, Any], BaseModel],
    after: Union[Mapping[str, Any], BaseModel],
    tracked_fields: Mapping[str, str],
) -> str:
    """
    Summarize an edit as the list of changed field display names.

    Only the fields in ``tracked_fields`` (field name -> display name)
    are compared, in their given order. Fields missing from ``after``
    are treated as unchanged.

    Returns:
        "Updated title, reason" style text, or "No changes made"
    """
    old = _as_mapping(before)
    new = _as_mapping(after)

    changed = [
        display
        for field, display in tracked_fields.items()
        if field in new and _normalized(old.get(field)) != _normalized(new.get(field))
    ]
    if not changed:
        return NO_CHANGES
    return f"Updated {', '.join(changed)}"


def format_radius(radius_km: float) -> str:
    """200.0 -> "200", 12.5 -> "12.5"."""
    radius = float(radius_km)
    return str(int(radius)) if radius.is_integer() else str(radius)


def circle_created_details(radius_km: float, city_name: str) -> str:
    return f"Created shutdown: {format_radius(radius_km)}km radius of {city_name}"


def road_created_details(from_name: str, to_name: str) -> str:
    return f"Created road shutdown: {from_name} to {to_name}"


def shape_created_details(geometry_type: str) -> str:
    return f"Created {geometry_type} shutdown"


def count_actions(log: Sequence[ActivityEntry], action: ActivityAction) -> int:
    return sum(1 for entry in log if entry.action == action)
