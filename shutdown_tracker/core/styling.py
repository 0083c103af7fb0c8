"""
Classification and styling for shutdown records.

This module contains pure functions mapping a record plus the UI
interaction state (selected / hovered) to the color, fill opacity and
stroke weight used by both the map and the list, so the two views
always agree.
"""

from typing import Dict, Literal, Optional
from pydantic import BaseModel, ConfigDict

from .models import ShutdownRecord

ClassificationScheme = Literal["reason", "action"]

CLEARED_COLOR = "#9CA3AF"
DEFAULT_COLOR = "#6B7280"

REASON_COLORS: Dict[str, str] = {
    "weather": "#3B82F6",
    "accident": "#EF4444",
    "construction": "#F59E0B",
    "event": "#8B5CF6",
    "emergency": "#DC2626",
    "fires": "#EA580C",
    "other": DEFAULT_COLOR,
}

ACTION_COLORS: Dict[str, str] = {
    "shutdown_all": "#EF4444",     # red
    "shutdown_b_only": "#8B5CF6",  # purple
    "caution": "#EAB308",          # yellow
}

# base fill opacity by status
FILL_OPACITY = {"active": 0.5, "cleared": 0.3}

BASE_WEIGHT = 2
HOVER_WEIGHT = 3
SELECTED_WEIGHT = 4
LINE_EXTRA_WEIGHT = 2

HOVER_OPACITY_BOOST = 0.1
SELECTED_OPACITY_BOOST = 0.2


class ShapeStyle(BaseModel):
    """Presentation of one record; ``fill_opacity`` is None for lines"""
    model_config = ConfigDict(frozen=True)

    color: str
    fill_opacity: Optional[float]
    weight: int


def classification_tag(record: ShutdownRecord, scheme: ClassificationScheme) -> Optional[str]:
    """The tag the active scheme classifies a record by."""
    return record.action if scheme == "action" else record.reason


def color_for(record: ShutdownRecord, scheme: ClassificationScheme = "action") -> str:
    """
    Look up a record's color.

    Cleared records always use the neutral cleared color. Otherwise the
    color comes from ``action`` or ``reason`` depending on the scheme,
    with a default for missing or unknown tags.
    """
    if record.status == "cleared":
        return CLEARED_COLOR

    table = ACTION_COLORS if scheme == "action" else REASON_COLORS
    tag = classification_tag(record, scheme)
    return table.get(tag or "", DEFAULT_COLOR)


def style_for(
    record: ShutdownRecord,
    *,
    selected: bool = False,
    hovered: bool = False,
    scheme: ClassificationScheme = "action",
) -> ShapeStyle:
    """
    Compute the style of a record for the given interaction state.

    Args:
        record: the shutdown record
        selected: the record is the current selection
        hovered: the pointer is over the record
        scheme: active classification scheme ("reason" or "action")

    Returns:
        The shape style; identical inputs always give identical output
    """
    color = color_for(record, scheme)
    opacity = FILL_OPACITY.get(record.status, FILL_OPACITY["active"])

    # selection outranks hover
    if selected:
        weight = SELECTED_WEIGHT
        opacity += SELECTED_OPACITY_BOOST
    elif hovered:
        weight = HOVER_WEIGHT
        opacity += HOVER_OPACITY_BOOST
    else:
        weight = BASE_WEIGHT

    if record.geometry_type == "line":
        return ShapeStyle(color=color, fill_opacity=None, weight=weight + LINE_EXTRA_WEIGHT)

    return ShapeStyle(color=color, fill_opacity=round(min(opacity, 1.0), 2), weight=weight)


def badge_label(tag: Optional[str]) -> str:
    """Display label for a reason or action tag, e.g. "Shutdown B Only"."""
    if not tag:
        return ""
    return " ".join(part.capitalize() if len(part) > 1 else part.upper()
                    for part in tag.split("_"))
