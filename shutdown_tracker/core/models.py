"""
Core domain models for the shutdown tracker.

This module defines the shutdown record, its activity entries and
the consumed user profile using Pydantic v2 for type safety and
validation. Records are immutable values; every change produces
a new record through ``model_copy``.
"""

from datetime import datetime
from typing import List, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, model_validator

GeometryType = Literal["circle", "point", "polygon", "line"]

Status = Literal["active", "cleared"]
ActivityAction = Literal["created", "edited", "cleared"]
AccessLevel = Literal["driver", "user", "admin"]

REASONS: Tuple[str, ...] = (
    "weather", "accident", "construction", "event", "emergency", "fires", "other"
)
ACTIONS: Tuple[str, ...] = ("shutdown_all", "shutdown_b_only", "caution")
ACCESS_LEVELS: Tuple[str, ...] = ("driver", "user", "admin")


class ActivityEntry(BaseModel):
    """One audit-log line: who did what to a record, and when"""
    model_config = ConfigDict(frozen=True)

    action: ActivityAction
    user: str
    timestamp: datetime
    details: str = ""


class ShutdownRecord(BaseModel):
    """
    A tracked closure or caution event.

    ``geometry_type`` stays a plain string so that records written by
    other schema versions still load; unknown kinds simply do not render.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    title: str = ""
    geometry_type: str
    center_lat: Optional[float] = None
    center_lng: Optional[float] = None
    radius_km: Optional[float] = Field(default=None, gt=0)
    coordinates: Optional[List[List[float]]] = None

    reason: Optional[str] = None
    action: Optional[str] = None
    status: Status = "active"
    region: Optional[str] = None
    notes: Optional[str] = None

    from_city: Optional[str] = None
    to_city: Optional[str] = None

    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    cleared_by: Optional[str] = None
    cleared_at: Optional[datetime] = None

    activity_log: Tuple[ActivityEntry, ...] = ()

    @model_validator(mode="after")
    def _check_clear_state(self) -> "ShutdownRecord":
        has_clear = self.cleared_by is not None and self.cleared_at is not None
        no_clear = self.cleared_by is None and self.cleared_at is None
        if self.status == "cleared" and not has_clear:
            raise ValueError("cleared records need both cleared_by and cleared_at")
        if self.status == "active" and not no_clear:
            raise ValueError("active records cannot carry cleared_by or cleared_at")
        return self

    @property
    def is_active(self) -> bool:
        return self.status == "active"


class UserProfile(BaseModel):
    """User profile as provided by the user store / auth collaborator"""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    email: str
    full_name: Optional[str] = None
    role: Optional[str] = None
    access_level: Optional[str] = None
    created_at: Optional[datetime] = None
