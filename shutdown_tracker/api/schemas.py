"""
Request and response bodies of the HTTP surface.
"""

from typing import List, Optional, Tuple
from pydantic import BaseModel

from shutdown_tracker.core.filters import ViewSummary
from shutdown_tracker.core.models import ShutdownRecord, UserProfile
from shutdown_tracker.core.styling import ShapeStyle


class StyledShutdown(BaseModel):
    """A record as drawn by the map and the list"""
    record: ShutdownRecord
    style: ShapeStyle
    badge: str
    renderable: bool


class ShutdownList(BaseModel):
    items: List[StyledShutdown]
    summary: ViewSummary
    filtered: bool
    regions: List[str]


class ShutdownMap(BaseModel):
    items: List[StyledShutdown]
    # (south, west, north, east)
    bounds: Optional[Tuple[float, float, float, float]] = None


class AccessLevelUpdate(BaseModel):
    access_level: str


class CurrentUser(BaseModel):
    user: UserProfile
    effective_level: str
    can_mutate: bool
    can_manage_users: bool


class LogoutResponse(BaseModel):
    redirect_url: str
