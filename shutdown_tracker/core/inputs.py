"""
Input models for the lifecycle operations.

These describe what a caller may ask for; the lifecycle controller
validates them and raises ShutdownValidationError for anything that
is not acceptable.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict

from .geometry import Shape

DEFAULT_RADIUS_KM = 200.0


class CreateShutdownInput(BaseModel):
    """
    A new shutdown, in one of three forms:

    - ``city`` (+ ``radius_km``): a circle around a geocoded city
    - ``from_city`` + ``to_city``: a road line between two geocoded cities
    - ``shape``: explicit geometry, no geocoding
    """
    model_config = ConfigDict(extra="forbid")

    title: str = ""
    city: Optional[str] = None
    radius_km: float = DEFAULT_RADIUS_KM
    from_city: Optional[str] = None
    to_city: Optional[str] = None
    shape: Optional[Shape] = None
    region: Optional[str] = None     # only used with an explicit shape

    reason: str = "weather"
    action: Optional[str] = "shutdown_all"
    notes: str = ""


class ShutdownPatch(BaseModel):
    """
    User-editable fields; None leaves a field unchanged.

    ``geometry_type`` and the bookkeeping fields are not part of the
    patch, so attempts to send them fail validation.
    """
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    reason: Optional[str] = None
    action: Optional[str] = None
    notes: Optional[str] = None
    radius_km: Optional[float] = None
    from_city: Optional[str] = None
    to_city: Optional[str] = None
