"""
Geometry model for shutdown records.

The four supported shape kinds are modelled as a tagged union keyed
by ``kind``. Stored records keep flat geometry fields; ``shape_of``
lifts them into the matching variant, or returns None when the record
cannot be rendered (unknown kind or missing fields).
"""

from typing import Annotated, Any, Dict, Iterable, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field

from .errors import ShutdownValidationError
from .models import ShutdownRecord
from shutdown_tracker.common.geo import as_lat_lng, calculate_bounding_box, validate_coordinates
from shutdown_tracker.observability.logging_setup import get_logger

log = get_logger("shutdowns.geometry")

Coordinates = Tuple[Tuple[float, float], ...]


class CircleShape(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["circle"] = "circle"
    center_lat: float
    center_lng: float
    radius_km: float


class PointShape(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["point"] = "point"
    center_lat: float
    center_lng: float


class PolygonShape(BaseModel):
    """Closed ring; the closing edge back to the first vertex is implicit"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["polygon"] = "polygon"
    coordinates: Coordinates


class LineShape(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["line"] = "line"
    coordinates: Coordinates


Shape = Annotated[
    Union[CircleShape, PointShape, PolygonShape, LineShape],
    Field(discriminator="kind"),
]

# minimum vertex counts for path shapes
MIN_POINTS = {"polygon": 3, "line": 2}


def _coerce_coordinates(raw: Optional[Iterable[Any]]) -> Optional[Coordinates]:
    if not raw:
        return None
    pairs = []
    for value in raw:
        pair = as_lat_lng(value)
        if pair is None:
            return None
        pairs.append(pair)
    return tuple(pairs)


def shape_of(record: ShutdownRecord) -> Optional[Shape]:
    """
    Lift a record's flat geometry fields into its shape variant.

    Args:
        record: the shutdown record

    Returns:
        The matching shape, or None when the geometry type is not
        recognized or the fields it requires are missing
    """
    kind = record.geometry_type

    if kind == "circle":
        if record.center_lat is None or record.center_lng is None or record.radius_km is None:
            return None
        return CircleShape(
            center_lat=record.center_lat,
            center_lng=record.center_lng,
            radius_km=record.radius_km,
        )

    if kind == "point":
        if record.center_lat is None or record.center_lng is None:
            return None
        return PointShape(center_lat=record.center_lat, center_lng=record.center_lng)

    if kind in ("polygon", "line"):
        coords = _coerce_coordinates(record.coordinates)
        if coords is None:
            return None
        if kind == "polygon":
            return PolygonShape(coordinates=coords)
        return LineShape(coordinates=coords)

    log.debug("unrecognized geometry type, not rendering",
              record_id=record.id, geometry_type=kind)
    return None


def is_renderable(record: ShutdownRecord) -> bool:
    return shape_of(record) is not None


def bounding_points(record: ShutdownRecord) -> List[List[float]]:
    """
    Points a map should include when fitting its view to this record.

    Circles and points contribute their center, polygons and lines every
    listed vertex. Incomplete or unknown records contribute nothing.
    """
    shape = shape_of(record)
    if shape is None:
        return []
    if isinstance(shape, (CircleShape, PointShape)):
        return [[shape.center_lat, shape.center_lng]]
    return [[lat, lng] for lat, lng in shape.coordinates]


def fit_bounds(records: Iterable[ShutdownRecord]) -> Optional[Tuple[float, float, float, float]]:
    """
    Bounding box over every record's bounding points.

    Returns:
        (south, west, north, east), or None when no record contributes
    """
    points = []
    for record in records:
        points.extend((lat, lng) for lat, lng in bounding_points(record))
    return calculate_bounding_box(points)


def validate_shape(shape: Shape) -> None:
    """
    Check a new shape for basic well-formedness.

    Raises:
        ShutdownValidationError: out-of-range coordinates, a non-positive
            radius, or too few vertices for a polygon or line
    """
    if isinstance(shape, (CircleShape, PointShape)):
        if not validate_coordinates(shape.center_lat, shape.center_lng):
            raise ShutdownValidationError(
                f"invalid center ({shape.center_lat}, {shape.center_lng})"
            )
        if isinstance(shape, CircleShape) and not shape.radius_km > 0:
            raise ShutdownValidationError("radius_km must be greater than 0")
        return

    minimum = MIN_POINTS[shape.kind]
    if len(shape.coordinates) < minimum:
        raise ShutdownValidationError(
            f"a {shape.kind} needs at least {minimum} coordinates"
        )
    for lat, lng in shape.coordinates:
        if not validate_coordinates(lat, lng):
            raise ShutdownValidationError(f"invalid coordinate ({lat}, {lng})")


def record_fields(shape: Shape) -> Dict[str, Any]:
    """Flatten a shape into the storage fields of a record."""
    if isinstance(shape, CircleShape):
        return {
            "geometry_type": "circle",
            "center_lat": shape.center_lat,
            "center_lng": shape.center_lng,
            "radius_km": shape.radius_km,
        }
    if isinstance(shape, PointShape):
        return {
            "geometry_type": "point",
            "center_lat": shape.center_lat,
            "center_lng": shape.center_lng,
        }
    return {
        "geometry_type": shape.kind,
        "coordinates": [[lat, lng] for lat, lng in shape.coordinates],
    }
