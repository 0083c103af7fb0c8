"""
Geocoding request/response contract.

The geocoding collaborator is driven by a natural-language instruction
plus a strict JSON schema for the answer. This module builds those
requests and turns the raw answers into GeocodedPlace values, raising
GeocodingError for anything incomplete.
"""

from typing import Any, Dict, Tuple
from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import GeocodingError
from shutdown_tracker.common.geo import validate_coordinates

_PLACE_PROPERTIES = {
    "name": {"type": "string"},
    "province": {"type": "string"},
    "latitude": {"type": "number"},
    "longitude": {"type": "number"},
}

CITY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "city_name": {"type": "string"},
        "province": {"type": "string"},
        "latitude": {"type": "number"},
        "longitude": {"type": "number"},
    },
    "required": ["city_name", "province", "latitude", "longitude"],
}

ROUTE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "from_city": {
            "type": "object",
            "properties": _PLACE_PROPERTIES,
            "required": list(_PLACE_PROPERTIES),
        },
        "to_city": {
            "type": "object",
            "properties": _PLACE_PROPERTIES,
            "required": list(_PLACE_PROPERTIES),
        },
    },
    "required": ["from_city", "to_city"],
}


class GeocodeRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str
    response_json_schema: Dict[str, Any]
    add_context_from_internet: bool = True


class GeocodedPlace(BaseModel):
    """A resolved city: display name, region (province) and position"""
    model_config = ConfigDict(frozen=True)

    name: str
    region: str
    latitude: float
    longitude: float


def city_request(city: str, country: str = "Canadian", add_context: bool = True) -> GeocodeRequest:
    return GeocodeRequest(
        prompt=(f'Geocode the following {country} city: "{city}". '
                "Return ONLY the coordinates, nothing else."),
        response_json_schema=CITY_SCHEMA,
        add_context_from_internet=add_context,
    )


def route_request(from_city: str, to_city: str, country: str = "Canadian",
                  add_context: bool = True) -> GeocodeRequest:
    return GeocodeRequest(
        prompt=(f'Geocode these two {country} cities: "{from_city}" and "{to_city}". '
                "Return coordinates for both."),
        response_json_schema=ROUTE_SCHEMA,
        add_context_from_internet=add_context,
    )


def _place(raw: Any, name_key: str, label: str) -> GeocodedPlace:
    if not isinstance(raw, dict):
        raise GeocodingError(f"no geocoding result for {label}")
    try:
        place = GeocodedPlace(
            name=raw.get(name_key),
            region=raw.get("province"),
            latitude=raw.get("latitude"),
            longitude=raw.get("longitude"),
        )
    except ValidationError as e:
        raise GeocodingError(f"incomplete geocoding result for {label}") from e

    if not place.name.strip() or not validate_coordinates(place.latitude, place.longitude):
        raise GeocodingError(f"unusable geocoding result for {label}")
    return place


def parse_city(raw: Any, city: str) -> GeocodedPlace:
    """
    Parse the answer to a ``city_request``.

    Raises:
        GeocodingError: missing fields or invalid coordinates
    """
    return _place(raw, "city_name", f'"{city}"')


def parse_route(raw: Any, from_city: str, to_city: str) -> Tuple[GeocodedPlace, GeocodedPlace]:
    """
    Parse the answer to a ``route_request``.

    Raises:
        GeocodingError: either city is missing or incomplete
    """
    if not isinstance(raw, dict):
        raise GeocodingError(f'no geocoding result for "{from_city}" / "{to_city}"')
    return (
        _place(raw.get("from_city"), "name", f'"{from_city}"'),
        _place(raw.get("to_city"), "name", f'"{to_city}"'),
    )
