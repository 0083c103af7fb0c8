"""
Record lifecycle controller for the shutdown tracker.

This module implements the only writer of shutdown records. Every
operation checks access and validates input before it calls the
geocoding or storage collaborators, then issues a single storage
write: geocoding first, its result merged into the payload.
"""

import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union
from pydantic import ValidationError

from shutdown_tracker.core.access import require_mutate
from shutdown_tracker.core.activity_log import (
    CLEARED_DETAILS,
    append_entry,
    circle_created_details,
    diff_for_edit,
    format_radius,
    road_created_details,
    shape_created_details,
)
from shutdown_tracker.core.errors import (
    GeocodingError,
    InvalidTransitionError,
    ShutdownError,
    ShutdownValidationError,
)
from shutdown_tracker.core.geocoding import (
    GeocodedPlace,
    city_request,
    parse_city,
    parse_route,
    route_request,
)
from shutdown_tracker.core.geometry import CircleShape, LineShape, record_fields, validate_shape
from shutdown_tracker.core.inputs import CreateShutdownInput, ShutdownPatch
from shutdown_tracker.core.models import ACTIONS, REASONS, ShutdownRecord, UserProfile
from shutdown_tracker.core.styling import ClassificationScheme
from shutdown_tracker.ports.geocoding import GeocoderPort
from shutdown_tracker.ports.storage import ShutdownStorePort
from shutdown_tracker.observability import metrics
from shutdown_tracker.observability.logging_setup import get_logger

log = get_logger("shutdowns.lifecycle")

# field -> display name, compared on every edit
TRACKED_FIELDS: Dict[str, str] = {
    "title": "title",
    "reason": "reason",
    "action": "action",
    "notes": "notes",
}
LINE_TRACKED_FIELDS: Dict[str, str] = {"from_city": "from city", "to_city": "to city"}
CIRCLE_TRACKED_FIELDS: Dict[str, str] = {"radius_km": "radius"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class ShutdownLifecycle:
    """Create / update / clear / delete for shutdown records"""

    def __init__(self,
                 store: ShutdownStorePort,
                 geocoder: GeocoderPort,
                 *,
                 scheme: ClassificationScheme = "action",
                 allowed_reasons: Sequence[str] = (),
                 country: str = "Canadian",
                 add_context: bool = True,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            store: shutdown record store
            geocoder: geocoding collaborator
            scheme: active classification scheme ("reason" or "action")
            allowed_reasons: reasons this deployment accepts (empty: all)
            country: country adjective used in geocoding instructions
            add_context: let the geocoder consult the internet for context
            clock: time source for timestamps, UTC now by default
        """
        self.store = store
        self.geocoder = geocoder
        self.scheme = scheme
        self.allowed_reasons: Tuple[str, ...] = tuple(allowed_reasons) or REASONS
        self.country = country
        self.add_context = add_context
        self.clock = clock or _utcnow

    # ------------------------------------------------------------------
    # reads

    async def list_records(self) -> List[ShutdownRecord]:
        """All records, newest first."""
        records = await self.store.list("-created_at")
        active = sum(1 for r in records if r.is_active)
        metrics.records_listed.labels(status="active").set(active)
        metrics.records_listed.labels(status="cleared").set(len(records) - active)
        return records

    async def get(self, record_id: str) -> ShutdownRecord:
        return await self.store.get(record_id)

    # ------------------------------------------------------------------
    # mutations

    async def create(self, data: Union[CreateShutdownInput, Mapping[str, Any]],
                     user: UserProfile) -> ShutdownRecord:
        """
        Create a shutdown.

        One city gives a circle, two cities a two-point line; an explicit
        shape is stored as given. Nothing is persisted when geocoding
        fails.

        Raises:
            ShutdownPermissionError: the caller is view-only
            ShutdownValidationError: malformed input
            GeocodingError: a city name could not be resolved
        """
        with self._outcome("create", user):
            require_mutate(user, "create")
            data = self._coerce(CreateShutdownInput, data)
            self._check_reason(data.reason)
            action = self._check_action(data.action)
            mode = self._create_mode(data)

            extra: Dict[str, Any] = {}
            if mode == "city":
                if not data.radius_km > 0:
                    raise ShutdownValidationError("radius_km must be greater than 0")
                place = await self._geocode_city(data.city.strip())
                geometry = record_fields(CircleShape(
                    center_lat=place.latitude,
                    center_lng=place.longitude,
                    radius_km=data.radius_km,
                ))
                title = (data.title.strip()
                         or f"{format_radius(data.radius_km)}km radius of {place.name}")
                region = place.region
                details = circle_created_details(data.radius_km, place.name)

            elif mode == "road":
                from_city, to_city = data.from_city.strip(), data.to_city.strip()
                origin, destination = await self._geocode_route(from_city, to_city)
                geometry = self._line_fields(origin, destination)
                title = data.title.strip() or f"{origin.name} to {destination.name}"
                region = origin.region
                extra = {"from_city": from_city, "to_city": to_city}
                details = road_created_details(origin.name, destination.name)

            else:
                validate_shape(data.shape)
                if _blank(data.title):
                    raise ShutdownValidationError("title is required when no city is given")
                geometry = record_fields(data.shape)
                title = data.title.strip()
                region = data.region.strip() if data.region else None
                details = shape_created_details(data.shape.kind)

            now = self.clock()
            fields: Dict[str, Any] = {
                "title": title,
                **geometry,
                **extra,
                "reason": data.reason,
                "action": action,
                "status": "active",
                "region": region,
                "notes": data.notes,
                "created_by": user.email,
                "created_at": now,
                "activity_log": append_entry((), "created", user.email, details, timestamp=now),
            }
            record = await self.store.create(fields)
            log.info("shutdown created", record_id=record.id,
                     geometry_type=record.geometry_type, user=user.email)
            return record

    async def update(self, record: Union[ShutdownRecord, str],
                     patch: Union[ShutdownPatch, Mapping[str, Any]],
                     user: UserProfile) -> ShutdownRecord:
        """
        Edit a shutdown's user-editable fields.

        A change to a line's city names re-geocodes the route. A blank
        title on a line is derived from the resolved city names, which
        also needs a lookup. The geometry type never changes.

        Args:
            record: the record, or its id to load after the access check
            patch: fields to change
            user: acting principal

        Raises:
            ShutdownPermissionError: the caller is view-only
            ShutdownValidationError: malformed patch, or a field that does
                not apply to this geometry type
            InvalidTransitionError: the record is already cleared
            GeocodingError: the city names could not be resolved
            RecordNotFoundError: the record is gone
        """
        with self._outcome("update", user):
            require_mutate(user, "update")
            patch = self._coerce(ShutdownPatch, patch)
            record = await self._resolve(record)
            if not record.is_active:
                raise InvalidTransitionError("cleared shutdowns cannot be edited")

            changes = patch.model_dump(exclude_none=True)
            is_line = record.geometry_type == "line"

            if "radius_km" in changes:
                if record.geometry_type != "circle":
                    raise ShutdownValidationError("radius_km only applies to circle shutdowns")
                if not changes["radius_km"] > 0:
                    raise ShutdownValidationError("radius_km must be greater than 0")
            if ("from_city" in changes or "to_city" in changes) and not is_line:
                raise ShutdownValidationError("city names only apply to road shutdowns")
            if "reason" in changes:
                self._check_reason(changes["reason"])
            if "action" in changes:
                action = self._check_action(changes["action"])
                if action is None:
                    del changes["action"]

            fields: Dict[str, Any] = dict(changes)
            from_city = (changes.get("from_city", record.from_city) or "").strip()
            to_city = (changes.get("to_city", record.to_city) or "").strip()
            cities_changed = is_line and (
                from_city != (record.from_city or "").strip()
                or to_city != (record.to_city or "").strip()
            )
            title_blank = "title" in changes and _blank(changes["title"])
            if title_blank and not is_line:
                raise ShutdownValidationError("title cannot be blank")

            if cities_changed or title_blank:
                if not from_city or not to_city:
                    raise ShutdownValidationError("both from_city and to_city are required")
                origin, destination = await self._geocode_route(from_city, to_city)
                if cities_changed:
                    fields["from_city"], fields["to_city"] = from_city, to_city
                    fields.update(self._line_fields(origin, destination))
                    fields["region"] = origin.region
                if title_blank:
                    fields["title"] = f"{origin.name} to {destination.name}"

            tracked = dict(TRACKED_FIELDS)
            tracked.update(LINE_TRACKED_FIELDS if is_line else CIRCLE_TRACKED_FIELDS)
            details = diff_for_edit(record, fields, tracked)

            now = self.clock()
            fields["activity_log"] = append_entry(
                record.activity_log, "edited", user.email, details, timestamp=now
            )
            updated = await self.store.update(record.id, fields)
            log.info("shutdown updated", record_id=record.id, details=details,
                     regeocoded=cities_changed, user=user.email)
            return updated

    async def clear(self, record: Union[ShutdownRecord, str], user: UserProfile) -> ShutdownRecord:
        """
        Mark an active shutdown as cleared (one way).

        Raises:
            ShutdownPermissionError: the caller is view-only
            InvalidTransitionError: the record is already cleared
            RecordNotFoundError: the record is gone
        """
        with self._outcome("clear", user):
            require_mutate(user, "clear")
            record = await self._resolve(record)
            if not record.is_active:
                raise InvalidTransitionError(f"shutdown {record.id} is already cleared")

            now = self.clock()
            cleared = await self.store.update(record.id, {
                "status": "cleared",
                "cleared_by": user.email,
                "cleared_at": now,
                "activity_log": append_entry(
                    record.activity_log, "cleared", user.email, CLEARED_DETAILS, timestamp=now
                ),
            })
            log.info("shutdown cleared", record_id=record.id, user=user.email)
            return cleared

    async def delete(self, record: Union[ShutdownRecord, str], user: UserProfile, *,
                     confirmed: bool = False) -> None:
        """
        Permanently remove a shutdown. No tombstone and no log entry.

        Args:
            record: the record or its id; an id is removed without a read
            user: acting principal
            confirmed: the caller obtained explicit confirmation

        Raises:
            ShutdownPermissionError: the caller is view-only
            ShutdownValidationError: confirmation missing
            RecordNotFoundError: the record is already gone
        """
        with self._outcome("delete", user):
            require_mutate(user, "delete")
            if not confirmed:
                raise ShutdownValidationError("deleting a shutdown requires explicit confirmation")
            record_id = record if isinstance(record, str) else record.id
            await self.store.delete(record_id)
            log.info("shutdown deleted", record_id=record_id, user=user.email)

    # ------------------------------------------------------------------
    # helpers

    async def _resolve(self, record: Union[ShutdownRecord, str]) -> ShutdownRecord:
        if isinstance(record, ShutdownRecord):
            return record
        return await self.store.get(record)

    @contextmanager
    def _outcome(self, operation: str, user: Optional[UserProfile]) -> Iterator[None]:
        try:
            yield
        except ShutdownError as e:
            metrics.mutations_rejected.labels(operation=operation, reason=type(e).__name__).inc()
            log.warning("shutdown operation rejected", operation=operation,
                        user=user.email if user else None, error=str(e))
            raise
        metrics.mutations_total.labels(operation=operation).inc()

    @staticmethod
    def _coerce(model, data):
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) or "input"
                               for err in e.errors())
            raise ShutdownValidationError(f"invalid {fields}") from e

    def _check_reason(self, reason: Optional[str]) -> None:
        if reason not in self.allowed_reasons:
            raise ShutdownValidationError(f"unknown reason {reason!r}")

    def _check_action(self, action: Optional[str]) -> Optional[str]:
        """Validate an action tag; returns the action to store."""
        if self.scheme == "reason":
            # this deployment does not model actions
            return None
        if action not in ACTIONS:
            raise ShutdownValidationError(f"unknown action {action!r}")
        return action

    @staticmethod
    def _create_mode(data: CreateShutdownInput) -> str:
        has_city = not _blank(data.city)
        has_from, has_to = not _blank(data.from_city), not _blank(data.to_city)
        has_shape = data.shape is not None

        if sum((has_city, has_from or has_to, has_shape)) > 1:
            raise ShutdownValidationError(
                "give either a city, a from/to city pair, or an explicit shape"
            )
        if has_city:
            return "city"
        if has_from or has_to:
            if not (has_from and has_to):
                raise ShutdownValidationError("both from_city and to_city are required")
            return "road"
        if has_shape:
            return "shape"
        raise ShutdownValidationError("a city name is required")

    @staticmethod
    def _line_fields(origin: GeocodedPlace, destination: GeocodedPlace) -> Dict[str, Any]:
        return record_fields(LineShape(coordinates=(
            (origin.latitude, origin.longitude),
            (destination.latitude, destination.longitude),
        )))

    async def _lookup(self, request, parse):
        started = time.perf_counter()
        try:
            raw = await self.geocoder.invoke(request)
            return parse(raw)
        except GeocodingError as e:
            metrics.geocode_failures.inc()
            log.error("geocoding failed", error=str(e))
            raise
        finally:
            metrics.geocode_seconds.observe(time.perf_counter() - started)

    async def _geocode_city(self, city: str) -> GeocodedPlace:
        return await self._lookup(
            city_request(city, self.country, self.add_context),
            lambda raw: parse_city(raw, city),
        )

    async def _geocode_route(self, from_city: str, to_city: str) -> Tuple[GeocodedPlace, GeocodedPlace]:
        return await self._lookup(
            route_request(from_city, to_city, self.country, self.add_context),
            lambda raw: parse_route(raw, from_city, to_city),
        )
