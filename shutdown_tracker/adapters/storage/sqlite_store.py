"""
SQLite-based entity store for the shutdown tracker.

This module implements the shutdown and user-profile store ports on
top of aiosqlite. Geometry coordinates and the activity log live in
JSON text columns; timestamps are ISO 8601 strings.
"""

import json
import uuid
from typing import Any, Dict, List, Optional, Tuple

import aiosqlite
from pydantic import ValidationError

from shutdown_tracker.core.errors import RecordNotFoundError, ShutdownValidationError
from shutdown_tracker.core.models import ShutdownRecord, UserProfile
from shutdown_tracker.observability.logging_setup import get_logger

log = get_logger("shutdowns.store")

# SQLite schema
SCHEMA = """
CREATE TABLE IF NOT EXISTS shutdowns (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    title TEXT NOT NULL DEFAULT '',
    geometry_type TEXT NOT NULL,
    center_lat REAL,
    center_lng REAL,
    radius_km REAL,
    coordinates TEXT,
    reason TEXT,
    action TEXT,
    status TEXT NOT NULL DEFAULT 'active',
    region TEXT,
    notes TEXT,
    from_city TEXT,
    to_city TEXT,
    created_by TEXT,
    created_at TEXT,
    cleared_by TEXT,
    cleared_at TEXT,
    activity_log TEXT NOT NULL DEFAULT '[]'
);
CREATE INDEX IF NOT EXISTS idx_shutdowns_created ON shutdowns(created_at);
CREATE INDEX IF NOT EXISTS idx_shutdowns_status ON shutdowns(status);

CREATE TABLE IF NOT EXISTS users (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    email TEXT NOT NULL UNIQUE,
    full_name TEXT,
    role TEXT,
    access_level TEXT,
    created_at TEXT
);
"""

SHUTDOWN_COLUMNS: Tuple[str, ...] = (
    "id", "title", "geometry_type", "center_lat", "center_lng", "radius_km",
    "coordinates", "reason", "action", "status", "region", "notes",
    "from_city", "to_city", "created_by", "created_at", "cleared_by",
    "cleared_at", "activity_log",
)
USER_COLUMNS: Tuple[str, ...] = (
    "id", "email", "full_name", "role", "access_level", "created_at",
)
JSON_COLUMNS = ("coordinates", "activity_log")


def _order_clause(order: str, columns: Tuple[str, ...]) -> str:
    """Translate "-created_at" style ordering into SQL, newest rows last on ties."""
    descending = order.startswith("-")
    column = order.lstrip("-")
    if column not in columns:
        raise ShutdownValidationError(f"cannot order by {column!r}")
    direction = "DESC" if descending else "ASC"
    return f"ORDER BY {column} {direction}, seq {direction}"


async def init_schema(path: str) -> None:
    """Create both tables if they do not exist yet."""
    async with aiosqlite.connect(path) as db:
        await db.executescript(SCHEMA)
        await db.commit()
    log.info("store schema ready", path=path)


class SQLiteShutdownStore:
    """SQLite-backed shutdown record store"""

    def __init__(self, path: str):
        """
        Args:
            path: SQLite database file path
        """
        self.path = path

    async def init(self) -> None:
        await init_schema(self.path)

    @staticmethod
    def _to_row(record: ShutdownRecord) -> Tuple[Any, ...]:
        data = record.model_dump(mode="json")
        for column in JSON_COLUMNS:
            if data[column] is not None:
                data[column] = json.dumps(data[column])
        return tuple(data[c] for c in SHUTDOWN_COLUMNS)

    @staticmethod
    def _from_row(row: aiosqlite.Row) -> ShutdownRecord:
        data = {c: row[c] for c in SHUTDOWN_COLUMNS}
        for column in JSON_COLUMNS:
            if data[column] is not None:
                data[column] = json.loads(data[column])
        return ShutdownRecord.model_validate(data)

    @staticmethod
    def _build(data: Dict[str, Any]) -> ShutdownRecord:
        try:
            return ShutdownRecord.model_validate(data)
        except ValidationError as e:
            raise ShutdownValidationError(f"invalid shutdown record: {e.error_count()} error(s)") from e

    async def list(self, order: str = "-created_at") -> List[ShutdownRecord]:
        clause = _order_clause(order, SHUTDOWN_COLUMNS)
        async with aiosqlite.connect(self.path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT {', '.join(SHUTDOWN_COLUMNS)} FROM shutdowns {clause}"
            )
            rows = await cursor.fetchall()
        return [self._from_row(row) for row in rows]

    async def _fetch(self, db: aiosqlite.Connection, record_id: str) -> Optional[ShutdownRecord]:
        db.row_factory = aiosqlite.Row
        cursor = await db.execute(
            f"SELECT {', '.join(SHUTDOWN_COLUMNS)} FROM shutdowns WHERE id = ?",
            (record_id,)
        )
        row = await cursor.fetchone()
        return self._from_row(row) if row else None

    async def get(self, record_id: str) -> ShutdownRecord:
        async with aiosqlite.connect(self.path) as db:
            record = await self._fetch(db, record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    async def create(self, fields: Dict[str, Any]) -> ShutdownRecord:
        """
        Insert a new record under a fresh id.

        Returns:
            The stored record
        """
        record = self._build({**fields, "id": uuid.uuid4().hex})
        placeholders = ", ".join("?" for _ in SHUTDOWN_COLUMNS)

        async with aiosqlite.connect(self.path) as db:
            await db.execute(
                f"INSERT INTO shutdowns ({', '.join(SHUTDOWN_COLUMNS)}) VALUES ({placeholders})",
                self._to_row(record)
            )
            await db.commit()

        log.debug("shutdown row inserted", record_id=record.id)
        return record

    async def update(self, record_id: str, patch: Dict[str, Any]) -> ShutdownRecord:
        """
        Merge ``patch`` into the stored record and write it back.

        Raises:
            RecordNotFoundError: no record with this id
        """
        async with aiosqlite.connect(self.path) as db:
            current = await self._fetch(db, record_id)
            if current is None:
                raise RecordNotFoundError(record_id)

            merged = dict(current)
            merged.update(patch)
            merged["id"] = current.id
            record = self._build(merged)

            assignments = ", ".join(f"{c} = ?" for c in SHUTDOWN_COLUMNS[1:])
            await db.execute(
                f"UPDATE shutdowns SET {assignments} WHERE id = ?",
                self._to_row(record)[1:] + (record_id,)
            )
            await db.commit()
        return record

    async def delete(self, record_id: str) -> None:
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute("DELETE FROM shutdowns WHERE id = ?", (record_id,))
            await db.commit()
            if cursor.rowcount == 0:
                raise RecordNotFoundError(record_id)

    async def get_count(self) -> int:
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM shutdowns")
            result = await cursor.fetchone()
            return result[0] if result else 0


class SQLiteUserStore:
    """SQLite-backed user profile store"""

    def __init__(self, path: str):
        self.path = path

    async def init(self) -> None:
        await init_schema(self.path)

    @staticmethod
    def _from_row(row: aiosqlite.Row) -> UserProfile:
        return UserProfile.model_validate({c: row[c] for c in USER_COLUMNS})

    async def list(self, order: str = "-created_at") -> List[UserProfile]:
        clause = _order_clause(order, USER_COLUMNS)
        async with aiosqlite.connect(self.path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(f"SELECT {', '.join(USER_COLUMNS)} FROM users {clause}")
            rows = await cursor.fetchall()
        return [self._from_row(row) for row in rows]

    async def get_by_email(self, email: str) -> Optional[UserProfile]:
        async with aiosqlite.connect(self.path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT {', '.join(USER_COLUMNS)} FROM users WHERE lower(email) = lower(?)",
                (email,)
            )
            row = await cursor.fetchone()
        return self._from_row(row) if row else None

    async def add(self, profile: UserProfile) -> UserProfile:
        """
        Register a profile, or return the existing one for that email.

        Returns:
            The stored profile
        """
        existing = await self.get_by_email(profile.email)
        if existing is not None:
            return existing

        stored = profile.model_copy(update={"id": profile.id or uuid.uuid4().hex})
        data = stored.model_dump(mode="json")
        async with aiosqlite.connect(self.path) as db:
            await db.execute(
                f"INSERT INTO users ({', '.join(USER_COLUMNS)}) VALUES (?, ?, ?, ?, ?, ?)",
                tuple(data[c] for c in USER_COLUMNS)
            )
            await db.commit()
        log.info("user profile added", email=stored.email)
        return stored

    async def update(self, user_id: str, patch: Dict[str, Any]) -> UserProfile:
        """
        Update the access level of a user.

        Raises:
            RecordNotFoundError: no user with this id
        """
        unknown = set(patch) - {"access_level"}
        if unknown:
            raise ShutdownValidationError(f"cannot update user fields {sorted(unknown)}")

        async with aiosqlite.connect(self.path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "UPDATE users SET access_level = ? WHERE id = ?",
                (patch.get("access_level"), user_id)
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise RecordNotFoundError(user_id, kind="user")
            cursor = await db.execute(
                f"SELECT {', '.join(USER_COLUMNS)} FROM users WHERE id = ?", (user_id,)
            )
            row = await cursor.fetchone()
        return self._from_row(row)
