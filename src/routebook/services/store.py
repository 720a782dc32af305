"""Owner of the persisted application data and its weekly reset policy.

Every operation reads the current aggregate, builds a new one and writes it
back whole. The new aggregate is published only once the write succeeded, so
a failed write leaves the store exactly as it was before the call.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from pydantic import ValidationError

from ..config import settings
from ..models.domain import (
    AppData,
    AttendanceMark,
    Client,
    DayOfWeek,
    Location,
    Route,
    WeeklyStatus,
    default_app_data,
)
from ..persistence.codec import decode_app_data, encode_app_data
from ..persistence.storage import KeyValueStorage, StorageReadError, StorageWriteError
from ..schemas.clients import blank_to_none
from .ids import IdGenerator, UuidIdGenerator, fresh_id
from .week import compute_week_key

logger = logging.getLogger(__name__)

CLIENT_FIELDS = frozenset({"name", "phone", "location"})
ROUTE_FIELDS = frozenset({"name", "days_of_week", "client_order"})


def iso_timestamp(moment: datetime) -> str:
    """Render ``moment`` as a UTC ISO-8601 string with millisecond precision."""

    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _normalize_location(location: Location) -> Location:
    return replace(location, address=blank_to_none(location.address))


class AttendanceStore:
    """Reads, mutates and persists the single :class:`AppData` aggregate."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        clock: Callable[[], datetime] | None = None,
        id_generator: IdGenerator | None = None,
        storage_key: str | None = None,
    ) -> None:
        self.storage = storage
        self.clock = clock or datetime.now
        self.id_generator = id_generator or UuidIdGenerator()
        self.storage_key = storage_key or settings.storage_key
        self._data: AppData | None = None
        self._lock = threading.RLock()

    @property
    def data(self) -> AppData:
        with self._lock:
            return self._current()

    # Loading -----------------------------------------------------------------

    def load(self) -> AppData:
        """Load the stored aggregate, clearing attendance when the week changed."""

        with self._lock:
            stored = self._read_stored()
            expected_key = compute_week_key(self.clock())
            if stored.weekly_status.week_key != expected_key:
                self._roll_over(stored, expected_key)
            else:
                self._data = stored
            logger.info(
                "Application data loaded: %d clients, %d routes",
                len(self._data.clients),
                len(self._data.routes),
            )
            return self._data

    def refresh(self) -> AppData:
        logger.info("Manual refresh requested")
        return self.load()

    def _read_stored(self) -> AppData:
        try:
            payload = self.storage.get(self.storage_key)
        except StorageReadError as exc:
            logger.warning("Unable to read stored data, starting from an empty state: %s", exc)
            return default_app_data()
        if payload is None:
            return default_app_data()
        try:
            return decode_app_data(payload)
        except StorageReadError as exc:
            logger.warning("Stored data is corrupt, starting from an empty state: %s", exc)
            self._stash_corrupt(payload)
            return default_app_data()

    def _stash_corrupt(self, payload: str) -> None:
        backup_key = f"{self.storage_key}_corrupt"
        try:
            self.storage.set(backup_key, payload)
            logger.info("Corrupt data kept under '%s'", backup_key)
        except StorageWriteError as exc:
            logger.warning("Unable to keep a copy of the corrupt data: %s", exc)

    # Persistence -------------------------------------------------------------

    def _current(self) -> AppData:
        """The cached aggregate, reset first if the week changed since it was loaded."""

        if self._data is None:
            return self.load()
        expected_key = compute_week_key(self.clock())
        if self._data.weekly_status.week_key != expected_key:
            return self._roll_over(self._data, expected_key)
        return self._data

    def _roll_over(self, data: AppData, expected_key: str) -> AppData:
        previous_key = data.weekly_status.week_key
        reset = replace(data, weekly_status=WeeklyStatus(week_key=expected_key, attended={}))
        self._commit(reset)
        logger.info("Week changed from '%s' to '%s'; attendance reset automatically", previous_key, expected_key)
        return reset

    def _commit(self, new_data: AppData) -> None:
        try:
            payload = encode_app_data(new_data)
        except ValidationError as exc:
            raise StorageWriteError(f"Unable to serialise application data: {exc.error_count()} error(s)") from exc
        try:
            self.storage.set(self.storage_key, payload)
        except StorageWriteError:
            logger.exception("Failed to persist application data; change discarded")
            raise
        self._data = new_data

    # Clients -----------------------------------------------------------------

    def add_client(self, name: str, location: Location, phone: Optional[str] = None) -> Client:
        with self._lock:
            data = self._current()
            client = Client(
                id=fresh_id(self.id_generator, {existing.id for existing in data.clients}),
                name=name.strip(),
                phone=blank_to_none(phone),
                location=_normalize_location(location),
                created_at=iso_timestamp(self.clock()),
            )
            self._commit(replace(data, clients=[*data.clients, client]))
            logger.info("Client '%s' added with id %s", client.name, client.id)
            return client

    def update_client(self, client_id: str, **fields) -> bool:
        """Merge ``fields`` into the client; unknown ids are ignored."""

        unknown = set(fields) - CLIENT_FIELDS
        if unknown:
            raise TypeError(f"Unsupported client field(s): {', '.join(sorted(unknown))}")
        if "phone" in fields:
            fields["phone"] = blank_to_none(fields["phone"])
        if fields.get("name") is not None:
            fields["name"] = fields["name"].strip()
        if fields.get("location") is not None:
            fields["location"] = _normalize_location(fields["location"])

        with self._lock:
            data = self._current()
            if not any(client.id == client_id for client in data.clients):
                logger.info("Client %s not found; update ignored", client_id)
                return False
            clients = [replace(client, **fields) if client.id == client_id else client for client in data.clients]
            self._commit(replace(data, clients=clients))
            logger.info("Client %s updated", client_id)
            return True

    def delete_client(self, client_id: str) -> bool:
        """Remove the client and its id from every route's client order."""

        with self._lock:
            data = self._current()
            clients = [client for client in data.clients if client.id != client_id]
            routes = [
                replace(route, client_order=[cid for cid in route.client_order if cid != client_id])
                if client_id in route.client_order
                else route
                for route in data.routes
            ]
            existed = len(clients) != len(data.clients)
            if not existed and all(new is old for new, old in zip(routes, data.routes)):
                logger.info("Client %s not found; delete ignored", client_id)
                return False
            self._commit(replace(data, clients=clients, routes=routes))
            logger.info("Client %s removed", client_id)
            return existed

    # Routes ------------------------------------------------------------------

    def add_route(
        self,
        name: str,
        days_of_week: Sequence[DayOfWeek],
        client_order: Sequence[str] = (),
    ) -> Route:
        with self._lock:
            data = self._current()
            route = Route(
                id=fresh_id(self.id_generator, {existing.id for existing in data.routes}),
                name=name.strip(),
                days_of_week=list(days_of_week),
                client_order=list(client_order),
            )
            self._commit(replace(data, routes=[*data.routes, route]))
            logger.info("Route '%s' added with id %s", route.name, route.id)
            return route

    def update_route(self, route_id: str, **fields) -> bool:
        """Merge ``fields`` into the route; unknown ids are ignored."""

        unknown = set(fields) - ROUTE_FIELDS
        if unknown:
            raise TypeError(f"Unsupported route field(s): {', '.join(sorted(unknown))}")
        if fields.get("name") is not None:
            fields["name"] = fields["name"].strip()
        for key in ("days_of_week", "client_order"):
            if fields.get(key) is not None:
                fields[key] = list(fields[key])

        with self._lock:
            data = self._current()
            if not any(route.id == route_id for route in data.routes):
                logger.info("Route %s not found; update ignored", route_id)
                return False
            routes = [replace(route, **fields) if route.id == route_id else route for route in data.routes]
            self._commit(replace(data, routes=routes))
            logger.info("Route %s updated", route_id)
            return True

    def delete_route(self, route_id: str) -> bool:
        """Remove the route together with its attendance for the week."""

        with self._lock:
            data = self._current()
            routes = [route for route in data.routes if route.id != route_id]
            existed = len(routes) != len(data.routes)
            attended = dict(data.weekly_status.attended)
            had_attendance = attended.pop(route_id, None) is not None
            if not existed and not had_attendance:
                logger.info("Route %s not found; delete ignored", route_id)
                return False
            weekly_status = replace(data.weekly_status, attended=attended)
            self._commit(replace(data, routes=routes, weekly_status=weekly_status))
            logger.info("Route %s removed", route_id)
            return existed

    # Attendance --------------------------------------------------------------

    def toggle_client_attended(self, route_id: str, client_id: str) -> AttendanceMark:
        """Flip the client's mark on the route, stamping the time of the change."""

        with self._lock:
            data = self._current()
            route_marks = data.weekly_status.attended.get(route_id, {})
            current = route_marks.get(client_id)
            mark = AttendanceMark(
                checked=not (current.checked if current else False),
                checked_at=iso_timestamp(self.clock()),
            )
            attended = dict(data.weekly_status.attended)
            attended[route_id] = {**route_marks, client_id: mark}
            weekly_status = replace(data.weekly_status, attended=attended)
            self._commit(replace(data, weekly_status=weekly_status))
            logger.info("Client %s on route %s marked %s", client_id, route_id, "attended" if mark.checked else "pending")
            return mark

    def reset_week(self) -> WeeklyStatus:
        with self._lock:
            data = self._current()
            weekly_status = WeeklyStatus(week_key=compute_week_key(self.clock()), attended={})
            self._commit(replace(data, weekly_status=weekly_status))
            logger.info("Week %s reset manually", weekly_status.week_key)
            return weekly_status
