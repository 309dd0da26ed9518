"""
Fleet records: drivers, buses, routes, route points, schedules and live locations.

Each operation is a direct read or write against the backend stores; the
repository only maps between stored documents and the dataclasses in
shared.types.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import time
from dataclasses import replace
from typing import Optional, Type, TypeVar

from dacite import DaciteError

from dashboard.documents import DocumentStore
from dashboard.errors import BackendError, NotFoundError
from dashboard.realtime import RealtimeStore
from dashboard.schemas import (
    BusIn,
    DriverIn,
    LiveLocationIn,
    RouteIn,
    RoutePointIn,
    ScheduleEntryIn,
)
from dashboard.storage import BlobStore
from shared.firebase_constants import (
    BUS_LOCATIONS_PATH,
    BUSES_COLLECTION,
    DRIVER_PHOTOS_PREFIX,
    DRIVERS_COLLECTION,
    ROUTE_POINTS_COLLECTION,
    ROUTES_COLLECTION,
    bus_location_path,
    schedule_collection,
)
from shared.json_utils import convert_keys
from shared.record_convert import from_document, to_document
from shared.types import (
    Bus,
    DashboardSummary,
    Driver,
    LiveLocation,
    Route,
    RoutePoint,
    ScheduleEntry,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def now_ms() -> int:
    return int(time.time() * 1000)


class FleetRepository:
    def __init__(
        self, documents: DocumentStore, realtime: RealtimeStore, blobs: BlobStore
    ):
        self.documents = documents
        self.realtime = realtime
        self.blobs = blobs

    # Generic document helpers

    def _list(
        self, collection: str, data_class: Type[T], filters: Optional[dict] = None
    ) -> list[T]:
        return [
            from_document(data_class, doc_id, data)
            for doc_id, data in self.documents.list(collection, filters)
        ]

    def _get(self, collection: str, data_class: Type[T], doc_id: str) -> T:
        data = self.documents.get(collection, doc_id)
        if data is None:
            raise NotFoundError(f"{data_class.__name__} {doc_id} not found")
        return from_document(data_class, doc_id, data)

    def _create(self, collection: str, record: T) -> T:
        record = replace(record, created_at=time.time())
        doc_id = self.documents.add(collection, to_document(record))
        logger.info("Created %s/%s", collection, doc_id)
        return replace(record, id=doc_id)

    def _update(
        self, collection: str, data_class: Type[T], doc_id: str, fields: dict
    ) -> T:
        self._get(collection, data_class, doc_id)
        self.documents.set(
            collection, doc_id, convert_keys(fields, "snake_to_camel"), merge=True
        )
        return self._get(collection, data_class, doc_id)

    def _delete(self, collection: str, data_class: Type[T], doc_id: str) -> None:
        self._get(collection, data_class, doc_id)
        self.documents.delete(collection, doc_id)
        logger.info("Deleted %s/%s", collection, doc_id)

    # Drivers

    def list_drivers(self) -> list[Driver]:
        return sorted(self._list(DRIVERS_COLLECTION, Driver), key=lambda d: d.name.lower())

    def get_driver(self, driver_id: str) -> Driver:
        return self._get(DRIVERS_COLLECTION, Driver, driver_id)

    def create_driver(self, payload: DriverIn) -> Driver:
        return self._create(DRIVERS_COLLECTION, Driver(**payload.model_dump()))

    def update_driver(self, driver_id: str, payload: DriverIn) -> Driver:
        return self._update(DRIVERS_COLLECTION, Driver, driver_id, payload.model_dump())

    def delete_driver(self, driver_id: str) -> None:
        driver = self.get_driver(driver_id)
        if driver.photo_path:
            self._delete_photo(driver.photo_path)
        self._delete(DRIVERS_COLLECTION, Driver, driver_id)

    def _delete_photo(self, path: str) -> None:
        try:
            self.blobs.delete(path)
        except NotFoundError:
            logger.info("Driver photo %s was already removed", path)

    def attach_driver_photo(
        self,
        driver_id: str,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> Driver:
        """Uploads a driver photo and records its storage path on the driver."""
        driver = self.get_driver(driver_id)
        extension = os.path.splitext(filename or "")[1].lower() or ".jpg"
        path = f"{DRIVER_PHOTOS_PREFIX}/{driver_id}/photo{extension}"
        content_type = (
            content_type
            or mimetypes.guess_type(f"photo{extension}")[0]
            or "application/octet-stream"
        )
        if driver.photo_path and driver.photo_path != path:
            self._delete_photo(driver.photo_path)
        self.blobs.upload_bytes(path, data, content_type)
        return self._update(DRIVERS_COLLECTION, Driver, driver_id, {"photo_path": path})

    def photo_url(self, driver: Driver, expires_in: int = 3600) -> Optional[str]:
        if not driver.photo_path:
            return None
        return self.blobs.signed_url(driver.photo_path, expires_in=expires_in)

    # Buses

    def list_buses(self) -> list[Bus]:
        return sorted(self._list(BUSES_COLLECTION, Bus), key=lambda b: b.bus_number)

    def get_bus(self, bus_id: str) -> Bus:
        return self._get(BUSES_COLLECTION, Bus, bus_id)

    def create_bus(self, payload: BusIn) -> Bus:
        return self._create(BUSES_COLLECTION, Bus(**payload.model_dump()))

    def update_bus(self, bus_id: str, payload: BusIn) -> Bus:
        return self._update(
            BUSES_COLLECTION, Bus, bus_id, payload.model_dump(mode="json")
        )

    def delete_bus(self, bus_id: str) -> None:
        self._delete(BUSES_COLLECTION, Bus, bus_id)

    # Routes and route points

    def list_routes(self) -> list[Route]:
        return sorted(self._list(ROUTES_COLLECTION, Route), key=lambda r: r.name.lower())

    def get_route(self, route_id: str) -> Route:
        return self._get(ROUTES_COLLECTION, Route, route_id)

    def create_route(self, payload: RouteIn) -> Route:
        return self._create(ROUTES_COLLECTION, Route(**payload.model_dump()))

    def update_route(self, route_id: str, payload: RouteIn) -> Route:
        return self._update(ROUTES_COLLECTION, Route, route_id, payload.model_dump())

    def delete_route(self, route_id: str) -> None:
        self._delete(ROUTES_COLLECTION, Route, route_id)

    def list_route_points(self) -> list[RoutePoint]:
        points = self._list(ROUTE_POINTS_COLLECTION, RoutePoint)
        return sorted(points, key=lambda p: (p.route_id or "", p.order, p.name))

    def route_points(self, route_id: str) -> list[RoutePoint]:
        """Points of one route in travel order."""
        points = self._list(
            ROUTE_POINTS_COLLECTION, RoutePoint, {"routeId": route_id}
        )
        return sorted(points, key=lambda p: (p.order, p.name))

    def get_route_point(self, point_id: str) -> RoutePoint:
        return self._get(ROUTE_POINTS_COLLECTION, RoutePoint, point_id)

    def create_route_point(self, payload: RoutePointIn) -> RoutePoint:
        return self._create(ROUTE_POINTS_COLLECTION, RoutePoint(**payload.model_dump()))

    def update_route_point(self, point_id: str, payload: RoutePointIn) -> RoutePoint:
        return self._update(
            ROUTE_POINTS_COLLECTION, RoutePoint, point_id, payload.model_dump()
        )

    def delete_route_point(self, point_id: str) -> None:
        self._delete(ROUTE_POINTS_COLLECTION, RoutePoint, point_id)

    # Schedules

    def list_schedule(self, route_id: str) -> list[ScheduleEntry]:
        self.get_route(route_id)
        entries = self._list(schedule_collection(route_id), ScheduleEntry)
        return sorted(entries, key=lambda e: (e.departure_time, e.day_type.value))

    def add_schedule_entry(
        self, route_id: str, payload: ScheduleEntryIn
    ) -> ScheduleEntry:
        self.get_route(route_id)
        entry = ScheduleEntry(route_id=route_id, **payload.model_dump())
        return self._create(schedule_collection(route_id), entry)

    def delete_schedule_entry(self, route_id: str, entry_id: str) -> None:
        self._delete(schedule_collection(route_id), ScheduleEntry, entry_id)

    # Live locations

    @staticmethod
    def _to_live_location(bus_id: str, data: dict) -> LiveLocation:
        return from_document(LiveLocation, None, {**data, "busId": bus_id})

    def list_live_locations(self) -> list[LiveLocation]:
        """Every reporting bus; nodes the driver app wrote incompletely are skipped."""
        nodes = self.realtime.get(BUS_LOCATIONS_PATH) or {}
        locations = []
        for bus_id, data in nodes.items():
            if not isinstance(data, dict):
                continue
            try:
                locations.append(self._to_live_location(bus_id, data))
            except DaciteError as e:
                logger.warning("Skipping live location for bus %s: %s", bus_id, e)
        return sorted(locations, key=lambda loc: loc.bus_id)

    def get_live_location(self, bus_id: str) -> LiveLocation:
        data = self.realtime.get(bus_location_path(bus_id))
        if not isinstance(data, dict):
            raise NotFoundError(f"No live location for bus {bus_id}")
        try:
            return self._to_live_location(bus_id, data)
        except DaciteError as e:
            raise BackendError(f"Malformed live location for bus {bus_id}: {e}") from e

    def publish_live_location(
        self, bus_id: str, payload: LiveLocationIn
    ) -> LiveLocation:
        location = LiveLocation(
            bus_id=bus_id,
            latitude=payload.latitude,
            longitude=payload.longitude,
            timestamp=payload.timestamp if payload.timestamp is not None else now_ms(),
            speed=payload.speed,
            heading=payload.heading,
        )
        self.realtime.set(
            bus_location_path(bus_id), to_document(location, exclude=("bus_id",))
        )
        return location

    def clear_live_location(self, bus_id: str) -> None:
        self.realtime.delete(bus_location_path(bus_id))

    def fresh_locations(
        self, stale_after_seconds: int, now: Optional[int] = None
    ) -> list[LiveLocation]:
        """Locations reported within the last `stale_after_seconds`."""
        now = now if now is not None else now_ms()
        cutoff = now - stale_after_seconds * 1000
        return [loc for loc in self.list_live_locations() if loc.timestamp >= cutoff]

    def summary(
        self, stale_after_seconds: int, now: Optional[int] = None
    ) -> DashboardSummary:
        drivers = self.list_drivers()
        return DashboardSummary(
            driver_count=len(drivers),
            bus_count=len(self.list_buses()),
            route_count=len(self.list_routes()),
            route_point_count=len(self.list_route_points()),
            active_bus_count=len(self.fresh_locations(stale_after_seconds, now)),
            unassigned_driver_count=sum(1 for d in drivers if not d.bus_id),
        )
