# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional


class BusStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"


class DayType(StrEnum):
    WEEKDAY = "weekday"
    WEEKEND = "weekend"
    DAILY = "daily"


@dataclass
class Driver:
    """A bus driver as stored in the `drivers` collection."""

    name: str
    email: str
    phone: str = ""
    license_number: str = ""
    bus_id: Optional[str] = None
    photo_path: Optional[str] = None
    id: str = ""
    created_at: float = 0.0


@dataclass
class Bus:
    """A vehicle in the fleet, optionally running a route."""

    bus_number: str
    plate_number: str
    label: str = ""
    capacity: Optional[int] = None
    route_id: Optional[str] = None
    status: BusStatus = BusStatus.ACTIVE
    id: str = ""
    created_at: float = 0.0


@dataclass
class Route:
    name: str
    description: str = ""
    active: bool = True
    id: str = ""
    created_at: float = 0.0


@dataclass
class RoutePoint:
    """A stop or waypoint. `order` positions it within its route."""

    name: str
    latitude: float
    longitude: float
    route_id: Optional[str] = None
    order: int = 0
    id: str = ""
    created_at: float = 0.0


@dataclass
class ScheduleEntry:
    """A departure time on a route, stored under routes/{routeId}/schedule."""

    route_id: str
    departure_time: str
    day_type: DayType = DayType.WEEKDAY
    bus_id: Optional[str] = None
    note: str = ""
    id: str = ""
    created_at: float = 0.0


@dataclass
class LiveLocation:
    """
    The last reported position of a bus.

    Held in the Realtime Database rather than Firestore; `timestamp` is in
    epoch milliseconds, as written by the driver app.
    """

    bus_id: str
    latitude: float
    longitude: float
    timestamp: int
    speed: Optional[float] = None
    heading: Optional[float] = None


@dataclass
class UserProfile:
    uid: str
    email: str
    display_name: str = ""
    phone: str = ""
    created_at: float = 0.0


@dataclass
class UserAccount:
    """An authentication identity, as returned by the auth provider."""

    uid: str
    email: str
    display_name: str = ""


@dataclass
class Session:
    uid: str
    id_token: str
    expires_in: int = 3600


@dataclass
class DashboardSummary:
    driver_count: int
    bus_count: int
    route_count: int
    route_point_count: int
    active_bus_count: int
    unassigned_driver_count: int
