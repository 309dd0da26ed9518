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

# Firestore collections and Realtime Database paths used by the dashboard.

DRIVERS_COLLECTION = "drivers"
BUSES_COLLECTION = "buses"
ROUTES_COLLECTION = "routes"
ROUTE_POINTS_COLLECTION = "route_points"
USERS_COLLECTION = "users"

# Sub-collection of a route document: routes/{routeId}/schedule
SCHEDULE_SUBCOLLECTION = "schedule"

# Realtime Database node holding one child per bus: busLocations/{busId}
BUS_LOCATIONS_PATH = "busLocations"

# Cloud Storage prefix for driver photos: drivers/{driverId}/photo.<ext>
DRIVER_PHOTOS_PREFIX = "drivers"


def schedule_collection(route_id: str) -> str:
    return f"{ROUTES_COLLECTION}/{route_id}/{SCHEDULE_SUBCOLLECTION}"


def bus_location_path(bus_id: str) -> str:
    return f"{BUS_LOCATIONS_PATH}/{bus_id}"
