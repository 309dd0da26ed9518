"""
JSON API routes for the dashboard's records and accounts.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Header, UploadFile

from dashboard import accounts
from dashboard.auth import AuthClient
from dashboard.config import Settings, get_settings
from dashboard.dependencies import get_auth_client, get_document_store, get_repository
from dashboard.documents import DocumentStore
from dashboard.errors import AuthError
from dashboard.navigation import SCREENS
from dashboard.repository import FleetRepository
from dashboard.schemas import (
    BusIn,
    DeleteResponse,
    DriverIn,
    DriverResponse,
    LiveLocationIn,
    ProfileUpdate,
    RouteDetailResponse,
    RouteIn,
    RoutePointIn,
    ScheduleEntryIn,
    ScreenInfo,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
)
from shared.types import (
    Bus,
    DashboardSummary,
    Driver,
    LiveLocation,
    Route,
    RoutePoint,
    ScheduleEntry,
    UserProfile,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _bearer_uid(authorization: Optional[str], auth: AuthClient) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthError("Missing bearer token")
    return accounts.current_uid(auth, token)


def require_session(
    authorization: Optional[str] = Header(None),
    auth: AuthClient = Depends(get_auth_client),
) -> str:
    """Rejects writes from callers without a valid Firebase ID token."""
    return _bearer_uid(authorization, auth)


signed_in = [Depends(require_session)]


# Configuration and navigation


@router.get("/firebase-config")
def firebase_config(settings: Settings = Depends(get_settings)):
    """Public configuration for the web and mobile Firebase clients."""
    return settings.web_client_config()


@router.get("/screens", response_model=list[ScreenInfo])
def list_screens():
    return [
        ScreenInfo(
            path=screen.path,
            name=screen.name,
            title=screen.title,
            in_sidebar=screen.in_sidebar,
        )
        for screen in SCREENS
    ]


@router.get("/dashboard", response_model=DashboardSummary)
def dashboard_summary(
    repo: FleetRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    return repo.summary(settings.live_location_stale_after_seconds)


# Drivers


@router.get("/drivers", response_model=list[Driver])
def list_drivers(repo: FleetRepository = Depends(get_repository)):
    return repo.list_drivers()


@router.post(
    "/drivers",
    response_model=Driver,
    status_code=201,
    dependencies=signed_in,
)
def create_driver(payload: DriverIn, repo: FleetRepository = Depends(get_repository)):
    return repo.create_driver(payload)


@router.get("/drivers/{driver_id}", response_model=DriverResponse)
def get_driver(
    driver_id: str,
    repo: FleetRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    driver = repo.get_driver(driver_id)
    return DriverResponse(
        driver=driver,
        photo_url=repo.photo_url(driver, expires_in=settings.signed_url_expires_in),
    )


@router.put(
    "/drivers/{driver_id}",
    response_model=Driver,
    dependencies=signed_in,
)
def update_driver(
    driver_id: str, payload: DriverIn, repo: FleetRepository = Depends(get_repository)
):
    return repo.update_driver(driver_id, payload)


@router.delete(
    "/drivers/{driver_id}",
    response_model=DeleteResponse,
    dependencies=signed_in,
)
def delete_driver(driver_id: str, repo: FleetRepository = Depends(get_repository)):
    repo.delete_driver(driver_id)
    return DeleteResponse()


@router.post(
    "/drivers/{driver_id}/photo",
    response_model=DriverResponse,
    dependencies=signed_in,
)
async def upload_driver_photo(
    driver_id: str,
    file: UploadFile = File(...),
    repo: FleetRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    data = await file.read()
    driver = repo.attach_driver_photo(
        driver_id, file.filename or "", data, file.content_type
    )
    return DriverResponse(
        driver=driver,
        photo_url=repo.photo_url(driver, expires_in=settings.signed_url_expires_in),
    )


# Buses


@router.get("/buses", response_model=list[Bus])
def list_buses(repo: FleetRepository = Depends(get_repository)):
    return repo.list_buses()


@router.post(
    "/buses",
    response_model=Bus,
    status_code=201,
    dependencies=signed_in,
)
def create_bus(payload: BusIn, repo: FleetRepository = Depends(get_repository)):
    return repo.create_bus(payload)


@router.get("/buses/{bus_id}", response_model=Bus)
def get_bus(bus_id: str, repo: FleetRepository = Depends(get_repository)):
    return repo.get_bus(bus_id)


@router.put(
    "/buses/{bus_id}",
    response_model=Bus,
    dependencies=signed_in,
)
def update_bus(
    bus_id: str, payload: BusIn, repo: FleetRepository = Depends(get_repository)
):
    return repo.update_bus(bus_id, payload)


@router.delete(
    "/buses/{bus_id}",
    response_model=DeleteResponse,
    dependencies=signed_in,
)
def delete_bus(bus_id: str, repo: FleetRepository = Depends(get_repository)):
    repo.delete_bus(bus_id)
    return DeleteResponse()


# Routes, route points and schedules


@router.get("/routes", response_model=list[Route])
def list_routes(repo: FleetRepository = Depends(get_repository)):
    return repo.list_routes()


@router.post(
    "/routes",
    response_model=Route,
    status_code=201,
    dependencies=signed_in,
)
def create_route(payload: RouteIn, repo: FleetRepository = Depends(get_repository)):
    return repo.create_route(payload)


@router.get("/routes/{route_id}", response_model=RouteDetailResponse)
def get_route(route_id: str, repo: FleetRepository = Depends(get_repository)):
    return RouteDetailResponse(
        route=repo.get_route(route_id),
        points=repo.route_points(route_id),
        schedule=repo.list_schedule(route_id),
    )


@router.put(
    "/routes/{route_id}",
    response_model=Route,
    dependencies=signed_in,
)
def update_route(
    route_id: str, payload: RouteIn, repo: FleetRepository = Depends(get_repository)
):
    return repo.update_route(route_id, payload)


@router.delete(
    "/routes/{route_id}",
    response_model=DeleteResponse,
    dependencies=signed_in,
)
def delete_route(route_id: str, repo: FleetRepository = Depends(get_repository)):
    repo.delete_route(route_id)
    return DeleteResponse()


@router.get("/route-points", response_model=list[RoutePoint])
def list_route_points(repo: FleetRepository = Depends(get_repository)):
    return repo.list_route_points()


@router.post(
    "/route-points",
    response_model=RoutePoint,
    status_code=201,
    dependencies=signed_in,
)
def create_route_point(
    payload: RoutePointIn, repo: FleetRepository = Depends(get_repository)
):
    return repo.create_route_point(payload)


@router.put(
    "/route-points/{point_id}",
    response_model=RoutePoint,
    dependencies=signed_in,
)
def update_route_point(
    point_id: str,
    payload: RoutePointIn,
    repo: FleetRepository = Depends(get_repository),
):
    return repo.update_route_point(point_id, payload)


@router.delete(
    "/route-points/{point_id}",
    response_model=DeleteResponse,
    dependencies=signed_in,
)
def delete_route_point(point_id: str, repo: FleetRepository = Depends(get_repository)):
    repo.delete_route_point(point_id)
    return DeleteResponse()


@router.get("/routes/{route_id}/schedule", response_model=list[ScheduleEntry])
def list_schedule(route_id: str, repo: FleetRepository = Depends(get_repository)):
    return repo.list_schedule(route_id)


@router.post(
    "/routes/{route_id}/schedule",
    response_model=ScheduleEntry,
    status_code=201,
    dependencies=signed_in,
)
def add_schedule_entry(
    route_id: str,
    payload: ScheduleEntryIn,
    repo: FleetRepository = Depends(get_repository),
):
    return repo.add_schedule_entry(route_id, payload)


@router.delete(
    "/routes/{route_id}/schedule/{entry_id}",
    response_model=DeleteResponse,
    dependencies=signed_in,
)
def delete_schedule_entry(
    route_id: str, entry_id: str, repo: FleetRepository = Depends(get_repository)
):
    repo.delete_schedule_entry(route_id, entry_id)
    return DeleteResponse()


# Live locations


@router.get("/bus-locations", response_model=list[LiveLocation])
def list_bus_locations(repo: FleetRepository = Depends(get_repository)):
    return repo.list_live_locations()


@router.get("/bus-locations/{bus_id}", response_model=LiveLocation)
def get_bus_location(bus_id: str, repo: FleetRepository = Depends(get_repository)):
    return repo.get_live_location(bus_id)


@router.put(
    "/bus-locations/{bus_id}",
    response_model=LiveLocation,
    dependencies=signed_in,
)
def publish_bus_location(
    bus_id: str,
    payload: LiveLocationIn,
    repo: FleetRepository = Depends(get_repository),
):
    return repo.publish_live_location(bus_id, payload)


@router.delete(
    "/bus-locations/{bus_id}",
    response_model=DeleteResponse,
    dependencies=signed_in,
)
def clear_bus_location(bus_id: str, repo: FleetRepository = Depends(get_repository)):
    repo.clear_live_location(bus_id)
    return DeleteResponse()


# Accounts


@router.post("/auth/signup", response_model=UserProfile, status_code=201)
def signup(
    payload: SignUpRequest,
    auth: AuthClient = Depends(get_auth_client),
    documents: DocumentStore = Depends(get_document_store),
):
    return accounts.sign_up(auth, documents, payload)


@router.post("/auth/signin", response_model=SessionResponse)
def signin(payload: SignInRequest, auth: AuthClient = Depends(get_auth_client)):
    session = accounts.sign_in(auth, payload)
    return SessionResponse(
        uid=session.uid, id_token=session.id_token, expires_in=session.expires_in
    )


@router.get("/auth/profile", response_model=UserProfile)
def get_profile(
    authorization: Optional[str] = Header(None),
    auth: AuthClient = Depends(get_auth_client),
    documents: DocumentStore = Depends(get_document_store),
):
    uid = _bearer_uid(authorization, auth)
    return accounts.get_profile(auth, documents, uid)


@router.put("/auth/profile", response_model=UserProfile)
def update_profile(
    payload: ProfileUpdate,
    authorization: Optional[str] = Header(None),
    auth: AuthClient = Depends(get_auth_client),
    documents: DocumentStore = Depends(get_document_store),
):
    uid = _bearer_uid(authorization, auth)
    return accounts.update_profile(auth, documents, uid, payload)
