"""
HTML screens for the dashboard, one per navigation entry.

Every screen reads its snapshot on GET; form posts write one record and
redirect back with 303 so a refresh does not resubmit.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from dashboard import accounts
from dashboard.auth import AuthClient
from dashboard.config import Settings, get_settings
from dashboard.dependencies import (
    get_auth_client,
    get_document_store,
    get_repository,
)
from dashboard.documents import DocumentStore
from dashboard.errors import AuthError, BackendError
from dashboard.navigation import (
    ROOT_PATH,
    ROOT_REDIRECT,
    SCREENS,
    fastapi_path,
    screen_by_name,
    screen_url,
    sidebar_links,
)
from dashboard.repository import FleetRepository, now_ms
from dashboard.schemas import (
    BusIn,
    DriverIn,
    ProfileUpdate,
    RouteIn,
    RoutePointIn,
    ScheduleEntryIn,
    SignInRequest,
    SignUpRequest,
)
from shared.types import BusStatus, DayType

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter()


def render(
    request: Request,
    screen_name: str,
    context: Optional[dict] = None,
    status_code: int = 200,
) -> HTMLResponse:
    screen = screen_by_name(screen_name)
    return templates.TemplateResponse(
        request,
        screen.template,
        {
            "screen": screen,
            "sidebar": sidebar_links(request.url.path),
            "error": None,
            **(context or {}),
        },
        status_code=status_code,
    )


def redirect_to(path: str) -> RedirectResponse:
    return RedirectResponse(path, status_code=303)


def _session_uid(
    request: Request, auth: AuthClient, settings: Settings
) -> Optional[str]:
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    try:
        return accounts.current_uid(auth, token)
    except AuthError:
        return None


class SignInRequired(Exception):
    """Raised by form posts made without a valid session cookie."""


def require_session(
    request: Request,
    auth: AuthClient = Depends(get_auth_client),
    settings: Settings = Depends(get_settings),
) -> str:
    uid = _session_uid(request, auth, settings)
    if not uid:
        raise SignInRequired()
    return uid


signed_in = [Depends(require_session)]


@router.get(ROOT_PATH, include_in_schema=False)
def root():
    return RedirectResponse(ROOT_REDIRECT)


# Screen views, registered from the navigation table below.


def dashboard_view(
    request: Request,
    repo: FleetRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    summary = repo.summary(settings.live_location_stale_after_seconds)
    return render(
        request,
        "Dashboard",
        {
            "summary": summary,
            "locations": repo.fresh_locations(
                settings.live_location_stale_after_seconds
            ),
        },
    )


def tables_view(request: Request, repo: FleetRepository = Depends(get_repository)):
    buses = repo.list_buses()
    routes = {route.id: route for route in repo.list_routes()}
    return render(
        request,
        "Tables",
        {
            "drivers": repo.list_drivers(),
            "buses": buses,
            "bus_numbers": {bus.id: bus.bus_number for bus in buses},
            "route_names": {rid: route.name for rid, route in routes.items()},
        },
    )


def bus_location_view(
    request: Request,
    repo: FleetRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    buses = {bus.id: bus for bus in repo.list_buses()}
    cutoff = now_ms() - settings.live_location_stale_after_seconds * 1000
    rows = [
        {
            "location": loc,
            "bus": buses.get(loc.bus_id),
            "fresh": loc.timestamp >= cutoff,
        }
        for loc in repo.list_live_locations()
    ]
    return render(request, "bus-location", {"rows": rows})


def drivers_view(request: Request, repo: FleetRepository = Depends(get_repository)):
    return render(
        request,
        "drivers",
        {"drivers": repo.list_drivers(), "buses": repo.list_buses()},
    )


def buses_view(request: Request, repo: FleetRepository = Depends(get_repository)):
    return render(
        request,
        "buses",
        {
            "buses": repo.list_buses(),
            "routes": repo.list_routes(),
            "statuses": list(BusStatus),
        },
    )


def locations_view(request: Request, repo: FleetRepository = Depends(get_repository)):
    routes = repo.list_routes()
    return render(
        request,
        "Locations",
        {
            "points": repo.list_route_points(),
            "routes": routes,
            "route_names": {route.id: route.name for route in routes},
        },
    )


def routes_view(request: Request, repo: FleetRepository = Depends(get_repository)):
    point_counts: dict[str, int] = {}
    for point in repo.list_route_points():
        if point.route_id:
            point_counts[point.route_id] = point_counts.get(point.route_id, 0) + 1
    return render(
        request,
        "routes",
        {"routes": repo.list_routes(), "point_counts": point_counts},
    )


def schedule_view(
    request: Request, id: str, repo: FleetRepository = Depends(get_repository)
):
    route = repo.get_route(id)
    return render(
        request,
        "RouteSchedule",
        {
            "route": route,
            "points": repo.route_points(id),
            "entries": repo.list_schedule(id),
            "buses": repo.list_buses(),
            "day_types": list(DayType),
        },
    )


def profile_view(
    request: Request,
    auth: AuthClient = Depends(get_auth_client),
    documents: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
):
    uid = _session_uid(request, auth, settings)
    if not uid:
        return redirect_to(screen_url("Signin"))
    profile = accounts.get_profile(auth, documents, uid)
    return render(request, "Profile", {"profile": profile})


def signin_view(request: Request):
    return render(request, "Signin")


def signup_view(request: Request):
    return render(request, "Signup")


SCREEN_VIEWS: dict[str, Callable] = {
    "Dashboard": dashboard_view,
    "Tables": tables_view,
    "bus-location": bus_location_view,
    "drivers": drivers_view,
    "buses": buses_view,
    "Locations": locations_view,
    "routes": routes_view,
    "RouteSchedule": schedule_view,
    "Profile": profile_view,
    "Signin": signin_view,
    "Signup": signup_view,
}

for _screen in SCREENS:
    router.add_api_route(
        fastapi_path(_screen),
        SCREEN_VIEWS[_screen.name],
        methods=["GET"],
        name=_screen.name,
        response_class=HTMLResponse,
        include_in_schema=False,
    )


# Form submissions


@router.post("/drivers", include_in_schema=False, dependencies=signed_in)
async def create_driver(
    name: str = Form(...),
    email: str = Form(...),
    phone: str = Form(""),
    license_number: str = Form(""),
    bus_id: str = Form(""),
    photo: Optional[UploadFile] = File(None),
    repo: FleetRepository = Depends(get_repository),
):
    driver = repo.create_driver(
        DriverIn(
            name=name,
            email=email,
            phone=phone,
            license_number=license_number,
            bus_id=bus_id,
        )
    )
    if photo is not None and photo.filename:
        data = await photo.read()
        if data:
            repo.attach_driver_photo(driver.id, photo.filename, data, photo.content_type)
    return redirect_to(screen_url("drivers"))


@router.post(
    "/drivers/{driver_id}/delete",
    include_in_schema=False,
    dependencies=signed_in,
)
def delete_driver(driver_id: str, repo: FleetRepository = Depends(get_repository)):
    repo.delete_driver(driver_id)
    return redirect_to(screen_url("drivers"))


@router.post("/buses", include_in_schema=False, dependencies=signed_in)
def create_bus(
    bus_number: str = Form(...),
    plate_number: str = Form(...),
    label: str = Form(""),
    capacity: str = Form(""),
    route_id: str = Form(""),
    status: str = Form(BusStatus.ACTIVE.value),
    repo: FleetRepository = Depends(get_repository),
):
    repo.create_bus(
        BusIn(
            bus_number=bus_number,
            plate_number=plate_number,
            label=label,
            capacity=capacity,
            route_id=route_id,
            status=status,
        )
    )
    return redirect_to(screen_url("buses"))


@router.post("/buses/{bus_id}/delete", include_in_schema=False, dependencies=signed_in)
def delete_bus(bus_id: str, repo: FleetRepository = Depends(get_repository)):
    repo.delete_bus(bus_id)
    return redirect_to(screen_url("buses"))


@router.post("/locations", include_in_schema=False, dependencies=signed_in)
def create_route_point(
    name: str = Form(...),
    latitude: str = Form(...),
    longitude: str = Form(...),
    route_id: str = Form(""),
    order: str = Form("0"),
    repo: FleetRepository = Depends(get_repository),
):
    repo.create_route_point(
        RoutePointIn(
            name=name,
            latitude=latitude,
            longitude=longitude,
            route_id=route_id,
            order=order or 0,
        )
    )
    return redirect_to(screen_url("Locations"))


@router.post(
    "/locations/{point_id}/delete",
    include_in_schema=False,
    dependencies=signed_in,
)
def delete_route_point(point_id: str, repo: FleetRepository = Depends(get_repository)):
    repo.delete_route_point(point_id)
    return redirect_to(screen_url("Locations"))


@router.post("/routes", include_in_schema=False, dependencies=signed_in)
def create_route(
    name: str = Form(...),
    description: str = Form(""),
    active: bool = Form(False),
    repo: FleetRepository = Depends(get_repository),
):
    repo.create_route(RouteIn(name=name, description=description, active=active))
    return redirect_to(screen_url("routes"))


@router.post(
    "/routes/{route_id}/delete",
    include_in_schema=False,
    dependencies=signed_in,
)
def delete_route(route_id: str, repo: FleetRepository = Depends(get_repository)):
    repo.delete_route(route_id)
    return redirect_to(screen_url("routes"))


@router.post(
    "/routes/{route_id}/schedule",
    include_in_schema=False,
    dependencies=signed_in,
)
def add_schedule_entry(
    route_id: str,
    departure_time: str = Form(...),
    day_type: str = Form(DayType.WEEKDAY.value),
    bus_id: str = Form(""),
    note: str = Form(""),
    repo: FleetRepository = Depends(get_repository),
):
    repo.add_schedule_entry(
        route_id,
        ScheduleEntryIn(
            departure_time=departure_time, day_type=day_type, bus_id=bus_id, note=note
        ),
    )
    return redirect_to(screen_url("RouteSchedule", id=route_id))


@router.post(
    "/routes/{route_id}/schedule/{entry_id}/delete",
    include_in_schema=False,
    dependencies=signed_in,
)
def delete_schedule_entry(
    route_id: str, entry_id: str, repo: FleetRepository = Depends(get_repository)
):
    repo.delete_schedule_entry(route_id, entry_id)
    return redirect_to(screen_url("RouteSchedule", id=route_id))


@router.post("/profile", include_in_schema=False)
def update_profile(
    request: Request,
    display_name: str = Form(""),
    phone: str = Form(""),
    auth: AuthClient = Depends(get_auth_client),
    documents: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
):
    uid = _session_uid(request, auth, settings)
    if not uid:
        return redirect_to(screen_url("Signin"))
    accounts.update_profile(
        auth, documents, uid, ProfileUpdate(display_name=display_name, phone=phone)
    )
    return redirect_to(screen_url("Profile"))


@router.post("/signin", include_in_schema=False)
def signin(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    auth: AuthClient = Depends(get_auth_client),
    settings: Settings = Depends(get_settings),
):
    try:
        session = accounts.sign_in(auth, SignInRequest(email=email, password=password))
    except AuthError as e:
        return render(
            request, "Signin", {"error": e.message, "email": email}, status_code=401
        )
    response = redirect_to(ROOT_REDIRECT)
    response.set_cookie(
        settings.session_cookie_name,
        session.id_token,
        max_age=session.expires_in,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return response


@router.post("/signup", include_in_schema=False)
def signup(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    display_name: str = Form(""),
    auth: AuthClient = Depends(get_auth_client),
    documents: DocumentStore = Depends(get_document_store),
):
    try:
        accounts.sign_up(
            auth,
            documents,
            SignUpRequest(email=email, password=password, display_name=display_name),
        )
    except BackendError as e:
        return render(
            request,
            "Signup",
            {"error": e.message, "email": email, "display_name": display_name},
            status_code=e.status_code,
        )
    return redirect_to(screen_url("Signin"))


@router.post("/signout", include_in_schema=False)
def signout(settings: Settings = Depends(get_settings)):
    response = redirect_to(screen_url("Signin"))
    response.delete_cookie(settings.session_cookie_name)
    return response
