"""
Navigation table mapping URL paths to dashboard screens.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

ROOT_PATH = "/"
ROOT_REDIRECT = "/dashboard-default"
ACTIVE_LINK_CLASS = "active"

_PARAM_SEGMENT = re.compile(r"^:(\w+)$")


@dataclass(frozen=True)
class Screen:
    path: str
    name: str
    template: str
    title: str
    in_sidebar: bool = True

    @property
    def segments(self) -> list[str]:
        return [part for part in self.path.split("/") if part]

    @property
    def has_params(self) -> bool:
        return any(_PARAM_SEGMENT.match(part) for part in self.segments)


SCREENS: tuple[Screen, ...] = (
    Screen("/dashboard-default", "Dashboard", "dashboard.html", "Dashboard"),
    Screen("/tables", "Tables", "tables.html", "Tables"),
    Screen("/bus-location", "bus-location", "bus_location.html", "Bus Location"),
    Screen("/drivers", "drivers", "drivers.html", "Drivers"),
    Screen("/buses", "buses", "buses.html", "Buses"),
    Screen("/locations", "Locations", "route_points.html", "Locations"),
    Screen("/routes", "routes", "routes.html", "Routes"),
    Screen(
        "/routes/:id/schedule",
        "RouteSchedule",
        "schedule.html",
        "Route Schedule",
        in_sidebar=False,
    ),
    Screen("/profile", "Profile", "profile.html", "Profile"),
    Screen("/signin", "Signin", "signin.html", "Sign In", in_sidebar=False),
    Screen("/signup", "Signup", "signup.html", "Sign Up", in_sidebar=False),
)

_BY_NAME = {screen.name: screen for screen in SCREENS}


def _normalize(path: str) -> str:
    path = path.split("?", 1)[0].split("#", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/")
    return path or ROOT_PATH


def redirect_for(path: str) -> Optional[str]:
    if _normalize(path) == ROOT_PATH:
        return ROOT_REDIRECT
    return None


def _match(screen: Screen, parts: list[str]) -> Optional[dict[str, str]]:
    if len(parts) != len(screen.segments):
        return None
    params: dict[str, str] = {}
    for pattern, part in zip(screen.segments, parts):
        param = _PARAM_SEGMENT.match(pattern)
        if param:
            params[param.group(1)] = part
        elif pattern != part:
            return None
    return params


def resolve(path: str) -> Optional[tuple[Screen, dict[str, str]]]:
    """
    Find the screen for a concrete path.

    Returns the screen and its extracted path parameters, or None when no
    screen matches. The root path is not a screen; see redirect_for.
    """
    parts = [part for part in _normalize(path).split("/") if part]
    for screen in SCREENS:
        params = _match(screen, parts)
        if params is not None:
            return screen, params
    return None


def screen_by_name(name: str) -> Screen:
    return _BY_NAME[name]


def screen_url(name: str, **params: str) -> str:
    screen = screen_by_name(name)
    parts = []
    for segment in screen.segments:
        param = _PARAM_SEGMENT.match(segment)
        parts.append(str(params[param.group(1)]) if param else segment)
    return "/" + "/".join(parts)


def fastapi_path(screen: Screen) -> str:
    """Converts `:param` segments to FastAPI's `{param}` form."""
    parts = []
    for segment in screen.segments:
        param = _PARAM_SEGMENT.match(segment)
        parts.append("{" + param.group(1) + "}" if param else segment)
    return "/" + "/".join(parts)


def sidebar_links(current_path: str) -> list[dict]:
    current = resolve(current_path)
    current_name = current[0].name if current else None
    return [
        {
            "path": screen.path,
            "title": screen.title,
            "css_class": ACTIVE_LINK_CLASS if screen.name == current_name else "",
        }
        for screen in SCREENS
        if screen.in_sidebar
    ]
