"""
Pydantic schemas for request validation and API responses.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from shared.types import (
    BusStatus,
    DayType,
    Driver,
    Route,
    RoutePoint,
    ScheduleEntry,
)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class DriverIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    phone: str = Field(default="", max_length=32)
    license_number: str = Field(default="", max_length=64)
    bus_id: Optional[str] = None

    @field_validator("bus_id", mode="before")
    @classmethod
    def blank_bus_to_none(cls, value):
        return _blank_to_none(value)


class BusIn(BaseModel):
    bus_number: str = Field(..., min_length=1, max_length=32)
    plate_number: str = Field(..., min_length=1, max_length=32)
    label: str = Field(default="", max_length=120)
    capacity: Optional[int] = Field(default=None, ge=1, le=500)
    route_id: Optional[str] = None
    status: BusStatus = BusStatus.ACTIVE

    @field_validator("route_id", "capacity", mode="before")
    @classmethod
    def blank_optional_to_none(cls, value):
        return _blank_to_none(value)


class RouteIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: str = Field(default="", max_length=1024)
    active: bool = True


class RoutePointIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    route_id: Optional[str] = None
    order: int = Field(default=0, ge=0)

    @field_validator("route_id", mode="before")
    @classmethod
    def blank_route_to_none(cls, value):
        return _blank_to_none(value)


class ScheduleEntryIn(BaseModel):
    departure_time: str = Field(..., pattern=TIME_PATTERN)
    day_type: DayType = DayType.WEEKDAY
    bus_id: Optional[str] = None
    note: str = Field(default="", max_length=256)

    @field_validator("bus_id", mode="before")
    @classmethod
    def blank_bus_to_none(cls, value):
        return _blank_to_none(value)


class LiveLocationIn(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    timestamp: Optional[int] = Field(default=None, ge=0)
    speed: Optional[float] = Field(default=None, ge=0)
    heading: Optional[float] = Field(default=None, ge=0, lt=360)


class SignUpRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    password: str = Field(..., min_length=6, max_length=128)
    display_name: str = Field(default="", max_length=120)


class SignInRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)


class ProfileUpdate(BaseModel):
    display_name: str = Field(default="", max_length=120)
    phone: str = Field(default="", max_length=32)


class SessionResponse(BaseModel):
    uid: str
    id_token: str
    expires_in: int


class DriverResponse(BaseModel):
    driver: Driver
    photo_url: Optional[str] = None


class RouteDetailResponse(BaseModel):
    route: Route
    points: list[RoutePoint]
    schedule: list[ScheduleEntry]


class ScreenInfo(BaseModel):
    path: str
    name: str
    title: str
    in_sidebar: bool


class DeleteResponse(BaseModel):
    status: Literal["deleted"] = "deleted"
