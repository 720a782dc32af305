"""Domain models for clients, routes and weekly attendance."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

DayOfWeek = Literal["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]


@dataclass(slots=True)
class Location:
    """Geocoded position of a client."""

    lat: float
    lng: float
    address: Optional[str] = None


@dataclass(slots=True)
class Client:
    """A visited client with contact info and a location."""

    id: str
    name: str
    location: Location
    created_at: str
    phone: Optional[str] = None


@dataclass(slots=True)
class Route:
    """Named, ordered list of client ids that runs on given weekdays."""

    id: str
    name: str
    days_of_week: list[DayOfWeek] = field(default_factory=list)
    client_order: list[str] = field(default_factory=list)


@dataclass(slots=True)
class AttendanceMark:
    checked: bool
    checked_at: str


@dataclass(slots=True)
class WeeklyStatus:
    """Attendance for one calendar week, keyed by route id then client id."""

    week_key: str = ""
    attended: dict[str, dict[str, AttendanceMark]] = field(default_factory=dict)


@dataclass(slots=True)
class AppData:
    """The whole persisted application state."""

    clients: list[Client] = field(default_factory=list)
    routes: list[Route] = field(default_factory=list)
    weekly_status: WeeklyStatus = field(default_factory=WeeklyStatus)


def default_app_data() -> AppData:
    return AppData(clients=[], routes=[], weekly_status=WeeklyStatus(week_key="", attended={}))
