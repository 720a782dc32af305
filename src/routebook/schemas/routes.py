"""Route request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .app_data import AttendanceMarkModel, DayOfWeekName, RouteModel
from .clients import ClientResponse


class RouteCreate(BaseModel):
    name: str
    daysOfWeek: List[DayOfWeekName] = Field(..., min_length=1, description="At least one weekday.")
    clientOrder: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Route name is required.")
        return value


class RouteUpdate(BaseModel):
    name: Optional[str] = None
    daysOfWeek: Optional[List[DayOfWeekName]] = None
    clientOrder: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: Optional[str]) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("Route name cannot be empty.")
        return value

    @field_validator("daysOfWeek")
    @classmethod
    def _require_days(cls, value: Optional[List[str]]) -> List[str]:
        if not value:
            raise ValueError("Select at least one day of the week.")
        return value

    @field_validator("clientOrder")
    @classmethod
    def _require_order(cls, value: Optional[List[str]]) -> List[str]:
        if value is None:
            raise ValueError("clientOrder cannot be null.")
        return value


class RouteSummaryModel(RouteModel):
    attendedCount: int
    clientCount: int


class RouteListResponse(BaseModel):
    items: List[RouteSummaryModel]
    total: int


class RouteDetailResponse(RouteSummaryModel):
    clients: List[ClientResponse]
    attended: Dict[str, AttendanceMarkModel]


class ToggleAttendanceResponse(BaseModel):
    routeId: str
    clientId: str
    checked: bool
    checkedAt: str
