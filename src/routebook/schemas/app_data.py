"""Serialised shape of the application data blob.

Field names follow the camelCase layout the mobile app has always stored, so
existing blobs decode unchanged.
"""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field

from ..models.domain import DayOfWeek

DayOfWeekName = DayOfWeek


class LocationModel(BaseModel):
    lat: float
    lng: float
    address: str | None = None


class ClientModel(BaseModel):
    id: str
    name: str
    phone: str | None = None
    location: LocationModel
    createdAt: str


class RouteModel(BaseModel):
    id: str
    name: str
    daysOfWeek: List[DayOfWeekName] = Field(default_factory=list)
    clientOrder: List[str] = Field(default_factory=list)


class AttendanceMarkModel(BaseModel):
    checked: bool
    checkedAt: str


class WeeklyStatusModel(BaseModel):
    weekKey: str = ""
    attended: Dict[str, Dict[str, AttendanceMarkModel]] = Field(default_factory=dict)


class AppDataModel(BaseModel):
    clients: List[ClientModel] = Field(default_factory=list)
    routes: List[RouteModel] = Field(default_factory=list)
    weeklyStatus: WeeklyStatusModel = Field(default_factory=WeeklyStatusModel)
