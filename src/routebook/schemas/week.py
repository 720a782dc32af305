"""Weekly status schemas."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel


class TodayRouteModel(BaseModel):
    id: str
    name: str
    attended: int
    total: int


class WeekSummaryResponse(BaseModel):
    weekKey: str
    today: str
    todayLabel: str
    routes: List[TodayRouteModel]
    totalAttended: int
    totalClients: int


class WeekResetResponse(BaseModel):
    weekKey: str
