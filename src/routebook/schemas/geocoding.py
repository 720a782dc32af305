"""Geocoding request schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GeocodeRequest(BaseModel):
    address: str = Field(..., min_length=1)


class PositionRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class CoordinatesRequest(BaseModel):
    text: str = Field(..., description="Manual 'latitude, longitude' input.")
