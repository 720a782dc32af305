"""Client request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .app_data import ClientModel


def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class LocationInput(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    address: Optional[str] = None

    @field_validator("address")
    @classmethod
    def _normalize_address(cls, value: Optional[str]) -> Optional[str]:
        return blank_to_none(value)


class ClientCreate(BaseModel):
    name: str = Field(..., description="Client name; required and trimmed.")
    phone: Optional[str] = None
    location: LocationInput

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Client name is required.")
        return value

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: Optional[str]) -> Optional[str]:
        return blank_to_none(value)


class ClientUpdate(BaseModel):
    """Partial update; only the fields sent by the caller are applied."""

    name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[LocationInput] = None

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: Optional[str]) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("Client name cannot be empty.")
        return value

    @field_validator("location")
    @classmethod
    def _require_location(cls, value: Optional[LocationInput]) -> LocationInput:
        if value is None:
            raise ValueError("Client location cannot be removed.")
        return value

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: Optional[str]) -> Optional[str]:
        return blank_to_none(value)


class ClientResponse(ClientModel):
    mapsUrl: str
    phoneUrl: str | None = None


class ClientListResponse(BaseModel):
    items: List[ClientResponse]
    total: int
