"""Address and position lookup endpoints for the client forms."""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from ...persistence.codec import location_to_model
from ...schemas.app_data import LocationModel
from ...schemas.geocoding import CoordinatesRequest, GeocodeRequest, PositionRequest
from ...services.geocoding import AddressNotFoundError, Geocoder, LocationPermissionDenied, parse_coordinates
from ..dependencies import get_geocoder

router = APIRouter(prefix="/geocode", tags=["geocoding"])


@router.post("", response_model=LocationModel, status_code=status.HTTP_200_OK)
def geocode(payload: GeocodeRequest, geocoder: Geocoder = Depends(get_geocoder)) -> LocationModel:
    try:
        return location_to_model(geocoder.geocode_address(payload.address))
    except AddressNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (httpx.HTTPError, ConnectionError) as exc:
        logging.exception(f"Geocoding failed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Geocoding service unavailable.",
        ) from exc


@router.post("/position", response_model=LocationModel, status_code=status.HTTP_200_OK)
def describe_position(payload: PositionRequest, geocoder: Geocoder = Depends(get_geocoder)) -> LocationModel:
    try:
        return location_to_model(geocoder.describe_position(payload.lat, payload.lng))
    except LocationPermissionDenied as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


@router.post("/coordinates", response_model=LocationModel, status_code=status.HTTP_200_OK)
def coordinates(payload: CoordinatesRequest) -> LocationModel:
    try:
        return location_to_model(parse_coordinates(payload.text))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
