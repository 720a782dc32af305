"""HTTP client for turning addresses into coordinates and back."""

from __future__ import annotations

import logging
import time
from typing import Optional

import httpx

from ..config import settings
from ..models.domain import Location

logger = logging.getLogger(__name__)


class AddressNotFoundError(LookupError):
    """The geocoding service has no match for the given address."""


class LocationPermissionDenied(PermissionError):
    """Position lookups are not allowed for this deployment."""


def parse_coordinates(text: str) -> Location:
    """Parse manual ``"lat, lng"`` input."""

    parts = [part.strip() for part in (text or "").split(",")]
    if len(parts) != 2:
        raise ValueError("Invalid coordinate format. Use: latitude, longitude")
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise ValueError("Invalid coordinate format. Use: latitude, longitude") from exc
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lng <= 180.0:
        raise ValueError(f"Coordinates out of range: {lat}, {lng}")
    return Location(lat=lat, lng=lng)


class Geocoder:
    """Client for a Nominatim-compatible ``/search`` and ``/reverse`` API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.geocoder_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("Geocoder base URL is not configured.")
        self.timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.geocoder_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.geocoder_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            headers={"User-Agent": settings.geocoder_user_agent},
            transport=self._transport,
        )

    def _get_json(self, path: str, params: dict) -> object:
        url = f"{self.base_url}/{path}"
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params={**params, "format": "jsonv2"})
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPStatusError as e:
                    # 4xx means the request itself is wrong; retrying will not help
                    if e.response.status_code < 500:
                        raise
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
                except (httpx.TimeoutException, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Geocoding request failed after {self.max_retries} retries: {e}")
                        raise ConnectionError(f"Geocoding service at {self.base_url} is not reachable: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Geocoding request failed, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
        finally:
            client.close()

    def geocode_address(self, address: str) -> Location:
        text = (address or "").strip()
        if not text:
            raise ValueError("Enter an address to search for.")
        results = self._get_json("search", {"q": text, "limit": 1})
        if not isinstance(results, list) or not results:
            raise AddressNotFoundError(f"Address not found: {text}")
        first = results[0]
        return Location(lat=float(first["lat"]), lng=float(first["lon"]), address=text)

    def reverse_geocode(self, lat: float, lng: float) -> Optional[str]:
        payload = self._get_json("reverse", {"lat": lat, "lon": lng})
        if not isinstance(payload, dict) or "error" in payload:
            return None
        address = payload.get("address") or {}
        street = address.get("road") or address.get("pedestrian") or ""
        city = address.get("city") or address.get("town") or address.get("village") or ""
        label = ", ".join(part for part in (street, city) if part)
        return label or payload.get("display_name") or None

    def describe_position(self, lat: float, lng: float) -> Location:
        """Attach an address to a position reported by the device."""

        if not settings.location_lookup_enabled:
            raise LocationPermissionDenied("Location access is disabled.")
        try:
            address = self.reverse_geocode(lat, lng)
        except (httpx.HTTPError, ConnectionError) as exc:
            logger.warning(f"Reverse geocoding failed for {lat},{lng}: {exc}")
            address = None
        return Location(lat=lat, lng=lng, address=address)
