"""Deep links handed to the device for navigation and calls."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlencode

MAPS_DIRECTIONS_URL = "https://www.google.com/maps/dir/"


def maps_directions_url(lat: float, lng: float) -> str:
    query = urlencode({"api": 1, "destination": f"{lat},{lng}"}, safe=",")
    return f"{MAPS_DIRECTIONS_URL}?{query}"


def phone_url(phone: Optional[str]) -> Optional[str]:
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        return None
    return f"tel:{digits}"
