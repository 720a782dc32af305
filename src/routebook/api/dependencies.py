"""Shared FastAPI dependencies."""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import HTTPException, status

from ..models.domain import AppData
from ..persistence.storage import StorageWriteError, build_storage
from ..services.geocoding import Geocoder
from ..services.store import AttendanceStore


@lru_cache()
def get_store() -> AttendanceStore:
    """Process-wide store bound to the configured storage backend."""
    return AttendanceStore(build_storage())


@lru_cache()
def get_geocoder() -> Geocoder:
    return Geocoder()


def storage_failure(exc: StorageWriteError) -> HTTPException:
    logging.error(f"Storage write failed: {exc}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Could not save your changes. Please try again.",
    )


def current_data(store: AttendanceStore) -> AppData:
    """Read the store, answering 503 when a pending week reset cannot be saved."""
    try:
        return store.data
    except StorageWriteError as exc:
        raise storage_failure(exc) from exc
