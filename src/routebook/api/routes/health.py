"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...config import settings
from ...persistence.storage import StorageReadError
from ...services.store import AttendanceStore
from ..dependencies import get_store

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/storage", status_code=status.HTTP_200_OK)
def health_storage(store: AttendanceStore = Depends(get_store)) -> dict:
    """Check that the application data blob can be read."""
    try:
        payload = store.storage.get(store.storage_key)
    except StorageReadError as exc:
        return {
            "backend": settings.storage_backend,
            "readable": False,
            "error": str(exc),
        }
    return {
        "backend": settings.storage_backend,
        "readable": True,
        "hasData": payload is not None,
    }
