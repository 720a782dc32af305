"""Whole-aggregate endpoints used by the app on start and pull-to-refresh."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...persistence.codec import app_data_to_model
from ...persistence.storage import StorageWriteError
from ...schemas.app_data import AppDataModel
from ...services.store import AttendanceStore
from ..dependencies import get_store, storage_failure

router = APIRouter(prefix="/data", tags=["data"])


@router.get("", response_model=AppDataModel, status_code=status.HTTP_200_OK)
def load_data(store: AttendanceStore = Depends(get_store)) -> AppDataModel:
    try:
        return app_data_to_model(store.load())
    except StorageWriteError as exc:
        raise storage_failure(exc) from exc


@router.post("/refresh", response_model=AppDataModel, status_code=status.HTTP_200_OK)
def refresh_data(store: AttendanceStore = Depends(get_store)) -> AppDataModel:
    try:
        return app_data_to_model(store.refresh())
    except StorageWriteError as exc:
        raise storage_failure(exc) from exc
