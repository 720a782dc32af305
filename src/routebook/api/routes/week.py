"""Weekly attendance endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...persistence.storage import StorageWriteError
from ...schemas.week import WeekResetResponse, WeekSummaryResponse
from ...services.store import AttendanceStore
from ...services.views import today_summary
from ..dependencies import get_store, storage_failure

router = APIRouter(prefix="/week", tags=["week"])


@router.get("", response_model=WeekSummaryResponse, status_code=status.HTTP_200_OK)
def get_week(store: AttendanceStore = Depends(get_store)) -> WeekSummaryResponse:
    """Today's routes and progress for the current week."""
    try:
        data = store.load()
    except StorageWriteError as exc:
        raise storage_failure(exc) from exc
    return WeekSummaryResponse(**today_summary(data, store.clock()))


@router.post("/reset", response_model=WeekResetResponse, status_code=status.HTTP_200_OK)
def reset_week(store: AttendanceStore = Depends(get_store)) -> WeekResetResponse:
    try:
        weekly_status = store.reset_week()
    except StorageWriteError as exc:
        raise storage_failure(exc) from exc
    return WeekResetResponse(weekKey=weekly_status.week_key)
