"""Route and attendance endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...models.domain import AppData, Route
from ...persistence.codec import mark_to_model, route_to_model
from ...persistence.storage import StorageWriteError
from ...schemas.routes import (
    RouteCreate,
    RouteDetailResponse,
    RouteListResponse,
    RouteSummaryModel,
    RouteUpdate,
    ToggleAttendanceResponse,
)
from ...services.store import AttendanceStore
from ...services.views import attended_count, find_client, find_route, resolve_route_clients, search_routes
from ..dependencies import current_data, get_store, storage_failure
from .clients import client_response

router = APIRouter(prefix="/routes", tags=["routes"])

_FIELD_NAMES = {"name": "name", "daysOfWeek": "days_of_week", "clientOrder": "client_order"}


def _summary(data: AppData, route: Route) -> RouteSummaryModel:
    return RouteSummaryModel(
        **route_to_model(route).model_dump(),
        attendedCount=attended_count(data, route),
        clientCount=len(resolve_route_clients(data, route)),
    )


def _get_or_404(data: AppData, route_id: str) -> Route:
    route = find_route(data, route_id)
    if route is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Route {route_id} not found")
    return route


@router.get("", response_model=RouteListResponse, status_code=status.HTTP_200_OK)
def list_routes(
    q: str | None = Query(default=None, description="Search by route name"),
    store: AttendanceStore = Depends(get_store),
) -> RouteListResponse:
    data = current_data(store)
    items = [_summary(data, route) for route in search_routes(data.routes, q)]
    return RouteListResponse(items=items, total=len(items))


@router.post("", response_model=RouteSummaryModel, status_code=status.HTTP_201_CREATED)
def create_route(payload: RouteCreate, store: AttendanceStore = Depends(get_store)) -> RouteSummaryModel:
    try:
        route = store.add_route(
            name=payload.name,
            days_of_week=payload.daysOfWeek,
            client_order=payload.clientOrder,
        )
    except StorageWriteError as exc:
        raise storage_failure(exc) from exc
    return _summary(current_data(store), route)


@router.get("/{route_id}", response_model=RouteDetailResponse, status_code=status.HTTP_200_OK)
def get_route(route_id: str, store: AttendanceStore = Depends(get_store)) -> RouteDetailResponse:
    data = current_data(store)
    route = _get_or_404(data, route_id)
    marks = data.weekly_status.attended.get(route.id, {})
    return RouteDetailResponse(
        **_summary(data, route).model_dump(),
        clients=[client_response(client) for client in resolve_route_clients(data, route)],
        attended={client_id: mark_to_model(mark) for client_id, mark in marks.items()},
    )


@router.patch("/{route_id}", response_model=RouteSummaryModel, status_code=status.HTTP_200_OK)
def update_route(
    route_id: str,
    payload: RouteUpdate,
    store: AttendanceStore = Depends(get_store),
) -> RouteSummaryModel:
    fields = {_FIELD_NAMES[key]: value for key, value in payload.model_dump(exclude_unset=True).items()}
    try:
        updated = store.update_route(route_id, **fields)
    except StorageWriteError as exc:
        raise storage_failure(exc) from exc
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Route {route_id} not found")
    data = current_data(store)
    return _summary(data, _get_or_404(data, route_id))


@router.delete("/{route_id}", status_code=status.HTTP_200_OK)
def delete_route(route_id: str, store: AttendanceStore = Depends(get_store)) -> dict:
    try:
        deleted = store.delete_route(route_id)
    except StorageWriteError as exc:
        raise storage_failure(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Route {route_id} not found")
    return {"success": True, "message": f"Route {route_id} removed"}


@router.post(
    "/{route_id}/clients/{client_id}/toggle",
    response_model=ToggleAttendanceResponse,
    status_code=status.HTTP_200_OK,
)
def toggle_attended(
    route_id: str,
    client_id: str,
    store: AttendanceStore = Depends(get_store),
) -> ToggleAttendanceResponse:
    data = current_data(store)
    _get_or_404(data, route_id)
    if find_client(data, client_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Client {client_id} not found")
    try:
        mark = store.toggle_client_attended(route_id, client_id)
    except StorageWriteError as exc:
        raise storage_failure(exc) from exc
    return ToggleAttendanceResponse(
        routeId=route_id,
        clientId=client_id,
        checked=mark.checked,
        checkedAt=mark.checked_at,
    )
