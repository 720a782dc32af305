"""Conversion between domain objects and their serialised schema models."""

from __future__ import annotations

from pydantic import ValidationError

from ..models.domain import AppData, AttendanceMark, Client, Location, Route, WeeklyStatus
from ..schemas.app_data import (
    AppDataModel,
    AttendanceMarkModel,
    ClientModel,
    LocationModel,
    RouteModel,
    WeeklyStatusModel,
)
from .storage import StorageReadError


def location_from_model(model: LocationModel) -> Location:
    return Location(lat=model.lat, lng=model.lng, address=model.address)


def location_to_model(location: Location) -> LocationModel:
    return LocationModel(lat=location.lat, lng=location.lng, address=location.address)


def client_from_model(model: ClientModel) -> Client:
    return Client(
        id=model.id,
        name=model.name,
        phone=model.phone,
        location=location_from_model(model.location),
        created_at=model.createdAt,
    )


def client_to_model(client: Client) -> ClientModel:
    return ClientModel(
        id=client.id,
        name=client.name,
        phone=client.phone,
        location=location_to_model(client.location),
        createdAt=client.created_at,
    )


def route_from_model(model: RouteModel) -> Route:
    return Route(
        id=model.id,
        name=model.name,
        days_of_week=list(model.daysOfWeek),
        client_order=list(model.clientOrder),
    )


def route_to_model(route: Route) -> RouteModel:
    return RouteModel(
        id=route.id,
        name=route.name,
        daysOfWeek=list(route.days_of_week),
        clientOrder=list(route.client_order),
    )


def mark_to_model(mark: AttendanceMark) -> AttendanceMarkModel:
    return AttendanceMarkModel(checked=mark.checked, checkedAt=mark.checked_at)


def weekly_status_to_model(status: WeeklyStatus) -> WeeklyStatusModel:
    return WeeklyStatusModel(
        weekKey=status.week_key,
        attended={
            route_id: {client_id: mark_to_model(mark) for client_id, mark in marks.items()}
            for route_id, marks in status.attended.items()
        },
    )


def weekly_status_from_model(model: WeeklyStatusModel) -> WeeklyStatus:
    return WeeklyStatus(
        week_key=model.weekKey,
        attended={
            route_id: {
                client_id: AttendanceMark(checked=mark.checked, checked_at=mark.checkedAt)
                for client_id, mark in marks.items()
            }
            for route_id, marks in model.attended.items()
        },
    )


def app_data_to_model(data: AppData) -> AppDataModel:
    return AppDataModel(
        clients=[client_to_model(client) for client in data.clients],
        routes=[route_to_model(route) for route in data.routes],
        weeklyStatus=weekly_status_to_model(data.weekly_status),
    )


def app_data_from_model(model: AppDataModel) -> AppData:
    return AppData(
        clients=[client_from_model(client) for client in model.clients],
        routes=[route_from_model(route) for route in model.routes],
        weekly_status=weekly_status_from_model(model.weeklyStatus),
    )


def encode_app_data(data: AppData) -> str:
    return app_data_to_model(data).model_dump_json(exclude_none=True)


def decode_app_data(payload: str) -> AppData:
    """Parse a stored blob, raising :class:`StorageReadError` when it is unusable."""

    try:
        model = AppDataModel.model_validate_json(payload)
    except ValidationError as exc:
        raise StorageReadError(f"Stored application data is invalid: {exc.error_count()} error(s)") from exc
    return app_data_from_model(model)
