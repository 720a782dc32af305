"""Read-only projections over the application data used by the screens."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from ..models.domain import AppData, Client, DayOfWeek, Route
from .week import current_day_of_week, format_day_name


def search_clients(clients: Iterable[Client], query: Optional[str]) -> List[Client]:
    """Match name and address case-insensitively and phone as typed."""

    items = list(clients)
    needle = (query or "").strip()
    if not needle:
        return items
    lowered = needle.lower()
    return [
        client
        for client in items
        if lowered in client.name.lower()
        or (client.phone and needle in client.phone)
        or (client.location.address and lowered in client.location.address.lower())
    ]


def search_routes(routes: Iterable[Route], query: Optional[str]) -> List[Route]:
    items = list(routes)
    needle = (query or "").strip().lower()
    if not needle:
        return items
    return [route for route in items if needle in route.name.lower()]


def find_client(data: AppData, client_id: str) -> Optional[Client]:
    return next((client for client in data.clients if client.id == client_id), None)


def find_route(data: AppData, route_id: str) -> Optional[Route]:
    return next((route for route in data.routes if route.id == route_id), None)


def resolve_route_clients(data: AppData, route: Route) -> List[Client]:
    """Clients of ``route`` in visiting order; ids without a client are skipped."""

    by_id = {client.id: client for client in data.clients}
    return [by_id[client_id] for client_id in route.client_order if client_id in by_id]


def attended_count(data: AppData, route: Route) -> int:
    """Checked marks of the week for clients that are still on the route."""

    marks = data.weekly_status.attended.get(route.id, {})
    return sum(
        1 for client in resolve_route_clients(data, route) if client.id in marks and marks[client.id].checked
    )


def routes_for_day(data: AppData, day: DayOfWeek) -> List[Route]:
    return [route for route in data.routes if day in route.days_of_week]


def today_summary(data: AppData, now: Optional[datetime] = None) -> dict:
    """Today's routes with their progress, as shown on the home screen."""

    day = current_day_of_week(now)
    routes = []
    for route in routes_for_day(data, day):
        routes.append(
            {
                "id": route.id,
                "name": route.name,
                "attended": attended_count(data, route),
                "total": len(resolve_route_clients(data, route)),
            }
        )
    return {
        "weekKey": data.weekly_status.week_key,
        "today": day,
        "todayLabel": format_day_name(day),
        "routes": routes,
        "totalAttended": sum(entry["attended"] for entry in routes),
        "totalClients": sum(entry["total"] for entry in routes),
    }
