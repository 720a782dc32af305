"""Client endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...models.domain import Client, Location
from ...persistence.codec import client_to_model
from ...persistence.storage import StorageWriteError
from ...schemas.clients import ClientCreate, ClientListResponse, ClientResponse, ClientUpdate, LocationInput
from ...services.links import maps_directions_url, phone_url
from ...services.store import AttendanceStore
from ...services.views import find_client, search_clients
from ..dependencies import current_data, get_store, storage_failure

router = APIRouter(prefix="/clients", tags=["clients"])


def to_location(payload: LocationInput) -> Location:
    return Location(lat=payload.lat, lng=payload.lng, address=payload.address)


def client_response(client: Client) -> ClientResponse:
    return ClientResponse(
        **client_to_model(client).model_dump(),
        mapsUrl=maps_directions_url(client.location.lat, client.location.lng),
        phoneUrl=phone_url(client.phone),
    )


def _get_or_404(store: AttendanceStore, client_id: str) -> Client:
    client = find_client(current_data(store), client_id)
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Client {client_id} not found")
    return client


@router.get("", response_model=ClientListResponse, status_code=status.HTTP_200_OK)
def list_clients(
    q: str | None = Query(default=None, description="Search by name, phone or address"),
    store: AttendanceStore = Depends(get_store),
) -> ClientListResponse:
    items = [client_response(client) for client in search_clients(current_data(store).clients, q)]
    return ClientListResponse(items=items, total=len(items))


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def create_client(payload: ClientCreate, store: AttendanceStore = Depends(get_store)) -> ClientResponse:
    try:
        client = store.add_client(
            name=payload.name,
            phone=payload.phone,
            location=to_location(payload.location),
        )
    except StorageWriteError as exc:
        raise storage_failure(exc) from exc
    return client_response(client)


@router.get("/{client_id}", response_model=ClientResponse, status_code=status.HTTP_200_OK)
def get_client(client_id: str, store: AttendanceStore = Depends(get_store)) -> ClientResponse:
    return client_response(_get_or_404(store, client_id))


@router.patch("/{client_id}", response_model=ClientResponse, status_code=status.HTTP_200_OK)
def update_client(
    client_id: str,
    payload: ClientUpdate,
    store: AttendanceStore = Depends(get_store),
) -> ClientResponse:
    fields = payload.model_dump(exclude_unset=True)
    if payload.location is not None and "location" in fields:
        fields["location"] = to_location(payload.location)
    try:
        updated = store.update_client(client_id, **fields)
    except StorageWriteError as exc:
        raise storage_failure(exc) from exc
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Client {client_id} not found")
    return client_response(_get_or_404(store, client_id))


@router.delete("/{client_id}", status_code=status.HTTP_200_OK)
def delete_client(client_id: str, store: AttendanceStore = Depends(get_store)) -> dict:
    try:
        deleted = store.delete_client(client_id)
    except StorageWriteError as exc:
        raise storage_failure(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Client {client_id} not found")
    return {"success": True, "message": f"Client {client_id} removed"}
