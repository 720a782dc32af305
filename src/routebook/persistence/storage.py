"""Key/value storage for the serialised application data blob."""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base error raised by storage backends."""


class StorageReadError(StorageError):
    """The stored value could not be read or decoded."""


class StorageWriteError(StorageError):
    """The value could not be written; the caller's change was not applied."""


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStorage:
    """Dictionary backed storage for tests and throwaway runs."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


def build_storage(backend: str | None = None) -> KeyValueStorage:
    """Create the storage backend selected in settings."""

    from ..config import settings
    from .filesystem import FileKeyValueStorage

    selected = backend or settings.storage_backend
    if selected == "memory":
        return InMemoryKeyValueStorage()
    if selected == "supabase":
        from .database import SupabaseKeyValueStorage, get_supabase_client

        client = get_supabase_client()
        if client is not None:
            return SupabaseKeyValueStorage(client, table=settings.supabase_table)
        logger.warning("Supabase not configured - application data will be stored in %s", settings.data_root)
    return FileKeyValueStorage(root=settings.data_root)
