"""Supabase persistence for the application data blob.

Values live in a two-column table, one row per storage key::

    create table app_state (
        key text primary key,
        value text not null,
        updated_at timestamptz default now()
    );
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from supabase import Client, create_client

from ..config import settings
from .storage import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Cached client for the configured project, or ``None`` when unset or unusable.

    Creating the client does not contact the server; reads and writes can still fail.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase URL or key missing; remote storage disabled")
        return None
    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as exc:
        logger.error(f"Could not create Supabase client for {settings.supabase_url}: {exc}")
        return None


class SupabaseKeyValueStorage:
    """Stores values as ``{key, value}`` rows of a Supabase table."""

    def __init__(self, client: Any, table: str = "app_state") -> None:
        self.client = client
        self.table = table

    def get(self, key: str) -> str | None:
        try:
            response = self.client.table(self.table).select("value").eq("key", key).limit(1).execute()
        except Exception as exc:
            logger.warning(f"Failed to read key '{key}' from Supabase table '{self.table}': {exc}")
            raise StorageReadError(f"Unable to read '{key}' from Supabase: {exc}") from exc
        rows = response.data or []
        if not rows:
            return None
        return rows[0].get("value")

    def set(self, key: str, value: str) -> None:
        try:
            self.client.table(self.table).upsert({"key": key, "value": value}, on_conflict="key").execute()
        except Exception as exc:
            logger.error(f"Failed to write key '{key}' to Supabase table '{self.table}': {exc}")
            raise StorageWriteError(f"Unable to write '{key}' to Supabase: {exc}") from exc

    def ping(self) -> bool:
        try:
            self.client.table(self.table).select("key").limit(1).execute()
            return True
        except Exception as exc:
            logger.warning(f"Supabase table '{self.table}' is not reachable: {exc}")
            return False
