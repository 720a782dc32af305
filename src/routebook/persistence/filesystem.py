"""File-based persistence for the application data blob."""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path

from ..config import settings
from .storage import StorageReadError, StorageWriteError

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class FileKeyValueStorage:
    """Thin wrapper around the data root storing one JSON document per key."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.state_root = self.root / "state"

    def path_for(self, key: str) -> Path:
        return self.state_root / f"{_SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                return handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageReadError(f"Unable to read '{path}': {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}_", suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise StorageWriteError(f"Unable to write '{path}': {exc}") from exc
