"""Identifier generation for clients and routes."""

from __future__ import annotations

import uuid
from typing import Callable, Collection, Protocol

MAX_ID_ATTEMPTS = 16


class IdGenerator(Protocol):
    def __call__(self) -> str: ...


class UuidIdGenerator:
    """Random UUID4 identifiers rendered as 32 hex characters."""

    def __call__(self) -> str:
        return uuid.uuid4().hex


def fresh_id(generate: Callable[[], str], existing: Collection[str]) -> str:
    """Draw ids until one does not collide with ``existing``."""

    for _ in range(MAX_ID_ATTEMPTS):
        candidate = generate()
        if candidate and candidate not in existing:
            return candidate
    raise RuntimeError(f"Unable to generate a unique id after {MAX_ID_ATTEMPTS} attempts.")
