"""Per room type reservation locks.

Reservations and cancellations for the same ``(pg, room_type)`` pair run
one at a time inside this process. Across processes the row lock taken
on the room type inside the transaction provides the same guarantee on
databases that support ``SELECT ... FOR UPDATE``.

Entries are reference counted and dropped once no thread holds or waits
on them, so the registry only contains keys that are in use.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from django.conf import settings  # type: ignore

from shared.domain.errors import RoomUnavailableError

logger = logging.getLogger(__name__)


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


_registry_guard = threading.Lock()
_locks: dict[tuple[int, int], _Entry] = {}


def _checkout(key: tuple[int, int]) -> _Entry:
    with _registry_guard:
        entry = _locks.get(key)
        if entry is None:
            entry = _locks[key] = _Entry()
        entry.users += 1
        return entry


def _checkin(key: tuple[int, int], entry: _Entry) -> None:
    with _registry_guard:
        entry.users -= 1
        if entry.users == 0 and _locks.get(key) is entry:
            del _locks[key]


@contextmanager
def reservation_lock(pg_id: int, room_type_id: int, timeout: float | None = None) -> Iterator[None]:
    """Hold the lock for ``(pg_id, room_type_id)`` for the duration of the block."""

    if timeout is None:
        timeout = settings.BOOKING_LOCK_TIMEOUT_SECONDS
    key = (int(pg_id), int(room_type_id))
    entry = _checkout(key)
    try:
        if not entry.lock.acquire(timeout=timeout):
            logger.warning("Timed out waiting for reservation lock %s", key)
            raise RoomUnavailableError("This room type is busy, please try again")
        try:
            yield
        finally:
            entry.lock.release()
    finally:
        _checkin(key, entry)
