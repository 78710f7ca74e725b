"""Per-object locking for reconcile passes."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class KeyedLock:
    """A set of mutexes addressed by key.

    kopf already serializes handlers per object, but timers and event
    handlers for the same Service can still overlap. Holding the key for the
    whole pass guarantees at most one reconcile or delete per name in this
    process.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._holders: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Acquire the lock for ``key`` for the duration of the block."""
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._holders[key] = self._holders.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._holders[key] -= 1
                if not self._holders[key]:
                    del self._holders[key]
                    del self._locks[key]

    def __contains__(self, key: str) -> bool:
        with self._guard:
            return key in self._locks
