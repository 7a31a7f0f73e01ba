"""Per-ground-station access scoping.

Each ground station's schedule (its plan partition and window partition) is
one independently lockable unit. Mutations run inside ``exclusive()``;
queries run inside ``shared()``. Scopes of different stations never contend.

Lock objects are not handed out: callers only see context managers.

The only state shared across stations is the registry itself, touched
briefly under ``_registry_lock`` to check a station's lock in and out. An
entry lives only while some scope holds or awaits it.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class _ReadWriteLock:
    """Writer-preferring reader/writer lock.

    Once a writer is waiting, new readers wait too, so a stream of list
    calls cannot starve a window insertion.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0
        # Scopes holding or waiting for this lock; guarded by the registry lock.
        self.users = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()


class ScheduleLocks:
    """Registry of per-ground-station reader/writer scopes."""

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._locks: dict[str, _ReadWriteLock] = {}

    def active_station_count(self) -> int:
        """Number of stations with a scope currently held or awaited."""
        with self._registry_lock:
            return len(self._locks)

    @contextmanager
    def _checked_out(self, ground_station_id: str) -> Iterator[_ReadWriteLock]:
        with self._registry_lock:
            lock = self._locks.get(ground_station_id)
            if lock is None:
                lock = _ReadWriteLock()
                self._locks[ground_station_id] = lock
            lock.users += 1
        try:
            yield lock
        finally:
            # Unused entries are dropped so the registry tracks only live stations.
            with self._registry_lock:
                lock.users -= 1
                if lock.users == 0:
                    del self._locks[ground_station_id]

    @contextmanager
    def exclusive(self, ground_station_id: str) -> Iterator[None]:
        """Single-writer scope over one station's schedule."""
        with self._checked_out(ground_station_id) as lock:
            lock.acquire_write()
            try:
                yield
            finally:
                lock.release_write()

    @contextmanager
    def shared(self, ground_station_id: str) -> Iterator[None]:
        """Reader scope over one station's schedule; excludes writers."""
        with self._checked_out(ground_station_id) as lock:
            lock.acquire_read()
            try:
                yield
            finally:
                lock.release_read()
