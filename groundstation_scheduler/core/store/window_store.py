"""In-memory unavailability window store.

Windows are partitioned by ground station. Each partition is a list kept
sorted by ``(start_time, window_id)`` so range queries come back in the
order the API promises without a sort per call.

The store does no locking of its own: callers scope access per ground
station (see ``groundstation_scheduler.core.locking``).
"""

from __future__ import annotations

import logging
from bisect import bisect_left, insort
from typing import TYPE_CHECKING, Callable

from groundstation_scheduler.core.domain.errors import NotFoundError
from groundstation_scheduler.core.domain.ids import new_window_id
from groundstation_scheduler.core.domain.status_codes import Reason
from groundstation_scheduler.core.domain.types import UnavailabilityWindow
from groundstation_scheduler.core.events.events import WindowAddedEvent, WindowDeletedEvent

if TYPE_CHECKING:
    from groundstation_scheduler.core.domain.time_range import TimeRange
    from groundstation_scheduler.core.events.event_bus import EventBus

LOGGER = logging.getLogger(__name__)


def _start_key(window: UnavailabilityWindow):
    return window.start_time


class WindowStore:
    """Per-ground-station ordered collection of unavailability windows."""

    def __init__(
        self,
        event_bus: EventBus,
        *,
        id_factory: Callable[[], str] = new_window_id,
    ) -> None:
        self._event_bus = event_bus
        self._id_factory = id_factory

        # ground_station_id -> windows sorted by (start_time, window_id)
        self._partitions: dict[str, list[UnavailabilityWindow]] = {}
        # window_id -> ground_station_id. Shared by all stations; only single
        # dict operations touch it, and a delete removes its entry.
        self._owner: dict[str, str] = {}

    def insert(self, ground_station_id: str, time_range: TimeRange) -> str:
        """Persist a new window and return its freshly minted ID."""
        time_range.validate()

        window_id = self._id_factory()
        while window_id in self._owner:
            window_id = self._id_factory()

        window = UnavailabilityWindow(
            window_id=window_id,
            ground_station_id=ground_station_id,
            start_time=time_range.start,
            end_time=time_range.end,
        )

        partition = self._partitions.setdefault(ground_station_id, [])
        insort(partition, window, key=UnavailabilityWindow.sort_key)
        self._owner[window_id] = ground_station_id

        LOGGER.debug("window inserted", extra={"ground_station_id": ground_station_id, "window_id": window_id})
        self._event_bus.emit(
            WindowAddedEvent(
                ground_station_id=ground_station_id,
                window_id=window_id,
                start_time=window.start_time,
                end_time=window.end_time,
            )
        )
        return window_id

    def delete(self, window_id: str) -> UnavailabilityWindow:
        """Remove a window.

        Raises:
            NotFoundError: no ground station holds ``window_id``. Repeating a
                delete therefore yields NOT_FOUND without touching state.
        """
        ground_station_id = self._owner.get(window_id)
        if ground_station_id is None:
            raise NotFoundError(Reason.WINDOW_NOT_FOUND, f"window {window_id!r} does not exist")

        partition = self._partitions[ground_station_id]
        for idx, window in enumerate(partition):
            if window.window_id == window_id:
                del partition[idx]
                break
        del self._owner[window_id]

        self._event_bus.emit(WindowDeletedEvent(ground_station_id=ground_station_id, window_id=window_id))
        return window

    def get(self, window_id: str) -> UnavailabilityWindow | None:
        ground_station_id = self._owner.get(window_id)
        if ground_station_id is None:
            return None
        for window in self._partitions[ground_station_id]:
            if window.window_id == window_id:
                return window
        return None

    def ground_station_of(self, window_id: str) -> str | None:
        return self._owner.get(window_id)

    def list_in_range(self, ground_station_id: str, time_range: TimeRange) -> list[UnavailabilityWindow]:
        """Return windows overlapping ``time_range``, sorted by (start_time, window_id)."""
        partition = self._partitions.get(ground_station_id)
        if not partition:
            return []

        # Windows starting at or after the query end cannot overlap.
        upper = bisect_left(partition, time_range.end, key=_start_key)
        return [w for w in partition[:upper] if w.end_time > time_range.start]

    def snapshot(self, ground_station_id: str) -> tuple[UnavailabilityWindow, ...]:
        """All windows of the station in sorted order. Windows are immutable."""
        return tuple(self._partitions.get(ground_station_id, ()))
