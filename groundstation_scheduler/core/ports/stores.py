"""Storage protocols consumed by the conflict resolver and the service.

The in-memory stores in ``groundstation_scheduler.core.store`` implement
these protocols. Alternate backends must preserve the ordering and
filtering guarantees documented on each method.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from groundstation_scheduler.core.domain.time_range import TimeRange
    from groundstation_scheduler.core.domain.types import Plan, UnavailabilityWindow


class WindowRepository(Protocol):
    def insert(self, ground_station_id: str, time_range: TimeRange) -> str:
        """Persist a new window and return its freshly minted ID."""

    def delete(self, window_id: str) -> UnavailabilityWindow:
        """Remove a window, raising NotFoundError if the ID is unknown."""

    def ground_station_of(self, window_id: str) -> str | None:
        """Return the owning ground station, or None if the ID is unknown."""

    def list_in_range(self, ground_station_id: str, time_range: TimeRange) -> list[UnavailabilityWindow]:
        """Windows overlapping the range, sorted by (start_time, window_id)."""


class PlanRepository(Protocol):
    def add(self, plan: Plan) -> None:
        """Ingest a plan produced upstream."""

    def get(self, plan_id: str) -> Plan | None:
        """Return a copy of the plan, or None if unknown."""

    def list_by_aos_range(
        self,
        ground_station_id: str,
        aos_after: datetime,
        aos_before: datetime,
        *,
        include_canceled: bool = False,
    ) -> list[Plan]:
        """Plans with aos_after <= aos_time < aos_before, sorted by (aos_time, plan_id)."""

    def find_overlapping(self, ground_station_id: str, time_range: TimeRange) -> list[Plan]:
        """SCHEDULED plans whose execution window overlaps the range, sorted by plan_id."""

    def cancel(self, plan_id: str) -> Plan:
        """Transition a plan to CANCELED."""

    def update_contact_window(self, plan_id: str, aos_time: datetime, los_time: datetime) -> Plan:
        """Move the contact window, re-validating containment."""
