"""In-memory plan store.

Plans are partitioned by ground station and keyed by plan ID. Returned
plans are copies: callers never hold a reference into store state, so a
snapshot taken before an operation stays comparable after it.

The store does no locking of its own: callers scope access per ground
station (see ``groundstation_scheduler.core.locking``).
"""

# pylint: disable=missing-function-docstring
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from pydantic import ValidationError

from groundstation_scheduler.core.domain.errors import (
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
)
from groundstation_scheduler.core.domain.plan_state_machine import PlanStatus, is_valid_transition
from groundstation_scheduler.core.domain.status_codes import Reason
from groundstation_scheduler.core.domain.types import Plan
from groundstation_scheduler.core.events.events import ContactWindowUpdatedEvent, PlanRegisteredEvent

if TYPE_CHECKING:
    from groundstation_scheduler.core.domain.time_range import TimeRange
    from groundstation_scheduler.core.events.event_bus import EventBus

LOGGER = logging.getLogger(__name__)

# Longest AOS span a single list query may cover (inclusive).
MAX_AOS_QUERY_RANGE: timedelta = timedelta(days=31)


class PlanStore:
    """Per-ground-station collection of plans."""

    def __init__(
        self,
        event_bus: EventBus,
        *,
        max_aos_range: timedelta = MAX_AOS_QUERY_RANGE,
    ) -> None:
        if max_aos_range <= timedelta(0):
            raise ValueError("max_aos_range must be positive")

        self._event_bus = event_bus
        self._max_aos_range = max_aos_range

        # ground_station_id -> plan_id -> Plan
        self._partitions: dict[str, dict[str, Plan]] = {}
        # plan_id -> ground_station_id. Shared by all stations; only single
        # dict operations touch it. Plans are never removed, canceled ones
        # included, so it grows with the plan history.
        self._owner: dict[str, str] = {}

    @property
    def max_aos_range(self) -> timedelta:
        return self._max_aos_range

    # ---- Ingest / lookup ----
    def add(self, plan: Plan) -> None:
        """Ingest a plan created by the upstream scheduler.

        Raises:
            InvalidArgumentError: the plan ID is already known, or the plan is
                not in a status a new plan may start in.
        """
        if plan.plan_id in self._owner:
            raise InvalidArgumentError(Reason.DUPLICATE_PLAN, f"plan {plan.plan_id!r} already exists")
        if not is_valid_transition(None, plan.status):
            raise InvalidArgumentError(
                Reason.INVALID_STATUS,
                f"plan {plan.plan_id!r} cannot be ingested in status {plan.status.value}",
            )

        stored = plan.model_copy(deep=True)
        self._partitions.setdefault(plan.ground_station_id, {})[plan.plan_id] = stored
        self._owner[plan.plan_id] = plan.ground_station_id

        self._event_bus.emit(
            PlanRegisteredEvent(
                ground_station_id=plan.ground_station_id,
                plan_id=plan.plan_id,
                start_time=plan.start_time,
                end_time=plan.end_time,
            )
        )

    def get(self, plan_id: str) -> Plan | None:
        stored = self._lookup(plan_id)
        return None if stored is None else stored.model_copy(deep=True)

    def _lookup(self, plan_id: str) -> Plan | None:
        ground_station_id = self._owner.get(plan_id)
        if ground_station_id is None:
            return None
        return self._partitions[ground_station_id][plan_id]

    def _require(self, plan_id: str) -> Plan:
        stored = self._lookup(plan_id)
        if stored is None:
            raise NotFoundError(Reason.PLAN_NOT_FOUND, f"plan {plan_id!r} does not exist")
        return stored

    def _replace(self, plan: Plan) -> None:
        self._partitions[plan.ground_station_id][plan.plan_id] = plan

    # ---- Queries ----
    def list_by_aos_range(
        self,
        ground_station_id: str,
        aos_after: datetime,
        aos_before: datetime,
        *,
        include_canceled: bool = False,
    ) -> list[Plan]:
        """Return plans with ``aos_after <= aos_time < aos_before``.

        Sorted by (aos_time, plan_id). Canceled plans are excluded unless
        ``include_canceled`` is set.

        Raises:
            InvalidArgumentError: ``aos_before`` precedes ``aos_after``
                (INVALID_RANGE), or the span exceeds the maximum query range
                (RANGE_TOO_LONG). A span of exactly the maximum is allowed.
        """
        if aos_before < aos_after:
            raise InvalidArgumentError(Reason.INVALID_RANGE, "aos_before precedes aos_after")
        span = aos_before - aos_after
        if span > self._max_aos_range:
            raise InvalidArgumentError(
                Reason.RANGE_TOO_LONG,
                f"requested span {span} exceeds {self._max_aos_range}",
            )

        partition = self._partitions.get(ground_station_id)
        if not partition:
            return []

        selected = [
            p
            for p in partition.values()
            if aos_after <= p.aos_time < aos_before and (include_canceled or p.is_scheduled())
        ]
        selected.sort(key=lambda p: (p.aos_time, p.plan_id))
        return [p.model_copy(deep=True) for p in selected]

    def find_overlapping(self, ground_station_id: str, time_range: TimeRange) -> list[Plan]:
        """Return SCHEDULED plans whose execution window overlaps ``time_range``.

        Sorted by plan_id so that retries see the same order.
        """
        partition = self._partitions.get(ground_station_id)
        if not partition:
            return []

        overlapping = [
            p for p in partition.values() if p.is_scheduled() and p.execution_window.overlaps(time_range)
        ]
        overlapping.sort(key=lambda p: p.plan_id)
        return [p.model_copy(deep=True) for p in overlapping]

    def snapshot(self, ground_station_id: str) -> tuple[Plan, ...]:
        """Copies of every plan of the station (any status), sorted by plan_id."""
        partition = self._partitions.get(ground_station_id, {})
        return tuple(partition[pid].model_copy(deep=True) for pid in sorted(partition))

    # ---- Mutations ----
    def cancel(self, plan_id: str) -> Plan:
        """Transition a plan to CANCELED.

        Whether the plan *may* be canceled right now is decided by the
        execution tracker before this is called; the store only enforces the
        status machine.

        Raises:
            NotFoundError: unknown plan.
            FailedPreconditionError: the plan is not in a cancelable status.
        """
        stored = self._require(plan_id)
        if not is_valid_transition(stored.status, PlanStatus.CANCELED):
            raise FailedPreconditionError(
                Reason.CANNOT_CANCEL,
                f"plan {plan_id!r} is {stored.status.value}",
                blocking_plan_ids=(plan_id,),
            )

        canceled = stored.model_copy(update={"status": PlanStatus.CANCELED})
        self._replace(canceled)
        LOGGER.info("plan canceled", extra={"ground_station_id": canceled.ground_station_id, "plan_id": plan_id})
        return canceled.model_copy(deep=True)

    def update_contact_window(self, plan_id: str, aos_time: datetime, los_time: datetime) -> Plan:
        """Move a plan's AOS/LOS, keeping it inside the execution window.

        Raises:
            NotFoundError: unknown plan.
            InvalidArgumentError: the new contact window is empty or leaves the
                execution window. The stored plan is left unchanged.
        """
        stored = self._require(plan_id)

        payload = stored.model_dump()
        payload["aos_time"] = aos_time
        payload["los_time"] = los_time
        try:
            updated = Plan.model_validate(payload)
        except ValidationError as exc:
            raise InvalidArgumentError(
                Reason.CONTACT_OUTSIDE_EXECUTION,
                f"plan {plan_id!r}: {exc.errors()[0]['msg']}",
            ) from exc

        self._replace(updated)
        self._event_bus.emit(
            ContactWindowUpdatedEvent(
                ground_station_id=stored.ground_station_id,
                plan_id=plan_id,
                prev_aos_time=stored.aos_time,
                prev_los_time=stored.los_time,
                aos_time=updated.aos_time,
                los_time=updated.los_time,
            )
        )
        return updated.model_copy(deep=True)
