"""Conflict resolution between unavailability windows and scheduled plans."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from groundstation_scheduler.core.domain.status_codes import Reason
from groundstation_scheduler.core.events.events import (
    PlanCanceledEvent,
    ResolutionDecisionEvent,
    WindowRejectedEvent,
)

if TYPE_CHECKING:
    from groundstation_scheduler.core.domain.time_range import TimeRange
    from groundstation_scheduler.core.domain.types import Plan
    from groundstation_scheduler.core.events.event_bus import EventBus
    from groundstation_scheduler.core.ports.execution_tracker import ExecutionTracker
    from groundstation_scheduler.core.ports.stores import PlanRepository, WindowRepository

LOGGER = logging.getLogger(__name__)

DEFAULT_CANCEL_TIMEOUT_S = 5.0


# ---------------------------------------------------------------------------
# Decision models
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class BlockedPlan:
    plan_id: str
    reason: str


@dataclass(slots=True)
class ResolutionDecision:
    """Result of one window insertion attempt.

    - accepted: the window was persisted and every overlapping plan canceled
    - window_id: ID of the persisted window (None when rejected)
    - canceled_plan_ids: plans canceled by this insertion, by plan_id
    - blocked: plans that could not be canceled; non-empty iff rejected
    """

    ground_station_id: str
    window_range: TimeRange
    accepted: bool
    window_id: str | None = None
    canceled_plan_ids: list[str] = field(default_factory=list)
    blocked: list[BlockedPlan] = field(default_factory=list)

    @property
    def blocking_plan_ids(self) -> tuple[str, ...]:
        return tuple(b.plan_id for b in self.blocked)


class ConflictResolver:
    """Two-phase window insertion.

    Phase one asks the execution tracker about every overlapping plan and
    mutates nothing. Phase two runs only if every plan is cancellable: it
    cancels them all and persists the window. A single uncancellable plan
    leaves plans and windows exactly as they were.

    The caller must hold the ground station's exclusive scope for the
    whole call.
    """

    def __init__(
        self,
        *,
        plans: PlanRepository,
        windows: WindowRepository,
        tracker: ExecutionTracker,
        event_bus: EventBus,
        cancel_timeout_s: float = DEFAULT_CANCEL_TIMEOUT_S,
        max_workers: int = 8,
    ) -> None:
        if cancel_timeout_s <= 0:
            raise ValueError("cancel_timeout_s must be positive")

        self._plans = plans
        self._windows = windows
        self._tracker = tracker
        self._event_bus = event_bus
        self._cancel_timeout_s = float(cancel_timeout_s)
        self._max_workers = max_workers

        # One pool per ground station: tracker calls stuck on one station
        # must not occupy the workers another station checks with.
        self._executors_lock = threading.Lock()
        self._executors: dict[str, ThreadPoolExecutor] = {}
        self._closed = False

    def close(self) -> None:
        """Stop every station's tracker worker pool without waiting for stuck calls."""
        with self._executors_lock:
            self._closed = True
            executors = list(self._executors.values())
            self._executors.clear()
        for executor in executors:
            executor.shutdown(wait=False, cancel_futures=True)

    def _executor_for(self, ground_station_id: str) -> ThreadPoolExecutor:
        with self._executors_lock:
            if self._closed:
                raise RuntimeError("conflict resolver is closed")
            executor = self._executors.get(ground_station_id)
            if executor is None:
                executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix=f"cancellability-{ground_station_id}",
                )
                self._executors[ground_station_id] = executor
            return executor

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------

    def resolve_window_insertion(self, ground_station_id: str, window_range: TimeRange) -> ResolutionDecision:
        """Insert a window over a station's schedule, canceling what it overlaps.

        Raises:
            InvalidRangeError: ``window_range`` is empty or inverted. Nothing
                is read or written in that case.
        """
        window_range.validate()

        overlapping = self._plans.find_overlapping(ground_station_id, window_range)
        blocked = self._check_cancellable(ground_station_id, overlapping)

        if blocked:
            decision = ResolutionDecision(
                ground_station_id=ground_station_id,
                window_range=window_range,
                accepted=False,
                blocked=blocked,
            )
            self._event_bus.emit(
                WindowRejectedEvent(
                    ground_station_id=ground_station_id,
                    start_time=window_range.start,
                    end_time=window_range.end,
                    blocking_plan_ids=list(decision.blocking_plan_ids),
                )
            )
            self._emit_summary(decision, overlapping=len(overlapping))
            return decision

        # Phase two: every plan is cancellable and the exclusive scope keeps
        # it that way, so the cancellations below cannot be refused.
        canceled_ids: list[str] = []
        for plan in overlapping:
            self._plans.cancel(plan.plan_id)
            canceled_ids.append(plan.plan_id)

        window_id = self._windows.insert(ground_station_id, window_range)

        for plan_id in canceled_ids:
            self._event_bus.emit(
                PlanCanceledEvent(
                    ground_station_id=ground_station_id,
                    plan_id=plan_id,
                    window_id=window_id,
                )
            )

        decision = ResolutionDecision(
            ground_station_id=ground_station_id,
            window_range=window_range,
            accepted=True,
            window_id=window_id,
            canceled_plan_ids=canceled_ids,
        )
        self._emit_summary(decision, overlapping=len(overlapping))
        return decision

    # ---------------------------------------------------------------------
    # Phase one
    # ---------------------------------------------------------------------

    def _check_cancellable(self, ground_station_id: str, plans: list[Plan]) -> list[BlockedPlan]:
        """Ask the tracker about every plan concurrently, bounded by the timeout.

        A timeout or a tracker failure counts as "not cancellable": a window
        is never persisted over a plan whose status is uncertain.
        """
        if not plans:
            return []

        executor = self._executor_for(ground_station_id)
        futures: list[tuple[Plan, Future[bool]]] = [
            (plan, executor.submit(self._tracker.is_cancellable, plan)) for plan in plans
        ]
        deadline = time.monotonic() + self._cancel_timeout_s

        blocked: list[BlockedPlan] = []
        for plan, future in futures:
            remaining = max(0.0, deadline - time.monotonic())
            try:
                cancellable = future.result(timeout=remaining)
            except FutureTimeoutError:
                future.cancel()
                LOGGER.warning(
                    "cancellability check timed out",
                    extra={"plan_id": plan.plan_id, "timeout_s": self._cancel_timeout_s},
                )
                blocked.append(BlockedPlan(plan.plan_id, Reason.CANCELLABILITY_TIMEOUT))
                continue
            except Exception:  # pylint: disable=broad-exception-caught
                LOGGER.exception("cancellability check failed", extra={"plan_id": plan.plan_id})
                blocked.append(BlockedPlan(plan.plan_id, Reason.TRACKER_ERROR))
                continue

            if not cancellable:
                blocked.append(BlockedPlan(plan.plan_id, Reason.EXECUTING))

        return blocked

    def _emit_summary(self, decision: ResolutionDecision, *, overlapping: int) -> None:
        reasons: dict[str, int] = {}
        for b in decision.blocked:
            reasons[b.reason] = reasons.get(b.reason, 0) + 1

        self._event_bus.emit(
            ResolutionDecisionEvent(
                ground_station_id=decision.ground_station_id,
                accepted=decision.accepted,
                overlapping=overlapping,
                canceled=len(decision.canceled_plan_ids),
                blocked=len(decision.blocked),
                block_reasons=reasons,
            )
        )
