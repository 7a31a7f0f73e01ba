"""Execution tracker adapters.

- StaticExecutionTracker: a fixed set of plan IDs is known to be executing.
- ClockExecutionTracker: a plan becomes uncancellable once its reserved
  execution window has started.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Iterable

if TYPE_CHECKING:
    from groundstation_scheduler.core.domain.types import Plan


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StaticExecutionTracker:
    """Tracker backed by an explicit set of executing plan IDs."""

    def __init__(self, executing_plan_ids: Iterable[str] = ()) -> None:
        self._executing: set[str] = set(executing_plan_ids)

    def mark_executing(self, plan_id: str) -> None:
        self._executing.add(plan_id)

    def mark_idle(self, plan_id: str) -> None:
        self._executing.discard(plan_id)

    def is_cancellable(self, plan: Plan) -> bool:
        return plan.plan_id not in self._executing


class ClockExecutionTracker:
    """Tracker that refuses cancellation once ``now >= plan.start_time``.

    The ground station starts preparing for a plan at the start of its
    execution window, so from then on it is committed.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._clock = clock

    def is_cancellable(self, plan: Plan) -> bool:
        return self._clock() < plan.start_time
