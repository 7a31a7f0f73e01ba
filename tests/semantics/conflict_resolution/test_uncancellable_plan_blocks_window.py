"""
Semantic test: one uncancellable plan blocks the whole insertion.

Invariant:
If any overlapping plan cannot be canceled, the insertion is rejected and
the station's schedule (plans and windows) is exactly as before the call:
cancellable plans that were checked first are not canceled either.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from groundstation_scheduler.adapters.execution_tracker import StaticExecutionTracker
from groundstation_scheduler.core.domain.errors import InvalidRangeError
from groundstation_scheduler.core.domain.status_codes import Reason
from groundstation_scheduler.core.domain.time_range import TimeRange
from groundstation_scheduler.core.events.events import (
    PlanCanceledEvent,
    WindowAddedEvent,
    WindowRejectedEvent,
)
from groundstation_scheduler.core.events.sinks.null_event_bus import RecordingEventBus
from groundstation_scheduler.core.resolver.conflict_resolver import ConflictResolver
from groundstation_scheduler.core.store.plan_store import PlanStore
from groundstation_scheduler.core.store.window_store import WindowStore


def at(hh: int, mm: int = 0) -> datetime:
    return datetime(2024, 1, 1, hh, mm, tzinfo=timezone.utc)


class _CountingTracker(StaticExecutionTracker):
    def __init__(self, executing: set[str]) -> None:
        super().__init__(executing)
        self.calls = 0

    def is_cancellable(self, plan) -> bool:
        self.calls += 1
        return super().is_cancellable(plan)


def test_schedule_unchanged_when_one_plan_is_executing(make_plan) -> None:
    bus = RecordingEventBus()
    plans = PlanStore(bus)
    windows = WindowStore(bus)
    tracker = StaticExecutionTracker({"p-b"})
    resolver = ConflictResolver(plans=plans, windows=windows, tracker=tracker, event_bus=bus)

    plans.add(make_plan("p-a", at(10, 0), at(10, 20)))
    plans.add(make_plan("p-b", at(10, 30), at(10, 50)))
    plans.add(make_plan("p-c", at(10, 40), at(11, 0)))
    existing = windows.insert("gs-1", TimeRange.of(at(6, 0), at(7, 0)))

    plans_before = plans.snapshot("gs-1")
    windows_before = windows.snapshot("gs-1")
    bus.events.clear()

    try:
        decision = resolver.resolve_window_insertion("gs-1", TimeRange.of(at(10, 0), at(11, 0)))
    finally:
        resolver.close()

    assert not decision.accepted
    assert decision.window_id is None
    assert decision.canceled_plan_ids == []
    assert decision.blocking_plan_ids == ("p-b",)
    assert decision.blocked[0].reason == Reason.EXECUTING

    assert plans.snapshot("gs-1") == plans_before
    assert windows.snapshot("gs-1") == windows_before
    assert [w.window_id for w in windows.snapshot("gs-1")] == [existing]

    assert bus.of_type(PlanCanceledEvent) == []
    assert bus.of_type(WindowAddedEvent) == []
    rejected = bus.of_type(WindowRejectedEvent)
    assert len(rejected) == 1
    assert rejected[0].blocking_plan_ids == ["p-b"]


def test_every_blocking_plan_is_reported(make_plan) -> None:
    bus = RecordingEventBus()
    plans = PlanStore(bus)
    windows = WindowStore(bus)
    resolver = ConflictResolver(
        plans=plans,
        windows=windows,
        tracker=StaticExecutionTracker({"p-1", "p-3"}),
        event_bus=bus,
    )
    for i in range(4):
        plans.add(make_plan(f"p-{i}", at(10, i * 10), at(10, i * 10 + 5)))

    try:
        decision = resolver.resolve_window_insertion("gs-1", TimeRange.of(at(10, 0), at(11, 0)))
    finally:
        resolver.close()

    assert decision.blocking_plan_ids == ("p-1", "p-3")


def test_invalid_range_touches_nothing(make_plan) -> None:
    bus = RecordingEventBus()
    plans = PlanStore(bus)
    windows = WindowStore(bus)
    tracker = _CountingTracker(set())
    resolver = ConflictResolver(plans=plans, windows=windows, tracker=tracker, event_bus=bus)
    plans.add(make_plan("p1", at(10, 0), at(10, 20)))
    bus.events.clear()

    try:
        with pytest.raises(InvalidRangeError):
            resolver.resolve_window_insertion("gs-1", TimeRange(at(10, 5), at(10, 5)))
    finally:
        resolver.close()

    assert tracker.calls == 0
    assert bus.events == []
    assert windows.snapshot("gs-1") == ()
