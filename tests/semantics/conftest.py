"""Shared fixtures for the semantic test suite."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterator

import pytest

from groundstation_scheduler.adapters.execution_tracker import StaticExecutionTracker
from groundstation_scheduler.core.domain.types import Plan, Tle
from groundstation_scheduler.core.events.sinks.null_event_bus import RecordingEventBus
from groundstation_scheduler.service.scheduling_service import SchedulingService

ISS_TLE = Tle(
    line_1="1 25544U 98067A   24001.50000000  .00016717  00000-0  10270-3 0  9005",
    line_2="2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.49815307431998",
)


@pytest.fixture
def make_plan() -> Callable[..., Plan]:
    """Factory for SCHEDULED plans; the contact window defaults to the execution window."""

    def _make(
        plan_id: str,
        start: datetime,
        end: datetime,
        *,
        aos: datetime | None = None,
        los: datetime | None = None,
        ground_station_id: str = "gs-1",
    ) -> Plan:
        return Plan(
            plan_id=plan_id,
            ground_station_id=ground_station_id,
            tle=ISS_TLE,
            start_time=start,
            end_time=end,
            aos_time=aos if aos is not None else start,
            los_time=los if los is not None else end,
            downlink_radio_device={"center_frequency_hz": 437_800_000, "modulation": "GMSK"},
        )

    return _make


@pytest.fixture
def tracker() -> StaticExecutionTracker:
    return StaticExecutionTracker()


@pytest.fixture
def event_bus() -> RecordingEventBus:
    return RecordingEventBus()


@pytest.fixture
def service(tracker: StaticExecutionTracker, event_bus: RecordingEventBus) -> Iterator[SchedulingService]:
    svc = SchedulingService(tracker=tracker, event_bus=event_bus)
    yield svc
    svc.close()
