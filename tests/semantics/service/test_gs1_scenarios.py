"""
Semantic test: end-to-end window insertion over a single plan.

Scenario:
gs-1 has plan p1 with execution window [10:00, 10:20). Adding window
[10:05, 10:10) either cancels p1 (cancellable) and hides it from ListPlans,
or fails with FAILED_PRECONDITION (p1 executing) and changes nothing.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from groundstation_scheduler.core.domain.errors import FailedPreconditionError
from groundstation_scheduler.core.domain.ids import is_well_formed_window_id
from groundstation_scheduler.core.domain.plan_state_machine import PlanStatus
from groundstation_scheduler.core.domain.status_codes import Reason, StatusCode
from groundstation_scheduler.core.domain.types import (
    AddUnavailabilityWindowRequest,
    ListPlansRequest,
    ListUnavailabilityWindowsRequest,
)
from groundstation_scheduler.core.events.sinks.null_event_bus import NullEventBus
from groundstation_scheduler.service.scheduling_service import SchedulingService
from groundstation_scheduler.service.service_config import SchedulingConfig


def at(hh: int, mm: int = 0) -> datetime:
    return datetime(2024, 1, 1, hh, mm, tzinfo=timezone.utc)


def test_cancellable_plan_is_canceled_and_hidden(service, make_plan) -> None:
    service.register_plan(make_plan("p1", at(10, 0), at(10, 20)))

    response = service.add_unavailability_window(
        AddUnavailabilityWindowRequest(ground_station_id="gs-1", start_time=at(10, 5), end_time=at(10, 10))
    )

    assert is_well_formed_window_id(response.window_id)
    assert service.plans.get("p1").status == PlanStatus.CANCELED

    listed = service.list_plans(ListPlansRequest(ground_station_id="gs-1", aos_after=at(9), aos_before=at(11)))
    assert listed.plan == []

    windows = service.list_unavailability_windows(
        ListUnavailabilityWindowsRequest(ground_station_id="gs-1", start_time=at(9), end_time=at(11))
    )
    assert [w.window_id for w in windows.window] == [response.window_id]


def test_executing_plan_blocks_window(service, tracker, make_plan) -> None:
    service.register_plan(make_plan("p1", at(10, 0), at(10, 20)))
    tracker.mark_executing("p1")

    with pytest.raises(FailedPreconditionError) as excinfo:
        service.add_unavailability_window(
            AddUnavailabilityWindowRequest(ground_station_id="gs-1", start_time=at(10, 5), end_time=at(10, 10))
        )

    assert excinfo.value.code == StatusCode.FAILED_PRECONDITION
    assert excinfo.value.reason == Reason.EXECUTING
    assert excinfo.value.blocking_plan_ids == ("p1",)
    assert "p1" in str(excinfo.value)

    assert service.plans.get("p1").status == PlanStatus.SCHEDULED
    listed = service.list_plans(ListPlansRequest(ground_station_id="gs-1", aos_after=at(9), aos_before=at(11)))
    assert [p.plan_id for p in listed.plan] == ["p1"]

    windows = service.list_unavailability_windows(
        ListUnavailabilityWindowsRequest(ground_station_id="gs-1", start_time=at(0), end_time=at(23))
    )
    assert windows.window == []


def test_include_canceled_plans_config(tracker, make_plan) -> None:
    config = SchedulingConfig(include_canceled_plans=True)
    with SchedulingService(tracker=tracker, config=config, event_bus=NullEventBus()) as service:
        service.register_plan(make_plan("p1", at(10, 0), at(10, 20)))
        service.add_unavailability_window(
            {"ground_station_id": "gs-1", "start_time": at(10, 5), "end_time": at(10, 10)}
        )

        listed = service.list_plans({"ground_station_id": "gs-1", "aos_after": at(9), "aos_before": at(11)})

    assert [(p.plan_id, p.status) for p in listed.plan] == [("p1", PlanStatus.CANCELED)]
    assert "status" not in listed.to_wire()["plan"][0]
