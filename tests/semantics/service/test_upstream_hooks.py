"""
Semantic test: upstream plan ingest and AOS/LOS refresh.

Invariants:
- A plan whose execution window overlaps an existing unavailability window
  is refused, so no SCHEDULED plan ever sits inside a window.
- AOS/LOS refreshes must stay inside the plan's execution window.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from groundstation_scheduler.core.domain.errors import (
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
)
from groundstation_scheduler.core.domain.status_codes import Reason


def at(hh: int, mm: int = 0) -> datetime:
    return datetime(2024, 1, 1, hh, mm, tzinfo=timezone.utc)


def test_plan_inside_window_is_refused(service, make_plan) -> None:
    added = service.add_unavailability_window(
        {"ground_station_id": "gs-1", "start_time": at(10, 0), "end_time": at(11, 0)}
    )

    with pytest.raises(FailedPreconditionError) as excinfo:
        service.register_plan(make_plan("p1", at(10, 50), at(11, 10)))

    assert excinfo.value.reason == Reason.WINDOW_CONFLICT
    assert added.window_id in excinfo.value.detail
    assert service.plans.get("p1") is None


def test_plan_adjacent_to_window_is_accepted(service, make_plan) -> None:
    service.add_unavailability_window(
        {"ground_station_id": "gs-1", "start_time": at(10, 0), "end_time": at(11, 0)}
    )

    service.register_plan(make_plan("p1", at(11, 0), at(11, 20)))

    assert service.plans.get("p1") is not None


def test_plan_as_dict_is_validated(service) -> None:
    with pytest.raises(InvalidArgumentError) as excinfo:
        service.register_plan(
            {
                "plan_id": "p1",
                "ground_station_id": "gs-1",
                "tle": {"line_1": "1", "line_2": "2"},
                "start_time": at(10, 0),
                "end_time": at(10, 20),
                "aos_time": at(9, 55),
                "los_time": at(10, 10),
            }
        )

    assert excinfo.value.reason == Reason.INVALID_FIELD


def test_refresh_contact_window_through_service(service, make_plan) -> None:
    service.register_plan(make_plan("p1", at(10, 0), at(10, 20), aos=at(10, 5), los=at(10, 15)))

    updated = service.refresh_contact_window("p1", at(10, 3), at(10, 17))
    assert (updated.aos_time, updated.los_time) == (at(10, 3), at(10, 17))

    with pytest.raises(InvalidArgumentError):
        service.refresh_contact_window("p1", at(9, 0), at(10, 17))
    assert service.plans.get("p1").aos_time == at(10, 3)

    with pytest.raises(NotFoundError):
        service.refresh_contact_window("missing", at(10, 3), at(10, 17))
