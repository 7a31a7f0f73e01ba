"""
Domain event models.

These events represent immutable facts about a ground station's schedule.
They are consumed by loggers, recorders, and metrics pipelines.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True)
class PlanRegisteredEvent:
    ground_station_id: str
    plan_id: str

    start_time: datetime
    end_time: datetime


@dataclass(slots=True)
class PlanCanceledEvent:
    ground_station_id: str
    plan_id: str

    # Window whose insertion caused the cancellation.
    window_id: str


@dataclass(slots=True)
class ContactWindowUpdatedEvent:
    ground_station_id: str
    plan_id: str

    prev_aos_time: datetime
    prev_los_time: datetime
    aos_time: datetime
    los_time: datetime


@dataclass(slots=True)
class WindowAddedEvent:
    ground_station_id: str
    window_id: str

    start_time: datetime
    end_time: datetime


@dataclass(slots=True)
class WindowRejectedEvent:
    ground_station_id: str

    start_time: datetime
    end_time: datetime

    blocking_plan_ids: list[str]


@dataclass(slots=True)
class WindowDeletedEvent:
    ground_station_id: str
    window_id: str


@dataclass(slots=True)
class ResolutionDecisionEvent:
    ground_station_id: str

    accepted: bool
    overlapping: int
    canceled: int
    blocked: int

    block_reasons: dict[str, int] = field(default_factory=dict)
