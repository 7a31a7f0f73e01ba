"""Core shared data models.

This module defines the canonical Pydantic models for plans, unavailability
windows, and the request/response messages of the ground-station scheduling
API. Field names follow the wire contract; internal-only fields (plan status,
owning ground station) are excluded from wire dumps.
"""

# pylint: disable=missing-class-docstring,missing-function-docstring
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator

from groundstation_scheduler.core.domain.plan_state_machine import PlanStatus
from groundstation_scheduler.core.domain.time_range import TimeRange

# Opaque radio configuration payload. Its semantics belong to the ground
# station; the engine carries it through unchanged.
RadioDeviceConfiguration = dict[str, Any]


# ---------------------------------------------------------------------------
# Entity models
# ---------------------------------------------------------------------------


class Tle(BaseModel):
    """Unparsed two-line element set. Opaque to this engine."""

    line_1: str = Field(..., min_length=1)
    line_2: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)


class Plan(BaseModel):
    """
    A scheduled pass between a ground station and a satellite.

    Notes:
    - [start_time, end_time) is the reserved execution envelope; it never changes.
    - [aos_time, los_time) is the contact window; it may shift when updated
      orbital data becomes available, but always stays inside the envelope.
    - status is internal and not part of the wire format.
    """

    plan_id: str = Field(..., min_length=1)
    ground_station_id: str = Field(..., min_length=1)

    tle: Tle

    start_time: AwareDatetime = Field(..., description="Start of the reserved execution window.")
    end_time: AwareDatetime = Field(..., description="End of the reserved execution window.")

    aos_time: AwareDatetime = Field(..., description="Acquisition of signal.")
    los_time: AwareDatetime = Field(..., description="Loss of signal.")

    downlink_radio_device: RadioDeviceConfiguration | None = None
    uplink_radio_device: RadioDeviceConfiguration | None = None

    status: PlanStatus = PlanStatus.SCHEDULED

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def validate_windows(self) -> Plan:
        """
        Enforce window consistency:
        - execution window must be non-empty (end_time > start_time)
        - contact window must be non-empty (los_time > aos_time)
        - contact window must lie within the execution window
        """
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.los_time <= self.aos_time:
            raise ValueError("los_time must be after aos_time")
        if self.aos_time < self.start_time:
            raise ValueError("aos_time must not be before start_time")
        if self.los_time > self.end_time:
            raise ValueError("los_time must not be after end_time")
        return self

    @property
    def execution_window(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)

    @property
    def contact_window(self) -> TimeRange:
        return TimeRange(start=self.aos_time, end=self.los_time)

    def is_scheduled(self) -> bool:
        return self.status == PlanStatus.SCHEDULED

    def to_wire(self) -> dict[str, Any]:
        """Dump in the shape of the wire ``Plan`` message."""
        return self.model_dump(
            mode="json",
            exclude={"status", "ground_station_id"},
            exclude_none=True,
        )


class UnavailabilityWindow(BaseModel):
    """A time window during which a ground station cannot execute plans."""

    window_id: str = Field(..., min_length=1)
    ground_station_id: str = Field(..., min_length=1)
    start_time: AwareDatetime
    end_time: AwareDatetime

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_range(self) -> UnavailabilityWindow:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)

    def sort_key(self) -> tuple[datetime, str]:
        return (self.start_time, self.window_id)

    def to_wire(self) -> dict[str, Any]:
        """Dump in the shape of the wire ``UnavailabilityWindow`` message."""
        return self.model_dump(mode="json", exclude={"ground_station_id"})


# ---------------------------------------------------------------------------
# Request / response messages
#
# Request fields are optional at the model level: a missing field is a
# service-level INVALID_ARGUMENT, not a parse failure.
# ---------------------------------------------------------------------------


class AddUnavailabilityWindowRequest(BaseModel):
    ground_station_id: str = ""
    start_time: datetime | None = None
    end_time: datetime | None = None

    model_config = ConfigDict(extra="forbid")


class AddUnavailabilityWindowResponse(BaseModel):
    window_id: str

    model_config = ConfigDict(extra="forbid")


class DeleteUnavailabilityWindowRequest(BaseModel):
    window_id: str = ""

    model_config = ConfigDict(extra="forbid")


class DeleteUnavailabilityWindowResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ListPlansRequest(BaseModel):
    ground_station_id: str = ""
    aos_after: datetime | None = None
    aos_before: datetime | None = None

    model_config = ConfigDict(extra="forbid")


class ListPlansResponse(BaseModel):
    plan: list[Plan] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def to_wire(self) -> dict[str, Any]:
        return {"plan": [p.to_wire() for p in self.plan]}


class ListUnavailabilityWindowsRequest(BaseModel):
    ground_station_id: str = ""
    start_time: datetime | None = None
    end_time: datetime | None = None

    model_config = ConfigDict(extra="forbid")


class ListUnavailabilityWindowsResponse(BaseModel):
    window: list[UnavailabilityWindow] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def to_wire(self) -> dict[str, Any]:
        return {"window": [w.to_wire() for w in self.window]}
