"""Scheduling service configuration model."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from groundstation_scheduler.core.resolver.conflict_resolver import DEFAULT_CANCEL_TIMEOUT_S
from groundstation_scheduler.core.store.plan_store import MAX_AOS_QUERY_RANGE


class SchedulingConfig(BaseModel):
    """Structured configuration for the scheduling service.

    JSON example:
        {
          "max_list_plans_range": "P31D",
          "cancel_timeout_s": 2.5,
          "event_log_path": "/var/log/gs/events.jsonl",
          "metrics_enabled": true
        }
    """

    # Longest aos_after..aos_before span ListPlans accepts (inclusive).
    max_list_plans_range: timedelta = MAX_AOS_QUERY_RANGE

    # Upper bound on a single cancellability check.
    cancel_timeout_s: float = Field(default=DEFAULT_CANCEL_TIMEOUT_S, gt=0)
    # Size of each ground station's own cancellability-check pool.
    cancel_check_workers: int = Field(default=8, ge=1)

    # Whether ListPlans also returns canceled plans.
    include_canceled_plans: bool = False

    event_log_path: Path | None = None
    metrics_enabled: bool = False
    metrics_job: str = Field(default="groundstation_scheduler", min_length=1)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> SchedulingConfig:
        """Create a SchedulingConfig instance from a JSON-compatible object."""
        return cls.model_validate(obj)

    @field_validator("max_list_plans_range")
    @classmethod
    def _positive_range(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("max_list_plans_range must be positive")
        return value
