from __future__ import annotations

import json
import logging
import os
from typing import Any

from prometheus_client import CollectorRegistry, Counter, push_to_gateway

from groundstation_scheduler.core.events.events import (
    PlanCanceledEvent,
    ResolutionDecisionEvent,
    WindowAddedEvent,
    WindowDeletedEvent,
    WindowRejectedEvent,
)

LOGGER = logging.getLogger(__name__)


class PrometheusMetricsSink:
    """Counts schedule events into a private Prometheus registry.

    Optional environment:
    - PROMETHEUS_PUSHGATEWAY_URL: when set, close() pushes the registry to
      the Pushgateway under the configured job name.
    - PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON: JSON object used as grouping key.

    Pushing is best-effort: a failed push is logged and never propagated.
    """

    def __init__(self, *, job: str = "groundstation_scheduler") -> None:
        self._job = job
        self._pushgateway_url = os.environ.get("PROMETHEUS_PUSHGATEWAY_URL")
        self._grouping_key = self._load_grouping_key()
        self.registry = CollectorRegistry()

        self._windows_added = Counter(
            "gs_unavailability_windows_added",
            "Unavailability windows persisted.",
            labelnames=["ground_station_id"],
            registry=self.registry,
        )
        self._windows_rejected = Counter(
            "gs_unavailability_windows_rejected",
            "Unavailability windows rejected by an uncancellable plan.",
            labelnames=["ground_station_id"],
            registry=self.registry,
        )
        self._windows_deleted = Counter(
            "gs_unavailability_windows_deleted",
            "Unavailability windows deleted.",
            labelnames=["ground_station_id"],
            registry=self.registry,
        )
        self._plans_canceled = Counter(
            "gs_plans_canceled",
            "Plans canceled by unavailability windows.",
            labelnames=["ground_station_id"],
            registry=self.registry,
        )
        self._blocks = Counter(
            "gs_cancellation_blocks",
            "Plans that blocked a window insertion, by reason.",
            labelnames=["reason"],
            registry=self.registry,
        )

    def is_push_enabled(self) -> bool:
        return self._pushgateway_url is not None

    @staticmethod
    def _load_grouping_key() -> dict[str, str]:
        raw = os.environ.get("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON")
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning(
                "Invalid PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON; ignoring"
            )
            return {}

        if not isinstance(data, dict):
            return {}

        return {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}

    def on_event(self, event: Any) -> None:
        if isinstance(event, WindowAddedEvent):
            self._windows_added.labels(ground_station_id=event.ground_station_id).inc()
        elif isinstance(event, WindowRejectedEvent):
            self._windows_rejected.labels(ground_station_id=event.ground_station_id).inc()
        elif isinstance(event, WindowDeletedEvent):
            self._windows_deleted.labels(ground_station_id=event.ground_station_id).inc()
        elif isinstance(event, PlanCanceledEvent):
            self._plans_canceled.labels(ground_station_id=event.ground_station_id).inc()
        elif isinstance(event, ResolutionDecisionEvent):
            for reason, count in event.block_reasons.items():
                self._blocks.labels(reason=reason).inc(count)

    def close(self) -> None:
        if not self._pushgateway_url:
            return

        try:
            push_to_gateway(
                gateway=self._pushgateway_url,
                job=self._job,
                registry=self.registry,
                grouping_key=self._grouping_key,
            )
        except OSError:
            LOGGER.exception("Prometheus push failed")
            return

        LOGGER.info(
            "Prometheus metrics pushed",
            extra={"job": self._job, "grouping_key": self._grouping_key},
        )
