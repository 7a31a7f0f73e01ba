"""RPC-facing orchestration of the scheduling engine.

Every request goes RECEIVED -> VALIDATED -> EXECUTED -> RESPONDED. Request
shape is validated before any store is touched; a failure at any step ends
the request with a SchedulingError carrying its status code.
"""

# pylint: disable=too-many-instance-attributes
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterator, TypeVar

from pydantic import BaseModel, ValidationError

from groundstation_scheduler.core.domain.errors import (
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
    SchedulingError,
)
from groundstation_scheduler.core.domain.ids import is_well_formed_window_id
from groundstation_scheduler.core.domain.status_codes import Reason
from groundstation_scheduler.core.domain.time_range import TimeRange
from groundstation_scheduler.core.domain.types import (
    AddUnavailabilityWindowRequest,
    AddUnavailabilityWindowResponse,
    DeleteUnavailabilityWindowRequest,
    DeleteUnavailabilityWindowResponse,
    ListPlansRequest,
    ListPlansResponse,
    ListUnavailabilityWindowsRequest,
    ListUnavailabilityWindowsResponse,
    Plan,
)
from groundstation_scheduler.core.events.event_bus import EventBus
from groundstation_scheduler.core.events.sinks.file_recorder import FileRecorderSink
from groundstation_scheduler.core.events.sinks.prometheus_metrics import PrometheusMetricsSink
from groundstation_scheduler.core.events.sinks.sink_logging import LoggingEventSink
from groundstation_scheduler.core.locking import ScheduleLocks
from groundstation_scheduler.core.resolver.conflict_resolver import ConflictResolver
from groundstation_scheduler.core.store.plan_store import PlanStore
from groundstation_scheduler.core.store.window_store import WindowStore
from groundstation_scheduler.service.service_config import SchedulingConfig

if TYPE_CHECKING:
    from groundstation_scheduler.core.ports.execution_tracker import ExecutionTracker

LOGGER = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)


def build_event_bus(config: SchedulingConfig) -> EventBus:
    """Assemble the sinks the configuration asks for."""
    sinks: list[Any] = [LoggingEventSink(logging.getLogger("groundstation_scheduler.events"))]
    if config.event_log_path is not None:
        sinks.append(FileRecorderSink(config.event_log_path))
    if config.metrics_enabled:
        sinks.append(PrometheusMetricsSink(job=config.metrics_job))
    return EventBus(sinks=sinks)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _coerce(model_type: type[RequestT], request: RequestT | dict[str, Any]) -> RequestT:
    if isinstance(request, model_type):
        return request
    try:
        return model_type.model_validate(request)
    except ValidationError as exc:
        raise InvalidArgumentError(Reason.INVALID_FIELD, str(exc.errors()[0]["msg"])) from exc


def _require_ground_station_id(value: str) -> str:
    if not value or not value.strip():
        raise InvalidArgumentError(Reason.MISSING_FIELD, "ground_station_id is required")
    return value


def _require_timestamp(name: str, value: datetime | None) -> datetime:
    if value is None:
        raise InvalidArgumentError(Reason.MISSING_FIELD, f"{name} is required")
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidArgumentError(Reason.NAIVE_TIMESTAMP, f"{name} must carry a UTC offset")
    return value


class SchedulingService:
    """Implements AddUnavailabilityWindow, DeleteUnavailabilityWindow,
    ListPlans and ListUnavailabilityWindows over the stores and resolver.

    Callers are assumed to have passed ownership checks for the ground
    station they name.
    """

    def __init__(
        self,
        *,
        tracker: ExecutionTracker,
        config: SchedulingConfig | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.config = config if config is not None else SchedulingConfig()
        self._event_bus = event_bus if event_bus is not None else build_event_bus(self.config)

        self.plans = PlanStore(self._event_bus, max_aos_range=self.config.max_list_plans_range)
        self.windows = WindowStore(self._event_bus)
        self._locks = ScheduleLocks()
        self._resolver = ConflictResolver(
            plans=self.plans,
            windows=self.windows,
            tracker=tracker,
            event_bus=self._event_bus,
            cancel_timeout_s=self.config.cancel_timeout_s,
            max_workers=self.config.cancel_check_workers,
        )

    def close(self) -> None:
        self._resolver.close()
        self._event_bus.close()

    def __enter__(self) -> SchedulingService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @contextmanager
    def _request(self, op: str) -> Iterator[None]:
        LOGGER.debug("%s received", op)
        try:
            yield
        except SchedulingError as exc:
            LOGGER.info(
                "%s failed: %s",
                op,
                exc.code,
                extra={"op": op, "code": exc.code, "reason": exc.reason, "detail": exc.detail},
            )
            raise
        LOGGER.debug("%s responded", op)

    # ---------------------------------------------------------------------
    # RPCs
    # ---------------------------------------------------------------------

    def add_unavailability_window(
        self,
        request: AddUnavailabilityWindowRequest | dict[str, Any],
    ) -> AddUnavailabilityWindowResponse:
        """Add a window, canceling every plan it overlaps.

        Raises:
            InvalidArgumentError: missing fields or ``end_time <= start_time``.
            FailedPreconditionError: an overlapping plan cannot be canceled.
                Nothing changed.
        """
        with self._request("AddUnavailabilityWindow"):
            req = _coerce(AddUnavailabilityWindowRequest, request)
            gs_id = _require_ground_station_id(req.ground_station_id)
            window_range = TimeRange.of(
                _require_timestamp("start_time", req.start_time),
                _require_timestamp("end_time", req.end_time),
            )

            with self._locks.exclusive(gs_id):
                decision = self._resolver.resolve_window_insertion(gs_id, window_range)

            if not decision.accepted:
                raise FailedPreconditionError(
                    decision.blocked[0].reason,
                    blocking_plan_ids=decision.blocking_plan_ids,
                )

            return AddUnavailabilityWindowResponse(window_id=decision.window_id)

    def delete_unavailability_window(
        self,
        request: DeleteUnavailabilityWindowRequest | dict[str, Any],
    ) -> DeleteUnavailabilityWindowResponse:
        """Delete a window. Plans canceled by it stay canceled.

        Raises:
            InvalidArgumentError: ``window_id`` missing or malformed.
            NotFoundError: no such window (including a repeated delete).
        """
        with self._request("DeleteUnavailabilityWindow"):
            req = _coerce(DeleteUnavailabilityWindowRequest, request)
            if not req.window_id:
                raise InvalidArgumentError(Reason.MISSING_FIELD, "window_id is required")
            if not is_well_formed_window_id(req.window_id):
                raise InvalidArgumentError(Reason.MALFORMED_ID, f"window_id {req.window_id!r} is malformed")

            gs_id = self.windows.ground_station_of(req.window_id)
            if gs_id is None:
                raise NotFoundError(Reason.WINDOW_NOT_FOUND, f"window {req.window_id!r} does not exist")

            # Re-checked under the scope: a concurrent delete may have won.
            with self._locks.exclusive(gs_id):
                self.windows.delete(req.window_id)

            return DeleteUnavailabilityWindowResponse()

    def list_plans(self, request: ListPlansRequest | dict[str, Any]) -> ListPlansResponse:
        """List plans whose AOS falls in ``[aos_after, aos_before)``, sorted by AOS.

        Raises:
            InvalidArgumentError: missing fields, inverted range, or a span
                longer than the configured maximum (31 days by default).
        """
        with self._request("ListPlans"):
            req = _coerce(ListPlansRequest, request)
            gs_id = _require_ground_station_id(req.ground_station_id)
            aos_after = _require_timestamp("aos_after", req.aos_after)
            aos_before = _require_timestamp("aos_before", req.aos_before)

            if aos_before < aos_after:
                raise InvalidArgumentError(Reason.INVALID_RANGE, "aos_before precedes aos_after")
            if aos_before - aos_after > self.config.max_list_plans_range:
                raise InvalidArgumentError(
                    Reason.RANGE_TOO_LONG,
                    f"aos range longer than {self.config.max_list_plans_range}",
                )

            with self._locks.shared(gs_id):
                plans = self.plans.list_by_aos_range(
                    gs_id,
                    aos_after,
                    aos_before,
                    include_canceled=self.config.include_canceled_plans,
                )
            return ListPlansResponse(plan=plans)

    def list_unavailability_windows(
        self,
        request: ListUnavailabilityWindowsRequest | dict[str, Any],
    ) -> ListUnavailabilityWindowsResponse:
        """List windows overlapping ``[start_time, end_time)``, sorted by start time.

        Raises:
            InvalidArgumentError: missing fields or ``end_time <= start_time``.
        """
        with self._request("ListUnavailabilityWindows"):
            req = _coerce(ListUnavailabilityWindowsRequest, request)
            gs_id = _require_ground_station_id(req.ground_station_id)
            query = TimeRange.of(
                _require_timestamp("start_time", req.start_time),
                _require_timestamp("end_time", req.end_time),
            )

            with self._locks.shared(gs_id):
                windows = self.windows.list_in_range(gs_id, query)
            return ListUnavailabilityWindowsResponse(window=windows)

    # ---------------------------------------------------------------------
    # Upstream hooks
    # ---------------------------------------------------------------------

    def register_plan(self, plan: Plan | dict[str, Any]) -> None:
        """Ingest a plan from the upstream scheduler.

        Raises:
            InvalidArgumentError: malformed plan or duplicate plan_id.
            FailedPreconditionError: the plan's execution window overlaps an
                existing unavailability window.
        """
        with self._request("RegisterPlan"):
            plan = _coerce(Plan, plan)
            with self._locks.exclusive(plan.ground_station_id):
                conflicting = self.windows.list_in_range(plan.ground_station_id, plan.execution_window)
                if conflicting:
                    raise FailedPreconditionError(
                        Reason.WINDOW_CONFLICT,
                        "plan overlaps unavailability window(s): "
                        + ", ".join(w.window_id for w in conflicting),
                    )
                self.plans.add(plan)

    def refresh_contact_window(self, plan_id: str, aos_time: datetime, los_time: datetime) -> Plan:
        """Apply updated AOS/LOS times from orbital propagation.

        Raises:
            NotFoundError: unknown plan.
            InvalidArgumentError: the new contact window leaves the plan's
                execution window; the plan is unchanged.
        """
        with self._request("RefreshContactWindow"):
            aos_time = _require_timestamp("aos_time", aos_time)
            los_time = _require_timestamp("los_time", los_time)

            current = self.plans.get(plan_id)
            if current is None:
                raise NotFoundError(Reason.PLAN_NOT_FOUND, f"plan {plan_id!r} does not exist")

            with self._locks.exclusive(current.ground_station_id):
                return self.plans.update_contact_window(plan_id, aos_time, los_time)
