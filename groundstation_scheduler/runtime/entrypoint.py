"""Replay entrypoint.

Seeds a schedule from a plans file, replays a list of API requests against
it, and writes one JSON result per request.

Plans file: JSON list of Plan objects. A plan may carry ``"executing": true``
to mark it uncancellable for the replay.

Requests file: JSON list of ``{"op": <name>, "request": {...}}`` where
``op`` is one of AddUnavailabilityWindow, DeleteUnavailabilityWindow,
ListPlans, ListUnavailabilityWindows, RefreshContactWindow.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, TextIO

from pydantic import AwareDatetime, BaseModel, ConfigDict, ValidationError

from groundstation_scheduler.adapters.execution_tracker import StaticExecutionTracker
from groundstation_scheduler.core.domain.errors import InvalidArgumentError, SchedulingError
from groundstation_scheduler.core.domain.status_codes import Reason
from groundstation_scheduler.service.scheduling_service import SchedulingService
from groundstation_scheduler.service.service_config import SchedulingConfig

if TYPE_CHECKING:
    from collections.abc import Iterable

LOGGER = logging.getLogger(__name__)


class RefreshContactWindowRequest(BaseModel):
    plan_id: str
    aos_time: AwareDatetime
    los_time: AwareDatetime

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _load_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(path)
    return json.loads(path.read_text(encoding="utf-8"))


def _dump_response(response: Any) -> Any:
    to_wire = getattr(response, "to_wire", None)
    if callable(to_wire):
        return to_wire()
    if isinstance(response, BaseModel):
        return response.model_dump(mode="json")
    return response


def _refresh(service: SchedulingService, raw: dict[str, Any]) -> Any:
    try:
        req = RefreshContactWindowRequest.model_validate(raw)
    except ValidationError as exc:
        raise InvalidArgumentError(Reason.INVALID_FIELD, str(exc.errors()[0]["msg"])) from exc
    return service.refresh_contact_window(req.plan_id, req.aos_time, req.los_time)


def _operations(service: SchedulingService) -> dict[str, Callable[[dict[str, Any]], Any]]:
    return {
        "AddUnavailabilityWindow": service.add_unavailability_window,
        "DeleteUnavailabilityWindow": service.delete_unavailability_window,
        "ListPlans": service.list_plans,
        "ListUnavailabilityWindows": service.list_unavailability_windows,
        "RefreshContactWindow": lambda raw: _refresh(service, raw),
    }


def seed_plans(
    service: SchedulingService,
    tracker: StaticExecutionTracker,
    raw_plans: Iterable[dict[str, Any]],
) -> int:
    """Register plans, marking those flagged ``executing`` on the tracker."""
    count = 0
    for raw in raw_plans:
        payload = dict(raw)
        executing = bool(payload.pop("executing", False))
        service.register_plan(payload)
        if executing:
            tracker.mark_executing(payload["plan_id"])
        count += 1
    return count


def replay(
    service: SchedulingService,
    records: Iterable[dict[str, Any]],
    out: TextIO,
) -> tuple[int, int]:
    """Replay request records, writing one JSON line per record.

    Business failures are written as results; anything else propagates.
    Returns (succeeded, failed).
    """
    ops = _operations(service)
    ok = 0
    failed = 0

    for record in records:
        op = record.get("op")
        handler = ops.get(op) if isinstance(op, str) else None
        if handler is None:
            raise ValueError(f"Unknown op: {op!r}")

        try:
            response = handler(record.get("request", {}))
        except SchedulingError as exc:
            result = {
                "op": op,
                "ok": False,
                "code": exc.code,
                "reason": exc.reason,
                "detail": exc.detail,
            }
            failed += 1
        else:
            result = {"op": op, "ok": True, "response": _dump_response(response)}
            ok += 1

        out.write(json.dumps(result, default=lambda v: v.isoformat() if isinstance(v, datetime) else str(v)) + "\n")

    return ok, failed


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Replay ground-station scheduling requests against a seeded schedule"
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a SchedulingConfig JSON file.",
    )

    parser.add_argument(
        "--plans",
        type=Path,
        required=True,
        help="Path to a JSON list of plans to seed.",
    )

    parser.add_argument(
        "--requests",
        type=Path,
        required=True,
        help="Path to a JSON list of {op, request} records.",
    )

    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Write results here (JSON lines). Defaults to stdout.",
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Root log level.",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    config = (
        SchedulingConfig.from_json_obj(_load_json(args.config))
        if args.config is not None
        else SchedulingConfig()
    )
    raw_plans = _load_json(args.plans)
    records = _load_json(args.requests)

    tracker = StaticExecutionTracker()
    with SchedulingService(tracker=tracker, config=config) as service:
        seeded = seed_plans(service, tracker, raw_plans)
        LOGGER.info("seeded %d plans", seeded)

        if args.out is None:
            ok, failed = replay(service, records, sys.stdout)
        else:
            args.out.parent.mkdir(parents=True, exist_ok=True)
            with args.out.open("w", encoding="utf-8") as fh:
                ok, failed = replay(service, records, fh)

    LOGGER.info("replay done: %d ok, %d failed", ok, failed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
