"""Typed failures raised by stores, the resolver and the service."""

from __future__ import annotations

from groundstation_scheduler.core.domain.status_codes import Reason, StatusCode


class SchedulingError(Exception):
    """Base class for all business-level failures.

    Carries an RPC-facing ``code`` and a finer ``reason``. Infrastructure
    failures (store unavailable, I/O) are never wrapped in this type.
    """

    code: str = StatusCode.INVALID_ARGUMENT

    def __init__(self, reason: str, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{self.code}: {reason}" + (f" ({detail})" if detail else ""))


class InvalidArgumentError(SchedulingError):
    code = StatusCode.INVALID_ARGUMENT


class InvalidRangeError(InvalidArgumentError):
    def __init__(self, detail: str = "") -> None:
        super().__init__(Reason.INVALID_RANGE, detail)


class NotFoundError(SchedulingError):
    code = StatusCode.NOT_FOUND


class FailedPreconditionError(SchedulingError):
    """Raised when a schedule change is blocked by plan state.

    ``blocking_plan_ids`` names every plan that prevented the change so an
    operator can intervene.
    """

    code = StatusCode.FAILED_PRECONDITION

    def __init__(
        self,
        reason: str,
        detail: str = "",
        *,
        blocking_plan_ids: tuple[str, ...] = (),
    ) -> None:
        self.blocking_plan_ids = tuple(blocking_plan_ids)
        if self.blocking_plan_ids and not detail:
            detail = "blocked by plan(s): " + ", ".join(self.blocking_plan_ids)
        super().__init__(reason, detail)
