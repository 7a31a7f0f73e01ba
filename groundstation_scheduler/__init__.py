"""Public API for the groundstation_scheduler package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Execution tracker adapters
# ----------------------------------------------------------------------
from groundstation_scheduler.adapters.execution_tracker import (
    ClockExecutionTracker,
    StaticExecutionTracker,
)

# ----------------------------------------------------------------------
# Domain types and errors
# ----------------------------------------------------------------------
from groundstation_scheduler.core.domain.errors import (
    FailedPreconditionError,
    InvalidArgumentError,
    InvalidRangeError,
    NotFoundError,
    SchedulingError,
)
from groundstation_scheduler.core.domain.plan_state_machine import PlanStatus
from groundstation_scheduler.core.domain.status_codes import Reason, StatusCode
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
    Tle,
    UnavailabilityWindow,
)
from groundstation_scheduler.core.ports.execution_tracker import ExecutionTracker

# ----------------------------------------------------------------------
# Engine
# ----------------------------------------------------------------------
from groundstation_scheduler.core.resolver.conflict_resolver import (
    BlockedPlan,
    ConflictResolver,
    ResolutionDecision,
)
from groundstation_scheduler.service.scheduling_service import SchedulingService
from groundstation_scheduler.service.service_config import SchedulingConfig

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Service
    "SchedulingService",
    "SchedulingConfig",
    "ConflictResolver",
    "ResolutionDecision",
    "BlockedPlan",

    # Execution tracking
    "ExecutionTracker",
    "StaticExecutionTracker",
    "ClockExecutionTracker",

    # Domain
    "TimeRange",
    "Plan",
    "PlanStatus",
    "Tle",
    "UnavailabilityWindow",
    "AddUnavailabilityWindowRequest",
    "AddUnavailabilityWindowResponse",
    "DeleteUnavailabilityWindowRequest",
    "DeleteUnavailabilityWindowResponse",
    "ListPlansRequest",
    "ListPlansResponse",
    "ListUnavailabilityWindowsRequest",
    "ListUnavailabilityWindowsResponse",

    # Errors
    "SchedulingError",
    "InvalidArgumentError",
    "InvalidRangeError",
    "NotFoundError",
    "FailedPreconditionError",
    "StatusCode",
    "Reason",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("groundstation-scheduler")
except PackageNotFoundError:
    __version__ = "0.0.0"
