"""Status codes and failure reasons surfaced by the scheduling engine.

Status codes are the coarse, RPC-facing classification of a failure.
Reasons are finer-grained and meant for operators and logs.
"""

from __future__ import annotations


class StatusCode:
    """RPC-facing status codes."""

    OK = "OK"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    FAILED_PRECONDITION = "FAILED_PRECONDITION"


class Reason:
    """Fine-grained failure reasons."""

    # Request shape
    MISSING_FIELD = "missing_field"
    INVALID_FIELD = "invalid_field"
    NAIVE_TIMESTAMP = "naive_timestamp"
    MALFORMED_ID = "malformed_id"
    INVALID_RANGE = "invalid_range"
    RANGE_TOO_LONG = "range_too_long"

    # Lookups
    WINDOW_NOT_FOUND = "window_not_found"
    PLAN_NOT_FOUND = "plan_not_found"
    DUPLICATE_PLAN = "duplicate_plan"

    # Plan lifecycle
    INVALID_STATUS = "invalid_status"
    CANNOT_CANCEL = "cannot_cancel"
    CONTACT_OUTSIDE_EXECUTION = "contact_outside_execution"
    WINDOW_CONFLICT = "window_conflict"

    # Cancellability check outcomes
    EXECUTING = "executing"
    CANCELLABILITY_TIMEOUT = "cancellability_timeout"
    TRACKER_ERROR = "tracker_error"
