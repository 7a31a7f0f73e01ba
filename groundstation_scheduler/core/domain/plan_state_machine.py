"""
Plan lifecycle state machine definitions.

Plans are ingested as SCHEDULED. The only transition this engine performs
is SCHEDULED -> CANCELED; CANCELED is terminal.
"""

from __future__ import annotations

from enum import Enum


class PlanStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CANCELED = "CANCELED"


# Terminal plan states: once reached, the plan never takes part in
# conflict checks again.
PLAN_TERMINAL_STATES: frozenset[PlanStatus] = frozenset({PlanStatus.CANCELED})


# Allowed plan status transitions.
#
# Key   : previous status (or None if the plan was not previously known)
# Value : set of allowed next statuses
PLAN_ALLOWED_TRANSITIONS: dict[PlanStatus | None, frozenset[PlanStatus]] = {
    None: frozenset({PlanStatus.SCHEDULED}),
    PlanStatus.SCHEDULED: frozenset({PlanStatus.CANCELED}),
}


def is_terminal_status(status: PlanStatus) -> bool:
    """Return True if the given status is terminal."""
    return status in PLAN_TERMINAL_STATES


def is_valid_transition(prev_status: PlanStatus | None, next_status: PlanStatus) -> bool:
    """Return True if the transition prev_status -> next_status is allowed."""
    allowed = PLAN_ALLOWED_TRANSITIONS.get(prev_status)
    if allowed is None:
        return False
    return next_status in allowed
