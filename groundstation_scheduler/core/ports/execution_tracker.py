"""Execution tracker protocol.

The execution tracker owns the answer to "can this plan still be canceled".
Concrete implementations adapt a specific execution pipeline to this
protocol; the conflict resolver depends only on the protocol.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from groundstation_scheduler.core.domain.types import Plan


class ExecutionTracker(Protocol):
    """Capability answering whether a plan is currently cancellable.

    Implementations may block (e.g. on a remote call); the resolver bounds
    every call with a timeout and treats a timeout or an exception as
    "not cancellable".
    """

    def is_cancellable(self, plan: Plan) -> bool:
        """Return True if the plan may be canceled right now."""
