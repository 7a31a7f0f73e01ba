"""
Event sink interface.

Sinks consume schedule events emitted by the stores and the resolver.
"""
from __future__ import annotations

from typing import Any, Protocol


class EventSink(Protocol):
    def on_event(self, event: Any) -> None:
        """Consume a schedule event."""
