"""
Logging event sink.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from typing import Any


class LoggingEventSink:
    """Logs schedule events using the standard logging module.

    Rejections are logged at WARNING so operators see blocked windows
    without enabling INFO.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def on_event(self, event: Any) -> None:
        name = type(event).__name__
        fields = asdict(event) if is_dataclass(event) else {"event": str(event)}
        level = logging.WARNING if name == "WindowRejectedEvent" else logging.INFO
        self._logger.log(level, "schedule_event %s", name, extra={"event": name, "fields": fields})
