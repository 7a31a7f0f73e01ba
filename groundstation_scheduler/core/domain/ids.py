"""Identifier helpers for unavailability windows."""

from __future__ import annotations

import re
import uuid

WINDOW_ID_PREFIX = "uw-"

_WINDOW_ID_RE = re.compile(r"^uw-[0-9a-f]{32}$")


def new_window_id() -> str:
    """Return a fresh, globally unique window identifier.

    Format: ``uw-`` followed by 32 lowercase hex characters.
    """
    return WINDOW_ID_PREFIX + uuid.uuid4().hex


def is_well_formed_window_id(window_id: object) -> bool:
    """Return True if ``window_id`` has the shape produced by new_window_id()."""
    if not isinstance(window_id, str):
        return False
    return _WINDOW_ID_RE.match(window_id) is not None
