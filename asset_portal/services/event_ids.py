"""Human-readable event identifiers such as ``WO-MTC-190826-KQF402``."""

from __future__ import annotations

import secrets
import string
from datetime import datetime

from ..core.clock import get_clock

EVENT_ID_PARTS = {
    "location": ("EVT", "LOC"),
    "maintenance": ("WO", "MTC"),
    "repair": ("WO", "RPR"),
}


def _suffix() -> str:
    letters = "".join(secrets.choice(string.ascii_uppercase) for _ in range(3))
    digits = "".join(secrets.choice(string.digits) for _ in range(3))
    return f"{letters}{digits}"


def generate_event_id(event_type: str, now: datetime | None = None) -> str:
    try:
        prefix, code = EVENT_ID_PARTS[event_type]
    except KeyError as exc:
        raise ValueError(f"unknown event type: {event_type}") from exc
    stamp = (now or get_clock().now()).strftime("%d%m%y")
    return f"{prefix}-{code}-{stamp}-{_suffix()}"


def event_type_from_id(event_id: str) -> str | None:
    """Recover the event type from the id's type code, if it has one."""

    parts = (event_id or "").split("-")
    if len(parts) < 2:
        return None
    for event_type, (_, code) in EVENT_ID_PARTS.items():
        if parts[1] == code:
            return event_type
    return None
