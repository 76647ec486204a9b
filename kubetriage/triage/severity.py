"""Event type to alert severity mapping."""

from __future__ import annotations

from kubetriage.models.events import EVENT_TYPE_ERROR, EVENT_TYPE_NORMAL, EVENT_TYPE_WARNING, Severity

_SEVERITY_BY_TYPE: dict[str, Severity] = {
    EVENT_TYPE_NORMAL: Severity.INFO,
    EVENT_TYPE_WARNING: Severity.WARNING,
    EVENT_TYPE_ERROR: Severity.ERROR,
}


def classify(event_type: str) -> Severity:
    """Map an event type to a severity. Unknown types are errors."""
    return _SEVERITY_BY_TYPE.get(event_type, Severity.ERROR)
