"""Alert assembly from a raw event and its triage results."""

from __future__ import annotations

from kubetriage.models.alerts import Alert, ExceptionEntry
from kubetriage.models.config import MessageFormat
from kubetriage.models.events import RawEvent, Severity


def format_message(event: RawEvent, message_format: MessageFormat = MessageFormat.RAW) -> str:
    if message_format is MessageFormat.PREFIXED:
        obj = event.involved_object
        return f"{obj.kind}/{obj.name}: {event.message}"
    return event.message


def build_tags(event: RawEvent, default_cluster: str = "") -> dict[str, str]:
    """Searchable tags. Empty values are left out."""
    candidates = {
        "namespace": event.involved_object.namespace,
        "component": event.source.component,
        "node": event.source.host,
        "cluster": event.cluster_name or default_cluster,
        "kind": event.involved_object.kind,
        "type": event.type,
        "reason": event.reason,
    }
    return {key: value for key, value in candidates.items() if value}


def build_extra(event: RawEvent) -> dict[str, object]:
    extra: dict[str, object] = {}
    if event.action:
        extra["action"] = event.action
    extra["count"] = event.count
    extra["involved_object"] = event.involved_object.to_dict()
    return extra


def build_exception(event: RawEvent) -> ExceptionEntry:
    obj = event.involved_object
    return ExceptionEntry(
        type=event.message,
        value=f"({obj.kind.lower()}/{obj.name}) {event.reason}",
    )


def build_alert(
    event: RawEvent,
    severity: Severity,
    fingerprint: tuple[str, ...],
    *,
    environment: str,
    message_format: MessageFormat = MessageFormat.RAW,
    default_cluster: str = "",
) -> Alert:
    """Assemble the alert for an accepted event. No I/O, no logging."""
    return Alert(
        environment=environment,
        timestamp=event.creation_timestamp,
        severity=severity,
        message=format_message(event, message_format),
        fingerprint=tuple(fingerprint),
        tags=build_tags(event, default_cluster),
        extra=build_extra(event),
        exception=(build_exception(event),),
    )
