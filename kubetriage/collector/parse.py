"""Conversion of core/v1 Event payloads into RawEvent records."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from kubetriage.errors import MalformedEventError
from kubetriage.models.events import EventSourceInfo, InvolvedObject, RawEvent


def _str(mapping: Mapping[str, Any], key: str) -> str:
    value = mapping.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedEventError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _mapping(mapping: Mapping[str, Any], key: str, required: bool = False) -> Mapping[str, Any]:
    value = mapping.get(key)
    if value is None:
        if required:
            raise MalformedEventError(f"field {key!r} is missing")
        return {}
    if not isinstance(value, Mapping):
        raise MalformedEventError(f"field {key!r} must be an object, got {type(value).__name__}")
    return value


def parse_timestamp(value: Any) -> datetime:
    """Parse an RFC 3339 timestamp as sent by the API server (always UTC)."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if not isinstance(value, str) or not value:
        raise MalformedEventError(f"invalid timestamp: {value!r}")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise MalformedEventError(f"invalid timestamp: {value!r}") from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _count(raw: Mapping[str, Any]) -> int:
    value = raw.get("count")
    if value is None:
        series = raw.get("series")
        if isinstance(series, Mapping):
            value = series.get("count")
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedEventError(f"field 'count' must be an integer, got {value!r}")
    return value


def parse_raw_event(raw: Any) -> RawEvent:
    """Build a RawEvent from a camelCase core/v1 Event dict.

    Raises:
        MalformedEventError: the payload does not look like an Event.
    """
    if not isinstance(raw, Mapping):
        raise MalformedEventError(f"event payload must be an object, got {type(raw).__name__}")

    metadata = _mapping(raw, "metadata", required=True)
    involved = _mapping(raw, "involvedObject", required=True)
    source = _mapping(raw, "source")

    timestamp = metadata.get("creationTimestamp") or raw.get("firstTimestamp") or raw.get("eventTime")

    return RawEvent(
        type=_str(raw, "type"),
        reason=_str(raw, "reason"),
        message=_str(raw, "message"),
        involved_object=InvolvedObject(
            api_version=_str(involved, "apiVersion"),
            kind=_str(involved, "kind"),
            namespace=_str(involved, "namespace"),
            name=_str(involved, "name"),
            resource_version=_str(involved, "resourceVersion"),
            field_path=_str(involved, "fieldPath"),
            uid=_str(involved, "uid"),
        ),
        creation_timestamp=parse_timestamp(timestamp),
        source=EventSourceInfo(
            component=_str(source, "component") or _str(raw, "reportingComponent"),
            host=_str(source, "host"),
        ),
        namespace=_str(metadata, "namespace"),
        name=_str(metadata, "name"),
        uid=_str(metadata, "uid"),
        cluster_name=_str(metadata, "clusterName"),
        action=_str(raw, "action"),
        count=_count(raw),
    )
