"""Core event data structures and enumerations."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import StrEnum

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"
EVENT_TYPE_ERROR = "Error"


class Severity(StrEnum):
    """Alert severity level."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class InvolvedObject:
    """Reference to the cluster resource an event is about."""

    api_version: str = ""
    kind: str = ""
    namespace: str = ""
    name: str = ""
    resource_version: str = ""
    field_path: str = ""
    uid: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class EventSourceInfo:
    """Cluster subsystem (and node) that reported an event."""

    component: str = ""
    host: str = ""


@dataclass(frozen=True)
class RawEvent:
    """One lifecycle occurrence reported by the cluster.

    Produced by the event watcher, consumed by the triage engine.
    Immutable: every derived value is computed into a new structure.
    """

    type: str
    reason: str
    message: str
    involved_object: InvolvedObject
    creation_timestamp: datetime
    source: EventSourceInfo = field(default_factory=EventSourceInfo)
    namespace: str = ""
    name: str = ""
    uid: str = ""
    cluster_name: str = ""
    action: str = ""
    count: int = 0


@dataclass(frozen=True)
class OwnerReference:
    """A reference from a resource to one of its owners."""

    api_version: str
    kind: str
    name: str
    controller: bool = False


@dataclass(frozen=True)
class ResourceMetadata:
    """Snapshot of a resource's metadata at lookup time.

    Fetched per event and discarded once the fingerprint is derived.
    """

    namespace: str
    uid: str
    owner_references: tuple[OwnerReference, ...] = ()
