"""Core data structures for kubetriage."""

from kubetriage.models.alerts import Alert, ExceptionEntry
from kubetriage.models.config import (
    KubeTriageConfig,
    LookupFailurePolicy,
    MessageFormat,
    NotFoundPolicy,
)
from kubetriage.models.events import (
    EventSourceInfo,
    InvolvedObject,
    OwnerReference,
    RawEvent,
    ResourceMetadata,
    Severity,
)

__all__ = [
    "Alert",
    "EventSourceInfo",
    "ExceptionEntry",
    "InvolvedObject",
    "KubeTriageConfig",
    "LookupFailurePolicy",
    "MessageFormat",
    "NotFoundPolicy",
    "OwnerReference",
    "RawEvent",
    "ResourceMetadata",
    "Severity",
]
