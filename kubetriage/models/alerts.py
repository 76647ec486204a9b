"""Outbound alert data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from kubetriage.models.events import Severity

PLATFORM = "other"


@dataclass(frozen=True)
class ExceptionEntry:
    """Exception-style title shown by the sink for a single alert."""

    type: str
    value: str


@dataclass(frozen=True)
class Alert:
    """Built by the alert builder for every accepted event, handed to the sink.

    The sink groups alerts whose ``fingerprint`` sequences are equal.
    """

    environment: str
    timestamp: datetime
    severity: Severity
    message: str
    fingerprint: tuple[str, ...]
    tags: dict[str, str] = field(default_factory=dict)
    extra: dict[str, object] = field(default_factory=dict)
    exception: tuple[ExceptionEntry, ...] = ()
    platform: str = PLATFORM
    event_id: str = field(default_factory=lambda: uuid4().hex)
