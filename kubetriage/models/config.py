"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class LookupFailurePolicy(StrEnum):
    """What to do when a pod lookup fails for a reason other than not-found."""

    FAIL = "fail"
    SKIP = "skip"


class NotFoundPolicy(StrEnum):
    """What to do when the pod an event refers to no longer exists."""

    FALLBACK = "fallback"
    FAIL = "fail"


class MessageFormat(StrEnum):
    """Convention for the alert ``message`` field."""

    RAW = "raw"
    PREFIXED = "prefixed"


@dataclass
class SinkConfig:
    """Alert sink configuration."""

    dsn: str = ""
    timeout_seconds: int = 10
    max_retries: int = 3


@dataclass
class WatchConfig:
    """Event watch configuration."""

    resync_seconds: int = 30


@dataclass
class TriageConfig:
    """Triage engine policies."""

    lookup_failure_policy: LookupFailurePolicy = LookupFailurePolicy.FAIL
    pod_not_found_policy: NotFoundPolicy = NotFoundPolicy.FALLBACK
    message_format: MessageFormat = MessageFormat.RAW


@dataclass
class MetricsConfig:
    """Prometheus exporter configuration."""

    port: int = 0


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KubeTriageConfig:
    """Top-level kubetriage configuration."""

    environment: str = "production"
    cluster_name: str = ""
    sink: SinkConfig = field(default_factory=SinkConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)
    triage: TriageConfig = field(default_factory=TriageConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    log: LogConfig = field(default_factory=LogConfig)
