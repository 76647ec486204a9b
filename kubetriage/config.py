"""Configuration loading from environment variables."""

from __future__ import annotations

import os
from enum import StrEnum
from typing import TypeVar

from kubetriage.errors import ConfigError
from kubetriage.models.config import (
    KubeTriageConfig,
    LogConfig,
    LookupFailurePolicy,
    MessageFormat,
    MetricsConfig,
    NotFoundPolicy,
    SinkConfig,
    TriageConfig,
    WatchConfig,
)

_E = TypeVar("_E", bound=StrEnum)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBETRIAGE_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = _env(key, str(default))
    try:
        val = int(raw)
    except ValueError as exc:
        raise ConfigError(f"KUBETRIAGE_{key} must be an integer, got {raw!r}") from exc
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_choice(key: str, enum_cls: type[_E], default: _E) -> _E:
    raw = _env(key, default.value).lower()
    try:
        return enum_cls(raw)
    except ValueError as exc:
        valid = sorted(member.value for member in enum_cls)
        raise ConfigError(f"KUBETRIAGE_{key}={raw!r} is invalid. Must be one of {valid}") from exc


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ConfigError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> KubeTriageConfig:
    """Load configuration from KUBETRIAGE_* environment variables."""
    return KubeTriageConfig(
        environment=_env("ENVIRONMENT", "production"),
        cluster_name=_env("CLUSTER_NAME", ""),
        sink=SinkConfig(
            dsn=_env("SINK_DSN", ""),
            timeout_seconds=_env_int("SINK_TIMEOUT", 10, min_val=1, max_val=60),
            max_retries=_env_int("SINK_MAX_RETRIES", 3, min_val=0, max_val=10),
        ),
        watch=WatchConfig(
            resync_seconds=_env_int("RESYNC_SECONDS", 30, min_val=5, max_val=3600),
        ),
        triage=TriageConfig(
            lookup_failure_policy=_env_choice("LOOKUP_FAILURE_POLICY", LookupFailurePolicy, LookupFailurePolicy.FAIL),
            pod_not_found_policy=_env_choice("POD_NOT_FOUND_POLICY", NotFoundPolicy, NotFoundPolicy.FALLBACK),
            message_format=_env_choice("MESSAGE_FORMAT", MessageFormat, MessageFormat.RAW),
        ),
        metrics=MetricsConfig(
            port=_env_int("METRICS_PORT", 0, min_val=0, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
