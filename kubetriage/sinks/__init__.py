"""Alert sinks for kubetriage.

Exports:
    AlertSink     -- Abstract base for all sinks.
    SentrySink    -- sentry-sdk client, selected by a Sentry DSN.
    WebhookSink   -- Generic JSON POST, selected by ``webhook+http(s)://``.
    build_sink    -- Factory used by the application bootstrap.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from kubetriage.errors import ConfigError
from kubetriage.sinks.base import AlertSink, HTTPAlertSink
from kubetriage.sinks.sentry import SentrySink
from kubetriage.sinks.webhook import WebhookSink

if TYPE_CHECKING:
    from kubetriage.models.config import SinkConfig

_log = structlog.get_logger(component="sinks")

_WEBHOOK_PREFIX = "webhook+"

__all__ = [
    "AlertSink",
    "HTTPAlertSink",
    "SentrySink",
    "WebhookSink",
    "build_sink",
]


def build_sink(config: SinkConfig, environment: str = "production") -> AlertSink:
    """Build the sink named by ``config.dsn``.

    ``webhook+https://host/path`` selects the webhook sink (the prefix is
    stripped); any other value is parsed as a Sentry DSN, whose client tags events
    with *environment* by default.

    Raises:
        ConfigError: the DSN is empty or cannot be parsed.
    """
    dsn = config.dsn.strip()
    if not dsn:
        raise ConfigError("a sink DSN is required (--sink-dsn or KUBETRIAGE_SINK_DSN)")

    try:
        if dsn.startswith(_WEBHOOK_PREFIX):
            sink: AlertSink = WebhookSink(
                url=dsn.removeprefix(_WEBHOOK_PREFIX),
                timeout=config.timeout_seconds,
                max_retries=config.max_retries,
            )
        else:
            sink = SentrySink(
                dsn=dsn,
                environment=environment,
                timeout=config.timeout_seconds,
            )
    except ValueError as exc:
        raise ConfigError(f"invalid sink DSN: {exc}") from exc

    _log.info("sink_configured", sink=sink.sink_name)
    return sink
