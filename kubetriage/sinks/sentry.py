"""Sentry sink.

Alerts are handed to a ``sentry_sdk.Client`` built from the DSN. The alert
fingerprint is passed through untouched: Sentry groups events by it, which
is the only deduplication kubetriage relies on.

The SDK client is synchronous and queues envelopes for its own background
transport, so capture and close run in the default thread-pool executor.
"""

from __future__ import annotations

import asyncio
from typing import Any

import sentry_sdk
from sentry_sdk.transport import Transport
from sentry_sdk.utils import Dsn

from kubetriage import __version__
from kubetriage.errors import SinkError
from kubetriage.models.alerts import Alert
from kubetriage.sinks.base import AlertSink


class SentrySink(AlertSink):
    """Delivers alerts to a Sentry project identified by its DSN.

    Args:
        dsn:         Sentry DSN. Raises ``sentry_sdk.utils.BadDsn`` (a
                     ValueError) when it cannot be parsed.
        environment: default environment for events that carry none.
        timeout:     seconds ``close()`` waits for queued events to flush.
        transport:   replacement SDK transport, mainly for tests.
    """

    def __init__(
        self,
        dsn: str,
        environment: str = "production",
        timeout: float = 10.0,
        transport: Transport | None = None,
    ) -> None:
        Dsn(dsn)
        self._timeout = timeout
        self._client = sentry_sdk.Client(
            dsn=dsn,
            environment=environment,
            release=f"kubetriage@{__version__}",
            default_integrations=False,
            auto_enabling_integrations=False,
            transport=transport,
        )
        self._closed = False

    @property
    def sink_name(self) -> str:
        return "sentry"

    async def submit(self, alert: Alert) -> str:
        loop = asyncio.get_running_loop()
        try:
            event_id = await loop.run_in_executor(None, self._client.capture_event, build_event(alert))
        except Exception as exc:
            raise SinkError(f"sentry could not capture alert {alert.event_id}: {exc}") from exc
        if event_id is None:
            raise SinkError(f"sentry dropped alert {alert.event_id}")
        return str(event_id)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, lambda: self._client.close(timeout=self._timeout))


def build_event(alert: Alert) -> dict[str, Any]:
    """Render *alert* as a Sentry event dict."""
    return {
        "event_id": alert.event_id,
        "platform": alert.platform,
        "logger": "kubetriage",
        "environment": alert.environment,
        "timestamp": alert.timestamp,
        "level": alert.severity.value,
        "message": alert.message,
        "tags": dict(alert.tags),
        "extra": dict(alert.extra),
        "fingerprint": list(alert.fingerprint),
        "exception": {"values": [{"type": entry.type, "value": entry.value} for entry in alert.exception]},
    }
