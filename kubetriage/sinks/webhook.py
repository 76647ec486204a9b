"""Generic JSON webhook sink.

Posts the alert as a flat JSON body. The payload mirrors the Alert fields
so that consumers can parse it without kubetriage-specific knowledge.
"""

from __future__ import annotations

from typing import Any

import httpx

from kubetriage.models.alerts import Alert
from kubetriage.sinks.base import HTTPAlertSink


class WebhookSink(HTTPAlertSink):
    """Delivers alerts by POSTing a JSON payload to a configurable URL.

    Returns the ``id`` field of a JSON response when present, otherwise
    the alert's own event id.
    """

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff_base: float = 0.5,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not url:
            raise ValueError("Webhook url must not be empty")
        self._url = url
        self._headers = headers or {}
        super().__init__(timeout=timeout, max_retries=max_retries, backoff_base=backoff_base, client=client)

    @property
    def sink_name(self) -> str:
        return "webhook"

    async def submit(self, alert: Alert) -> str:
        response = await self._post(self._url, build_payload(alert), dict(self._headers), alert.event_id)
        try:
            body = response.json()
        except ValueError:
            return alert.event_id
        if isinstance(body, dict) and body.get("id"):
            return str(body["id"])
        return alert.event_id


def build_payload(alert: Alert) -> dict[str, Any]:
    return {
        "event_id": alert.event_id,
        "platform": alert.platform,
        "environment": alert.environment,
        "timestamp": alert.timestamp.isoformat(),
        "severity": alert.severity.value,
        "message": alert.message,
        "tags": dict(alert.tags),
        "extra": dict(alert.extra),
        "fingerprint": list(alert.fingerprint),
        "exception": [{"type": entry.type, "value": entry.value} for entry in alert.exception],
    }
