"""Alert sink interface and the shared HTTP delivery loop.

AlertSink     -- ABC every sink must implement.
HTTPAlertSink -- POSTs JSON payloads with retry and exponential back-off.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

from kubetriage.errors import SinkError
from kubetriage.models.alerts import Alert

_log = structlog.get_logger(component="sinks")

_MAX_BACKOFF_SECONDS = 10.0


class AlertSink(ABC):
    """Destination for built alerts.

    ``submit`` returns an opaque alert id used only for confirmation
    logging, and raises SinkError when the alert could not be delivered.
    """

    @property
    @abstractmethod
    def sink_name(self) -> str:
        """Identifier used in metrics and logs."""

    @abstractmethod
    async def submit(self, alert: Alert) -> str:
        """Deliver *alert* and return the id the sink assigned to it."""

    async def close(self) -> None:  # noqa: B027
        """Release network resources. Safe to call more than once."""


class HTTPAlertSink(AlertSink):
    """Base for sinks that deliver alerts as a JSON POST.

    Args:
        timeout:      per-request timeout in seconds.
        max_retries:  retries after the first attempt for 429, 5xx and
                      transport errors. Other 4xx fail immediately.
        backoff_base: first back-off delay in seconds, doubled per retry.
        client:       pre-built client, mainly for tests.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff_base: float = 0.5,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._max_retries = max_retries
        self._backoff_base = backoff_base
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def _post(self, url: str, payload: dict[str, Any], headers: dict[str, str], event_id: str) -> httpx.Response:
        last_error = ""
        for attempt in range(self._max_retries + 1):
            if attempt:
                delay = min(self._backoff_base * 2 ** (attempt - 1), _MAX_BACKOFF_SECONDS)
                _log.debug("sink_retrying", sink=self.sink_name, attempt=attempt, delay=delay, event_id=event_id)
                await asyncio.sleep(delay)
            try:
                response = await self._client.post(url, json=payload, headers=headers)
            except httpx.TimeoutException:
                last_error = "request timed out"
                _log.warning("sink_request_timeout", sink=self.sink_name, event_id=event_id)
                continue
            except httpx.TransportError as exc:
                last_error = str(exc)
                _log.warning("sink_transport_error", sink=self.sink_name, error=last_error, event_id=event_id)
                continue
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                # Decoding, redirect and URL errors do not go away on retry.
                _log.warning("sink_http_error", sink=self.sink_name, error=str(exc), event_id=event_id)
                raise SinkError(f"{self.sink_name} could not deliver alert {event_id}: {exc}") from exc

            if response.is_success:
                return response
            last_error = f"HTTP {response.status_code}: {response.text[:200]}"
            _log.warning(
                "sink_non_2xx_response",
                sink=self.sink_name,
                status_code=response.status_code,
                event_id=event_id,
            )
            if response.status_code != 429 and response.status_code < 500:
                break

        raise SinkError(f"{self.sink_name} rejected alert {event_id}: {last_error}")
