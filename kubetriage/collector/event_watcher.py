"""Cluster-wide core/v1 Event source.

Lists every event once, then watches from the list's resourceVersion and
yields newly ADDED events. Updates to known events are ignored: an event
alerts once, when it first shows up. When the watch expires (410 Gone) the
events are listed again and only the ones not seen before are yielded.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any

import aiohttp
from kubernetes_asyncio import watch  # type: ignore[import-untyped]
from kubernetes_asyncio.client.rest import ApiException  # type: ignore[import-untyped]

from kubetriage.collector.parse import parse_raw_event
from kubetriage.errors import MalformedEventError
from kubetriage.models.events import RawEvent
from kubetriage.observability.logging import get_logger
from kubetriage.observability.metrics import events_total

_logger = get_logger("collector.event_watcher")

_HTTP_GONE = 410
_MAX_BACKOFF_SECONDS = 30.0


class _WatchExpired(Exception):
    """The stored resourceVersion is too old; a relist is needed."""


class EventWatcher:
    """Pull-based source of RawEvents.

    Args:
        core_v1:        kubernetes-asyncio ``CoreV1Api``.
        resync_seconds: server-side watch timeout; the watch is reopened
                        from the last seen resourceVersion afterwards.
        watch_factory:  builds the ``Watch`` object, replaced in tests.
    """

    def __init__(
        self,
        core_v1: Any,
        resync_seconds: int = 30,
        watch_factory: Callable[[], Any] | None = None,
        backoff_base: float = 1.0,
    ) -> None:
        self._core_v1 = core_v1
        self._resync_seconds = resync_seconds
        self._watch_factory = watch_factory or watch.Watch
        self._backoff_base = backoff_base
        self._known: set[str] = set()
        self._resource_version: str | None = None
        self._watch: Any = None
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        """Ask the stream to end. The event being consumed is not interrupted."""
        self._stopped = True
        if self._watch is not None:
            self._watch.stop()

    async def events(self) -> AsyncIterator[RawEvent]:
        """Yield events in delivery order until ``stop()`` is called."""
        failures = 0
        while not self._stopped:
            try:
                if self._resource_version is None:
                    async for event in self._relist():
                        yield event
                else:
                    async for event in self._watch_once():
                        yield event
                failures = 0
            except _WatchExpired:
                _logger.info("event_watch_expired_relisting")
                self._resource_version = None
            except ApiException as exc:
                if exc.status == _HTTP_GONE:
                    _logger.info("event_watch_expired_relisting")
                    self._resource_version = None
                    continue
                failures += 1
                await self._backoff(failures, f"HTTP {exc.status}: {exc.reason}")
            except (aiohttp.ClientError, TimeoutError) as exc:
                failures += 1
                await self._backoff(failures, str(exc) or type(exc).__name__)

        _logger.info("event_watcher_stopped")

    async def _backoff(self, failures: int, error: str) -> None:
        delay = min(self._backoff_base * 2 ** (failures - 1), _MAX_BACKOFF_SECONDS)
        _logger.warning("event_watch_failed", error=error, attempt=failures, retry_in=delay)
        await asyncio.sleep(delay)

    async def _relist(self) -> AsyncIterator[RawEvent]:
        response = await self._core_v1.list_event_for_all_namespaces()
        listed: set[str] = set()
        previously_known = self._known
        self._known = listed
        self._resource_version = response.metadata.resource_version
        _logger.debug("events_listed", count=len(response.items or []), resource_version=self._resource_version)

        for item in response.items or []:
            raw = self._serialize(item)
            uid = _uid_of(raw)
            if uid:
                listed.add(uid)
                if uid in previously_known:
                    continue
            event = _parse(raw)
            if event is not None:
                yield event
            if self._stopped:
                return

    async def _watch_once(self) -> AsyncIterator[RawEvent]:
        self._watch = self._watch_factory()
        try:
            async with self._watch.stream(
                self._core_v1.list_event_for_all_namespaces,
                resource_version=self._resource_version,
                timeout_seconds=self._resync_seconds,
                allow_watch_bookmarks=True,
            ) as stream:
                async for change in stream:
                    change_type = change.get("type")
                    raw = change.get("raw_object") or {}
                    if change_type == "ERROR":
                        if isinstance(raw, Mapping) and raw.get("code") == _HTTP_GONE:
                            raise _WatchExpired()
                        raise ApiException(status=raw.get("code", 0), reason=str(raw.get("message", "")))

                    resource_version = _mapping_get(raw, "metadata", "resourceVersion")
                    if resource_version:
                        self._resource_version = resource_version

                    uid = _uid_of(raw)
                    if change_type == "ADDED" and uid not in self._known:
                        if uid:
                            self._known.add(uid)
                        event = _parse(raw)
                        if event is not None:
                            yield event
                    elif change_type == "DELETED":
                        self._known.discard(uid)

                    if self._stopped:
                        return
        finally:
            self._watch = None

    def _serialize(self, item: Any) -> Any:
        if isinstance(item, Mapping):
            return item
        return self._core_v1.api_client.sanitize_for_serialization(item)


def _mapping_get(raw: Any, *keys: str) -> str:
    value = raw
    for key in keys:
        if not isinstance(value, Mapping):
            return ""
        value = value.get(key)
    return value if isinstance(value, str) else ""


def _uid_of(raw: Any) -> str:
    return _mapping_get(raw, "metadata", "uid")


def _parse(raw: Any) -> RawEvent | None:
    try:
        return parse_raw_event(raw)
    except MalformedEventError as exc:
        events_total.labels(outcome="malformed").inc()
        _logger.warning(
            "malformed_event_skipped",
            error=str(exc),
            uid=_uid_of(raw),
            name=_mapping_get(raw, "metadata", "name"),
        )
        return None
