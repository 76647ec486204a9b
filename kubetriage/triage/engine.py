"""Triage engine: noise filter, severity, fingerprint, alert, sink.

Events are processed one at a time, in delivery order, each one to
completion before the next is pulled from the source.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable

from kubetriage.errors import FingerprintError, SinkError
from kubetriage.models.alerts import Alert
from kubetriage.models.config import LookupFailurePolicy, MessageFormat, NotFoundPolicy
from kubetriage.models.events import RawEvent
from kubetriage.observability.logging import get_logger
from kubetriage.observability.metrics import events_total, noise_discards_total, sink_submissions_total
from kubetriage.sinks.base import AlertSink
from kubetriage.triage.builder import build_alert
from kubetriage.triage.fingerprint import ResourceLookup, derive_fingerprint
from kubetriage.triage.noise import is_informational, matching_rules
from kubetriage.triage.severity import classify

_logger = get_logger("triage.engine")


class TriageEngine:
    """Turns raw events into alerts and hands them to the sink.

    Args:
        lookup:      Resource lookup used to resolve pod owners.
        sink:        Destination for built alerts.
        environment: Label copied verbatim onto every alert.
        lookup_failure_policy: ``fail`` lets a FingerprintError escape
            ``process``/``run``; ``skip`` logs it and drops the event.
        pod_not_found_policy:  forwarded to the fingerprint deriver.
        message_format:        alert message convention.
        default_cluster:       cluster tag for events without a cluster name.
    """

    def __init__(
        self,
        lookup: ResourceLookup,
        sink: AlertSink,
        *,
        environment: str,
        lookup_failure_policy: LookupFailurePolicy = LookupFailurePolicy.FAIL,
        pod_not_found_policy: NotFoundPolicy = NotFoundPolicy.FALLBACK,
        message_format: MessageFormat = MessageFormat.RAW,
        default_cluster: str = "",
    ) -> None:
        self._lookup = lookup
        self._sink = sink
        self._environment = environment
        self._lookup_failure_policy = lookup_failure_policy
        self._pod_not_found_policy = pod_not_found_policy
        self._message_format = message_format
        self._default_cluster = default_cluster

    async def process(self, event: RawEvent) -> Alert | None:
        """Triage a single event. Returns the submitted alert, or None if dropped."""
        if is_informational(event):
            events_total.labels(outcome="informational").inc()
            return None

        rules = matching_rules(event)
        if rules:
            for rule in rules:
                noise_discards_total.labels(rule=rule).inc()
            events_total.labels(outcome="discarded").inc()
            return None

        severity = classify(event.type)
        try:
            fingerprint = await derive_fingerprint(event, self._lookup, not_found_policy=self._pod_not_found_policy)
        except FingerprintError:
            events_total.labels(outcome="failed").inc()
            if self._lookup_failure_policy is LookupFailurePolicy.FAIL:
                raise
            _logger.exception(
                "fingerprint_failed",
                action="event_skipped",
                event_uid=event.uid,
                kind=event.involved_object.kind,
                name=event.involved_object.name,
            )
            return None

        alert = build_alert(
            event,
            severity,
            fingerprint,
            environment=self._environment,
            message_format=self._message_format,
            default_cluster=self._default_cluster,
        )
        self._log_accepted(alert)
        events_total.labels(outcome="alerted").inc()
        await self._submit(alert)
        return alert

    async def run(self, events: AsyncIterable[RawEvent], stop: asyncio.Event | None = None) -> None:
        """Consume *events* until the source ends or *stop* is set.

        The event in flight is always finished before *stop* is honored.
        A FingerprintError under the ``fail`` policy ends the loop.
        """
        async for event in events:
            await self.process(event)
            if stop is not None and stop.is_set():
                _logger.info("triage_loop_stopping")
                break

    async def _submit(self, alert: Alert) -> None:
        try:
            alert_id = await self._sink.submit(alert)
        except SinkError as exc:
            sink_submissions_total.labels(sink=self._sink.sink_name, success="false").inc()
            _logger.error(
                "alert_submission_failed",
                sink=self._sink.sink_name,
                event_id=alert.event_id,
                error=str(exc),
            )
            return
        sink_submissions_total.labels(sink=self._sink.sink_name, success="true").inc()
        _logger.info("alert_submitted", sink=self._sink.sink_name, alert_id=alert_id)

    def _log_accepted(self, alert: Alert) -> None:
        fields = {
            key: alert.tags.get(key, "")
            for key in ("namespace", "component", "kind", "type", "reason")
        }
        if "node" in alert.tags:
            fields["node"] = alert.tags["node"]
        _logger.info("event_accepted", message=alert.message, severity=alert.severity.value, **fields)
