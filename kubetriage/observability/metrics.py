"""Prometheus counters for the triage pipeline."""

from __future__ import annotations

from prometheus_client import Counter, start_http_server

events_total = Counter(
    "kubetriage_events_total",
    "Cluster events seen by the triage engine, by outcome.",
    ["outcome"],
)

noise_discards_total = Counter(
    "kubetriage_noise_discards_total",
    "Events dropped by the noise filter, by matching rule.",
    ["rule"],
)

pod_lookups_total = Counter(
    "kubetriage_pod_lookups_total",
    "Pod lookups performed while fingerprinting, by result.",
    ["result"],
)

sink_submissions_total = Counter(
    "kubetriage_sink_submissions_total",
    "Alert submissions to the sink.",
    ["sink", "success"],
)


def start_exporter(port: int) -> bool:
    """Serve /metrics on *port*. Returns False when the exporter is disabled."""
    if port <= 0:
        return False
    start_http_server(port)
    return True
