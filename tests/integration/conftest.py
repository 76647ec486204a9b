"""Shared fixtures for kubetriage integration tests.

Provides in-memory stand-ins for the cluster lookup and the alert sink so
the triage engine can be exercised end to end without a cluster or network.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable, Iterator
from datetime import UTC, datetime

import pytest
from structlog.testing import capture_logs

from kubetriage.errors import ResourceLookupError, ResourceNotFoundError, SinkError
from kubetriage.models.alerts import Alert
from kubetriage.models.events import (
    EventSourceInfo,
    InvolvedObject,
    OwnerReference,
    RawEvent,
    ResourceMetadata,
)
from kubetriage.sinks.base import AlertSink

_NOW = datetime(2026, 2, 18, 12, 0, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Event factory helpers
# ---------------------------------------------------------------------------


def make_event(
    type: str = "Warning",
    reason: str = "BackOff",
    message: str = "Back-off restarting failed container",
    kind: str = "Pod",
    name: str = "web-7f9",
    namespace: str = "prod",
    api_version: str = "v1",
    field_path: str = "",
    component: str = "kubelet",
    host: str = "node-1",
    uid: str = "",
) -> RawEvent:
    """Create a RawEvent with sensible defaults for testing."""
    return RawEvent(
        type=type,
        reason=reason,
        message=message,
        involved_object=InvolvedObject(
            api_version=api_version,
            kind=kind,
            namespace=namespace,
            name=name,
            resource_version="1",
            field_path=field_path,
        ),
        creation_timestamp=_NOW,
        source=EventSourceInfo(component=component, host=host),
        namespace=namespace,
        uid=uid or f"evt-{name}-{reason}",
        count=1,
    )


def owned_by(kind: str, name: str, api_version: str = "apps/v1", uid: str = "pod-uid") -> ResourceMetadata:
    return ResourceMetadata(
        namespace="prod",
        uid=uid,
        owner_references=(OwnerReference(api_version=api_version, kind=kind, name=name, controller=True),),
    )


async def as_stream(events: Iterable[RawEvent]) -> AsyncIterator[RawEvent]:
    for event in events:
        yield event


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeLookup:
    """Resource lookup backed by a dict of pod name -> metadata or error."""

    def __init__(self, pods: dict[str, ResourceMetadata | Exception] | None = None) -> None:
        self.pods = pods or {}
        self.calls: list[tuple[str, str, str, str]] = []

    async def get(self, kind: str, namespace: str, name: str, resource_version: str = "") -> ResourceMetadata:
        self.calls.append((kind, namespace, name, resource_version))
        result = self.pods.get(name)
        if result is None:
            raise ResourceNotFoundError(kind, namespace, name)
        if isinstance(result, Exception):
            raise result
        return result


class FakeSink(AlertSink):
    """Records submitted alerts; optionally fails every submission."""

    def __init__(self, fail: bool = False) -> None:
        self.alerts: list[Alert] = []
        self.fail = fail
        self.closed = False

    @property
    def sink_name(self) -> str:
        return "fake"

    async def submit(self, alert: Alert) -> str:
        if self.fail:
            raise SinkError("sink unavailable")
        self.alerts.append(alert)
        return f"id-{len(self.alerts)}"

    async def close(self) -> None:
        self.closed = True


def lookup_failure(name: str = "web-7f9") -> ResourceLookupError:
    return ResourceLookupError("Pod", "prod", name, "HTTP 500: Internal Server Error")


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def lookup() -> FakeLookup:
    return FakeLookup({"web-7f9": owned_by("ReplicaSet", "web-7f9d8")})


@pytest.fixture
def logs() -> Iterator[list[dict[str, object]]]:
    """Structured log entries emitted while the test runs."""
    with capture_logs() as captured:
        yield captured
