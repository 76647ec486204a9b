"""Integration tests for application lifecycle and fail-fast exit behavior."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from kubetriage.app import KubeTriageApp, main
from kubetriage.models.config import KubeTriageConfig, SinkConfig
from kubetriage.models.events import RawEvent
from kubetriage.triage.engine import TriageEngine

from .conftest import FakeLookup, FakeSink, lookup_failure, make_event


class _ListWatcher:
    def __init__(self, events: list[RawEvent]) -> None:
        self._events = events
        self.stopped = False
        self.closed = False

    async def events(self) -> AsyncIterator[RawEvent]:
        try:
            for event in self._events:
                if self.stopped:
                    return
                yield event
        finally:
            self.closed = True

    def stop(self) -> None:
        self.stopped = True


async def _no_k8s(self: KubeTriageApp) -> None:
    return None


def _install(sink: FakeSink, lookup: FakeLookup, watcher: _ListWatcher):  # type: ignore[no-untyped-def]
    def _start_sink(self: KubeTriageApp) -> None:
        self._sink = sink

    def _start_engine(self: KubeTriageApp) -> None:
        self._watcher = watcher  # type: ignore[assignment]
        self._engine = TriageEngine(lookup, sink, environment=self.config.environment)  # type: ignore[union-attr]

    return _start_sink, _start_engine


@pytest.fixture(autouse=True)
def _keep_test_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    # Cached production loggers would bypass structlog.testing.capture_logs in later tests.
    monkeypatch.setattr("kubetriage.app.setup_logging", lambda level: None)


class TestLifecycle:
    async def test_stop_before_start_is_safe(self) -> None:
        app = KubeTriageApp(KubeTriageConfig())
        await app.stop()
        await app.stop()

    async def test_request_stop_is_idempotent(self) -> None:
        app = KubeTriageApp(KubeTriageConfig())
        app.request_stop()
        app.request_stop()

    async def test_missing_sink_dsn_exits_nonzero(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(KubeTriageApp, "_start_k8s_client", _no_k8s)

        with pytest.raises(SystemExit) as excinfo:
            await main(KubeTriageConfig(sink=SinkConfig(dsn="")))

        assert excinfo.value.code == 1

    async def test_clean_run_forwards_alerts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        sink = FakeSink()
        start_sink, start_engine = _install(sink, FakeLookup(), _ListWatcher([make_event(kind="Node", name="node-a")]))
        monkeypatch.setattr(KubeTriageApp, "_start_k8s_client", _no_k8s)
        monkeypatch.setattr(KubeTriageApp, "_start_sink", start_sink)
        monkeypatch.setattr(KubeTriageApp, "_start_engine", start_engine)

        await main(KubeTriageConfig(environment="staging"))

        assert [alert.environment for alert in sink.alerts] == ["staging"]
        assert sink.closed is True

    async def test_lookup_failure_exits_nonzero(self, monkeypatch: pytest.MonkeyPatch) -> None:
        sink = FakeSink()
        events = [make_event(kind="Node", name="node-a"), make_event(name="web-7f9"), make_event(kind="Node")]
        watcher = _ListWatcher(events)
        start_sink, start_engine = _install(sink, FakeLookup({"web-7f9": lookup_failure()}), watcher)
        monkeypatch.setattr(KubeTriageApp, "_start_k8s_client", _no_k8s)
        monkeypatch.setattr(KubeTriageApp, "_start_sink", start_sink)
        monkeypatch.setattr(KubeTriageApp, "_start_engine", start_engine)

        with pytest.raises(SystemExit) as excinfo:
            await main(KubeTriageConfig())

        assert excinfo.value.code == 1
        assert len(sink.alerts) == 1
        assert sink.closed is True
        assert watcher.closed is True
