"""Application bootstrap for kubetriage.

Wires the components in dependency order and manages the asyncio lifecycle.
Startup order: config → logging → metrics → K8s client → sink → lookup
              → event watcher → triage engine

Two things run concurrently: the triage loop, and the signal handlers that
ask the event watcher to stop. A fingerprint failure escaping the triage
loop is fatal: it is logged with its traceback, the components are closed
and the process exits non-zero so that its supervisor restarts it.
"""

from __future__ import annotations

import asyncio
import signal
from contextlib import aclosing
from typing import TYPE_CHECKING, Any

from kubetriage.config import load_config
from kubetriage.errors import ConfigError, FingerprintError
from kubetriage.models.config import KubeTriageConfig
from kubetriage.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

    from kubetriage.collector.event_watcher import EventWatcher
    from kubetriage.sinks.base import AlertSink
    from kubetriage.triage.engine import TriageEngine


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class KubeTriageApp:
    """Application root. Owns every component and coordinates their lifecycle.

    ``stop()`` is safe to call on an app that was never started, or twice.
    """

    def __init__(self, config: KubeTriageConfig | None = None) -> None:
        self.config = config
        self._api_client: Any = None
        self._sink: AlertSink | None = None
        self._watcher: EventWatcher | None = None
        self._engine: TriageEngine | None = None
        self._stop_requested = asyncio.Event()
        self._log: structlog.stdlib.BoundLogger | None = None

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a component cannot start.
        """
        if self.config is None:
            try:
                self.config = load_config()
            except ConfigError as exc:
                raise _ComponentError("config", exc) from exc

        setup_logging(self.config.log.level)
        self._log = get_logger("app")
        self._log.info("kubetriage starting", version=_kubetriage_version(), environment=self.config.environment)

        self._start_metrics()
        await self._start_k8s_client()
        self._start_sink()
        self._start_engine()

        self._log.info("kubetriage started", sink=self._sink.sink_name if self._sink else None)

    def _start_metrics(self) -> None:
        assert self._log is not None
        assert self.config is not None
        from kubetriage.observability.metrics import start_exporter

        try:
            if start_exporter(self.config.metrics.port):
                self._log.info("metrics exporter started", port=self.config.metrics.port)
        except OSError as exc:
            raise _ComponentError("metrics", exc) from exc

    async def _start_k8s_client(self) -> None:
        """Initialise the kubernetes-asyncio client from in-cluster config or kubeconfig."""
        assert self._log is not None
        self._log.debug("starting k8s client")
        try:
            from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
            from kubernetes_asyncio import config as k8s_config

            try:
                k8s_config.load_incluster_config()
                self._log.info("k8s client configured from in-cluster service account")
            except k8s_config.ConfigException:
                await k8s_config.load_kube_config()
                self._log.info("k8s client configured from kubeconfig")

            self._api_client = k8s_client.ApiClient()
        except Exception as exc:
            raise _ComponentError("k8s_client", exc) from exc

    def _start_sink(self) -> None:
        assert self.config is not None
        from kubetriage.sinks import build_sink

        try:
            self._sink = build_sink(self.config.sink, environment=self.config.environment)
        except ConfigError as exc:
            raise _ComponentError("sink", exc) from exc

    def _start_engine(self) -> None:
        assert self._log is not None
        assert self.config is not None
        assert self._sink is not None
        from kubernetes_asyncio import client as k8s_client

        from kubetriage.collector import EventWatcher, PodLookup
        from kubetriage.triage import TriageEngine

        core_v1 = k8s_client.CoreV1Api(self._api_client)
        self._watcher = EventWatcher(core_v1, resync_seconds=self.config.watch.resync_seconds)
        triage = self.config.triage
        self._engine = TriageEngine(
            PodLookup(core_v1),
            self._sink,
            environment=self.config.environment,
            lookup_failure_policy=triage.lookup_failure_policy,
            pod_not_found_policy=triage.pod_not_found_policy,
            message_format=triage.message_format,
            default_cluster=self.config.cluster_name,
        )
        self._log.info(
            "triage engine started",
            lookup_failure_policy=triage.lookup_failure_policy.value,
            pod_not_found_policy=triage.pod_not_found_policy.value,
            message_format=triage.message_format.value,
        )

    # ------------------------------------------------------------------
    # Run loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Triage events until a stop is requested or the engine fails."""
        assert self._engine is not None
        assert self._watcher is not None
        assert self._log is not None
        self._log.info("capturing kubernetes events")
        async with aclosing(self._watcher.events()) as events:
            await self._engine.run(events, self._stop_requested)

    def request_stop(self) -> None:
        """Signal handler: stop pulling events once the current one is done."""
        if self._stop_requested.is_set():
            return
        self._stop_requested.set()
        (self._log or get_logger("app")).info("shutdown requested")
        if self._watcher is not None:
            self._watcher.stop()

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Close the sink and the Kubernetes client, logging (not raising) errors."""
        log = self._log or get_logger("app")
        if self._watcher is not None:
            self._watcher.stop()

        if self._sink is not None:
            try:
                await self._sink.close()
            except Exception as exc:
                log.error("sink close raised an error", error=str(exc))
            self._sink = None

        if self._api_client is not None:
            try:
                await self._api_client.close()
            except Exception as exc:
                log.debug("k8s client close raised (non-fatal)", error=str(exc))
            self._api_client = None

        log.info("kubetriage stopped")


def _kubetriage_version() -> str:
    from kubetriage import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(config: KubeTriageConfig | None = None) -> None:
    """Create the app, register OS signals, triage until shutdown or failure."""
    app = KubeTriageApp(config)
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, app.request_stop)

    try:
        await app.start()
        await app.run()
    except _ComponentError as exc:
        get_logger("app").critical("fatal startup error", component=exc.component, error=str(exc.cause))
        raise SystemExit(1) from exc
    except FingerprintError as exc:
        get_logger("app").critical("fatal triage error", error=str(exc), exc_info=True)
        raise SystemExit(1) from exc
    finally:
        await app.stop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)
