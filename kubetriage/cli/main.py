"""Command-line entry point.

Flags override the matching KUBETRIAGE_* environment variables.
"""

from __future__ import annotations

import asyncio

import click

from kubetriage import __version__
from kubetriage.config import load_config
from kubetriage.errors import ConfigError
from kubetriage.models.config import KubeTriageConfig, LookupFailurePolicy, MessageFormat, NotFoundPolicy


@click.group()
@click.version_option(__version__, prog_name="kubetriage")
def cli() -> None:
    """Triage Kubernetes events into fingerprinted alerts."""


@cli.command()
@click.option("--sink-dsn", "-s", envvar="KUBETRIAGE_SINK_DSN", help="Sentry DSN (or webhook+https:// URL). Required.")
@click.option("--env", "-e", "environment", help="Environment label attached to every alert.")
@click.option("--cluster-name", help="Cluster tag for events that carry none.")
@click.option(
    "--lookup-failure-policy",
    type=click.Choice([p.value for p in LookupFailurePolicy]),
    help="Exit (fail) or skip the event when a pod lookup errors.",
)
@click.option(
    "--pod-not-found-policy",
    type=click.Choice([p.value for p in NotFoundPolicy]),
    help="Fingerprint deleted pods by reference (fallback) or treat as an error (fail).",
)
@click.option("--message-format", type=click.Choice([f.value for f in MessageFormat]))
@click.option("--metrics-port", type=click.IntRange(0, 65535), help="Prometheus port, 0 disables.")
@click.option("--log-level", type=click.Choice(["debug", "info", "warning", "error"]))
def run(
    sink_dsn: str | None,
    environment: str | None,
    cluster_name: str | None,
    lookup_failure_policy: str | None,
    pod_not_found_policy: str | None,
    message_format: str | None,
    metrics_port: int | None,
    log_level: str | None,
) -> None:
    """Watch cluster events and forward actionable ones to the sink."""
    try:
        config = load_config()
    except ConfigError as exc:
        raise click.UsageError(str(exc)) from exc

    apply_overrides(
        config,
        sink_dsn=sink_dsn,
        environment=environment,
        cluster_name=cluster_name,
        lookup_failure_policy=lookup_failure_policy,
        pod_not_found_policy=pod_not_found_policy,
        message_format=message_format,
        metrics_port=metrics_port,
        log_level=log_level,
    )
    if not config.sink.dsn:
        raise click.UsageError("--sink-dsn flag required")

    from kubetriage.app import main

    asyncio.run(main(config))


def apply_overrides(
    config: KubeTriageConfig,
    *,
    sink_dsn: str | None = None,
    environment: str | None = None,
    cluster_name: str | None = None,
    lookup_failure_policy: str | None = None,
    pod_not_found_policy: str | None = None,
    message_format: str | None = None,
    metrics_port: int | None = None,
    log_level: str | None = None,
) -> KubeTriageConfig:
    """Copy the flags that were given onto *config*."""
    if sink_dsn:
        config.sink.dsn = sink_dsn
    if environment:
        config.environment = environment
    if cluster_name:
        config.cluster_name = cluster_name
    if lookup_failure_policy:
        config.triage.lookup_failure_policy = LookupFailurePolicy(lookup_failure_policy)
    if pod_not_found_policy:
        config.triage.pod_not_found_policy = NotFoundPolicy(pod_not_found_policy)
    if message_format:
        config.triage.message_format = MessageFormat(message_format)
    if metrics_port is not None:
        config.metrics.port = metrics_port
    if log_level:
        config.log.level = log_level
    return config
