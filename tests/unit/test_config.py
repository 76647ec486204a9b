"""Tests for environment configuration loading and CLI overrides."""

from __future__ import annotations

import os

import pytest

from kubetriage.cli.main import apply_overrides
from kubetriage.config import load_config
from kubetriage.errors import ConfigError
from kubetriage.models.config import LookupFailurePolicy, MessageFormat, NotFoundPolicy


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("KUBETRIAGE_"):
            monkeypatch.delenv(key)


class TestLoadConfig:
    def test_defaults(self) -> None:
        config = load_config()

        assert config.environment == "production"
        assert config.sink.dsn == ""
        assert config.sink.timeout_seconds == 10
        assert config.watch.resync_seconds == 30
        assert config.triage.lookup_failure_policy is LookupFailurePolicy.FAIL
        assert config.triage.pod_not_found_policy is NotFoundPolicy.FALLBACK
        assert config.triage.message_format is MessageFormat.RAW
        assert config.metrics.port == 0
        assert config.log.level == "info"

    def test_values_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBETRIAGE_SINK_DSN", "https://key@sentry.example.com/1")
        monkeypatch.setenv("KUBETRIAGE_ENVIRONMENT", "staging")
        monkeypatch.setenv("KUBETRIAGE_LOOKUP_FAILURE_POLICY", "SKIP")
        monkeypatch.setenv("KUBETRIAGE_MESSAGE_FORMAT", "prefixed")
        monkeypatch.setenv("KUBETRIAGE_LOG_LEVEL", "DEBUG")

        config = load_config()

        assert config.sink.dsn == "https://key@sentry.example.com/1"
        assert config.environment == "staging"
        assert config.triage.lookup_failure_policy is LookupFailurePolicy.SKIP
        assert config.triage.message_format is MessageFormat.PREFIXED
        assert config.log.level == "debug"

    def test_integers_are_clamped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBETRIAGE_RESYNC_SECONDS", "1")
        monkeypatch.setenv("KUBETRIAGE_SINK_MAX_RETRIES", "99")

        config = load_config()

        assert config.watch.resync_seconds == 5
        assert config.sink.max_retries == 10

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("POD_NOT_FOUND_POLICY", "ignore"),
            ("LOG_LEVEL", "verbose"),
            ("SINK_TIMEOUT", "ten"),
        ],
    )
    def test_invalid_values(self, monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
        monkeypatch.setenv(f"KUBETRIAGE_{key}", value)

        with pytest.raises(ConfigError):
            load_config()


class TestApplyOverrides:
    def test_flags_override_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBETRIAGE_ENVIRONMENT", "staging")
        config = load_config()

        apply_overrides(
            config,
            sink_dsn="https://key@sentry.example.com/1",
            environment="production",
            pod_not_found_policy="fail",
            metrics_port=9090,
        )

        assert config.sink.dsn == "https://key@sentry.example.com/1"
        assert config.environment == "production"
        assert config.triage.pod_not_found_policy is NotFoundPolicy.FAIL
        assert config.metrics.port == 9090

    def test_missing_flags_keep_env_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBETRIAGE_ENVIRONMENT", "staging")
        config = apply_overrides(load_config())
        assert config.environment == "staging"


class TestCli:
    def test_run_requires_a_sink_dsn(self) -> None:
        from click.testing import CliRunner

        from kubetriage.cli import cli

        result = CliRunner().invoke(cli, ["run", "--env", "staging"])

        assert result.exit_code == 2
        assert "--sink-dsn flag required" in result.output

    def test_invalid_env_config_is_a_usage_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from click.testing import CliRunner

        from kubetriage.cli import cli

        monkeypatch.setenv("KUBETRIAGE_MESSAGE_FORMAT", "html")

        result = CliRunner().invoke(cli, ["run", "-s", "https://key@sentry.example.com/1"])

        assert result.exit_code == 2
        assert "KUBETRIAGE_MESSAGE_FORMAT" in result.output
