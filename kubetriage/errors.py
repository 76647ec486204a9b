"""Exception hierarchy for kubetriage."""

from __future__ import annotations


class TriageError(Exception):
    """Base class for every error raised by kubetriage."""


class ConfigError(TriageError):
    """Configuration is missing or invalid."""


class MalformedEventError(TriageError):
    """An event payload does not have the expected shape."""


class ResourceLookupError(TriageError):
    """Fetching a resource from the cluster failed."""

    def __init__(self, kind: str, namespace: str, name: str, detail: str = "") -> None:
        message = f"lookup of {kind} {namespace}/{name} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.kind = kind
        self.namespace = namespace
        self.name = name


class ResourceNotFoundError(ResourceLookupError):
    """The resource does not exist (anymore)."""

    def __init__(self, kind: str, namespace: str, name: str) -> None:
        super().__init__(kind, namespace, name, "not found")


class FingerprintError(TriageError):
    """A fingerprint could not be derived for an event.

    Fatal by default: the run loop stops instead of dropping the alert.
    """

    def __init__(self, event_uid: str, reason: str) -> None:
        super().__init__(f"cannot fingerprint event {event_uid or '<no uid>'}: {reason}")
        self.event_uid = event_uid


class SinkError(TriageError):
    """The alert sink rejected or could not receive an alert."""
