"""Noise filter: known-benign cluster events that must never alert.

The rule table is an explicit list of exclusions rather than a severity
threshold. Anything not listed here is treated as signal.
"""

from __future__ import annotations

from collections.abc import Callable

from kubetriage.models.events import EVENT_TYPE_NORMAL, RawEvent

VOLUME_STILL_ATTACHED = "Volume is already exclusively attached to one node and can't be attached to another"
ENDPOINT_UPDATE_CONFLICT = "FailedToUpdateEndpoint"
LIVENESS_PROBE_FAILED = "Liveness probe failed"


def _volume_moving_between_nodes(event: RawEvent) -> bool:
    # Kubernetes retries the attach a few seconds later.
    return event.message.endswith(VOLUME_STILL_ATTACHED)


def _endpoint_update_conflict(event: RawEvent) -> bool:
    return event.reason == ENDPOINT_UPDATE_CONFLICT


def _liveness_probe_during_rollout(event: RawEvent) -> bool:
    # Old pods fail their probes while being replaced by a new version.
    return LIVENESS_PROBE_FAILED in event.message


NOISE_RULES: tuple[tuple[str, Callable[[RawEvent], bool]], ...] = (
    ("volume_still_attached", _volume_moving_between_nodes),
    ("endpoint_update_conflict", _endpoint_update_conflict),
    ("liveness_probe_failed", _liveness_probe_during_rollout),
)


def is_informational(event: RawEvent) -> bool:
    """Normal events are informational and never alert."""
    return event.type == EVENT_TYPE_NORMAL


def matching_rules(event: RawEvent) -> list[str]:
    """Names of every noise rule the event matches."""
    return [name for name, rule in NOISE_RULES if rule(event)]


def should_discard(event: RawEvent) -> bool:
    """Return True when the event matches at least one noise rule."""
    return bool(matching_rules(event))
