"""Triage core: noise filter, severity classifier, fingerprint deriver, alert builder.

Exports:
    TriageEngine        -- Per-event orchestration and the run loop.
    build_alert         -- Assembles an Alert from an event and its triage results.
    classify            -- Event type to Severity.
    derive_fingerprint  -- Grouping key for an event, resolving pod owners.
    resolve_ownership   -- Grouping suffix from a resource's metadata.
    should_discard      -- Noise filter predicate.
"""

from kubetriage.triage.builder import build_alert
from kubetriage.triage.engine import TriageEngine
from kubetriage.triage.fingerprint import ResourceLookup, derive_fingerprint, resolve_ownership
from kubetriage.triage.noise import is_informational, should_discard
from kubetriage.triage.severity import classify

__all__ = [
    "ResourceLookup",
    "TriageEngine",
    "build_alert",
    "classify",
    "derive_fingerprint",
    "is_informational",
    "resolve_ownership",
    "should_discard",
]
