"""Collector package for kubetriage.

Cluster-facing collaborators of the triage engine.

Submodules
----------
event_watcher -- EventWatcher: list+watch of core/v1 Events as an async iterator.
lookup        -- PodLookup: fresh pod metadata for owner resolution.
parse         -- parse_raw_event: Event payload to RawEvent.
"""

from kubetriage.collector.event_watcher import EventWatcher
from kubetriage.collector.lookup import PodLookup, metadata_from_object
from kubetriage.collector.parse import parse_raw_event

__all__ = ["EventWatcher", "PodLookup", "metadata_from_object", "parse_raw_event"]
