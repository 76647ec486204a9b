"""Fingerprint derivation.

The fingerprint decides which events the sink folds into the same alert
group. It always starts with what went wrong::

    [source.component, type, reason, message]

followed by one of two suffixes describing where it went wrong:

* Pod events are grouped by the pod's controller owner (ReplicaSet,
  StatefulSet, Job, ...) so that replacing a pod does not open a new
  group. Pods without a controller are grouped by their own uid.
* Everything else, and pods that no longer exist, are grouped by the
  involved object reference ``[apiVersion, kind, namespace, name, fieldPath]``.
"""

from __future__ import annotations

from typing import Protocol

from kubetriage.errors import FingerprintError, ResourceLookupError, ResourceNotFoundError
from kubetriage.models.config import NotFoundPolicy
from kubetriage.models.events import RawEvent, ResourceMetadata
from kubetriage.observability.logging import get_logger
from kubetriage.observability.metrics import pod_lookups_total

_logger = get_logger("triage.fingerprint")

POD_API_VERSION = "v1"
POD_KIND = "Pod"


class ResourceLookup(Protocol):
    """Fetches the current metadata of a single resource."""

    async def get(self, kind: str, namespace: str, name: str, resource_version: str = "") -> ResourceMetadata: ...


def base_fingerprint(event: RawEvent) -> tuple[str, ...]:
    return (event.source.component, event.type, event.reason, event.message)


def object_fingerprint(event: RawEvent) -> tuple[str, ...]:
    obj = event.involved_object
    return (obj.api_version, obj.kind, obj.namespace, obj.name, obj.field_path)


def resolve_ownership(metadata: ResourceMetadata) -> tuple[str, ...]:
    """Group by the first controller owner, or by the object itself."""
    for owner in metadata.owner_references:
        if owner.controller:
            return (owner.api_version, owner.kind, owner.name)
    return (metadata.namespace, metadata.uid)


def is_pod_event(event: RawEvent) -> bool:
    obj = event.involved_object
    return obj.api_version == POD_API_VERSION and obj.kind == POD_KIND


async def derive_fingerprint(
    event: RawEvent,
    lookup: ResourceLookup,
    *,
    not_found_policy: NotFoundPolicy = NotFoundPolicy.FALLBACK,
) -> tuple[str, ...]:
    """Compute the grouping key for *event*.

    Raises:
        FingerprintError: the pod lookup failed with anything other than
            not-found, or it was not-found under the ``fail`` policy.
    """
    fingerprint = base_fingerprint(event)
    if not is_pod_event(event):
        return fingerprint + object_fingerprint(event)

    obj = event.involved_object
    namespace = obj.namespace or event.namespace
    try:
        metadata = await lookup.get(POD_KIND, namespace, obj.name, obj.resource_version)
    except ResourceNotFoundError as exc:
        pod_lookups_total.labels(result="not_found").inc()
        if not_found_policy is NotFoundPolicy.FAIL:
            raise FingerprintError(event.uid, str(exc)) from exc
        # Most likely the pod was deleted before we got to its event.
        _logger.debug("pod_gone_using_object_fingerprint", namespace=namespace, pod=obj.name)
        return fingerprint + object_fingerprint(event)
    except ResourceLookupError as exc:
        pod_lookups_total.labels(result="error").inc()
        raise FingerprintError(event.uid, str(exc)) from exc
    except Exception as exc:
        pod_lookups_total.labels(result="error").inc()
        raise FingerprintError(event.uid, f"unexpected lookup error: {exc!r}") from exc

    pod_lookups_total.labels(result="found").inc()
    return fingerprint + resolve_ownership(metadata)
