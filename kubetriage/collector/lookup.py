"""Pod lookup against the Kubernetes API."""

from __future__ import annotations

from typing import Any

from kubernetes_asyncio.client.rest import ApiException  # type: ignore[import-untyped]

from kubetriage.errors import ResourceLookupError, ResourceNotFoundError
from kubetriage.models.events import OwnerReference, ResourceMetadata
from kubetriage.observability.logging import get_logger

_logger = get_logger("collector.lookup")


def metadata_from_object(meta: Any) -> ResourceMetadata:
    """Convert a kubernetes-asyncio V1ObjectMeta into ResourceMetadata."""
    owners = tuple(
        OwnerReference(
            api_version=owner.api_version or "",
            kind=owner.kind or "",
            name=owner.name or "",
            controller=bool(owner.controller),
        )
        for owner in (meta.owner_references or [])
    )
    return ResourceMetadata(namespace=meta.namespace or "", uid=meta.uid or "", owner_references=owners)


class PodLookup:
    """Fetches fresh pod metadata for every call. Nothing is cached.

    The event's ``resourceVersion`` is passed as a consistency hint: the
    pod is listed by name with ``resourceVersion`` set, so the API server
    answers from a state at least as new as the event.
    """

    def __init__(self, core_v1: Any) -> None:
        self._core_v1 = core_v1

    async def get(self, kind: str, namespace: str, name: str, resource_version: str = "") -> ResourceMetadata:
        if kind != "Pod":
            raise ResourceLookupError(kind, namespace, name, "only pods can be looked up")

        kwargs: dict[str, Any] = {"field_selector": f"metadata.name={name}"}
        if resource_version:
            kwargs["resource_version"] = resource_version

        try:
            pods = await self._core_v1.list_namespaced_pod(namespace, **kwargs)
        except ApiException as exc:
            if exc.status == 404:
                raise ResourceNotFoundError(kind, namespace, name) from exc
            raise ResourceLookupError(kind, namespace, name, f"HTTP {exc.status}: {exc.reason}") from exc

        items = pods.items or []
        if not items:
            raise ResourceNotFoundError(kind, namespace, name)
        if len(items) > 1:
            _logger.warning("pod_lookup_multiple_matches", namespace=namespace, pod=name, matches=len(items))
        return metadata_from_object(items[0].metadata)
