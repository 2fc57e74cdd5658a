from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol

import structlog
from kubernetes.dynamic.exceptions import ResourceNotFoundError, ResourceNotUniqueError

from moonscale.schemas.kubernetes import (
    KindDescriptor,
    ResourceCapabilities,
    ResourceMetadata,
    ResourceScope,
)

logger = structlog.get_logger(__name__)

Resolved = tuple[ResourceMetadata, ResourceCapabilities]


class Discovery(Protocol):
    """Maps a kind to its REST shape using a snapshot of the cluster's registered types."""

    def resolve(self, kind: KindDescriptor) -> Resolved | None: ...


def _from_dynamic_resource(kind: KindDescriptor, resource: Any) -> Resolved:
    namespaced = bool(getattr(resource, "namespaced", False))
    metadata = ResourceMetadata(
        kind=kind,
        plural=str(getattr(resource, "name", "") or ""),
        namespaced=namespaced,
        resource=resource,
    )
    capabilities = ResourceCapabilities(
        scope=ResourceScope.NAMESPACED if namespaced else ResourceScope.CLUSTER,
        verbs=list(getattr(resource, "verbs", None) or []),
    )
    return metadata, capabilities


class DynamicDiscovery:
    """Discovery backed by ``kubernetes.dynamic.DynamicClient.resources``.

    The dynamic client keeps its own discovery cache; this class never caches.
    """

    def __init__(self, dynamic_client: Any) -> None:
        self._dynamic = dynamic_client

    def resolve(self, kind: KindDescriptor) -> Resolved | None:
        resources = self._dynamic.resources
        try:
            resource = resources.get(api_version=kind.api_version, kind=kind.kind)
        except ResourceNotFoundError:
            return None
        except ResourceNotUniqueError:
            # Subresources share the parent's kind (e.g. deployments/scale); keep the top-level one.
            candidates = [
                r
                for r in resources.search(api_version=kind.api_version, kind=kind.kind)
                if "/" not in str(getattr(r, "name", ""))
            ]
            if not candidates:
                return None
            if len(candidates) > 1:
                logger.warning("discovery.ambiguous_kind", kind=str(kind), matches=len(candidates))
            resource = candidates[0]
        return _from_dynamic_resource(kind, resource)


class StaticDiscovery:
    """A pinned discovery snapshot.

    ``entries`` maps a kind to ``(plural, scope)`` or to a full
    ``(ResourceMetadata, ResourceCapabilities)`` pair.
    """

    def __init__(self, entries: dict[KindDescriptor, Any] | Iterable[tuple[KindDescriptor, Any]] = ()) -> None:
        self._entries: dict[KindDescriptor, Resolved] = {}
        items = entries.items() if isinstance(entries, dict) else entries
        for kind, value in items:
            self.register(kind, value)

    def register(self, kind: KindDescriptor, value: Any) -> None:
        if isinstance(value[0], ResourceMetadata):
            self._entries[kind] = (value[0], value[1])
            return
        plural, scope = value
        scope = ResourceScope(scope)
        self._entries[kind] = (
            ResourceMetadata(kind=kind, plural=plural, namespaced=scope is ResourceScope.NAMESPACED),
            ResourceCapabilities(scope=scope),
        )

    def resolve(self, kind: KindDescriptor) -> Resolved | None:
        return self._entries.get(kind)
