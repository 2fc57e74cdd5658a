from __future__ import annotations

from dataclasses import dataclass

from moonscale.schemas.kubernetes import (
    ClusterScope,
    DefaultNamespace,
    ExplicitNamespace,
    ResourceCapabilities,
    ResourceMetadata,
    ResourceScope,
    ScopeSelection,
)


def select_scope(
    capabilities: ResourceCapabilities,
    requested_namespace: str | None,
    force_all: bool,
    default_namespace: str,
) -> ScopeSelection:
    """Pick how a resource is addressed. First match wins.

    1. cluster-scoped resource, or ``force_all`` -> cluster-wide
    2. a requested namespace -> that namespace
    3. otherwise -> ``default_namespace``
    """
    if capabilities.scope is ResourceScope.CLUSTER or force_all:
        return ClusterScope()
    if requested_namespace:
        return ExplicitNamespace(name=requested_namespace)
    return DefaultNamespace(name=default_namespace)


@dataclass(frozen=True)
class ScopedResourceClient:
    """Addressable handle for one resource type under one scope."""

    metadata: ResourceMetadata
    scope: ScopeSelection

    @property
    def namespace(self) -> str | None:
        return self.scope.namespace

    def describe(self) -> str:
        if self.namespace is None:
            return self.metadata.plural
        return f"{self.namespace}/{self.metadata.plural}"


def select(
    metadata: ResourceMetadata,
    capabilities: ResourceCapabilities,
    requested_namespace: str | None,
    force_all: bool,
    default_namespace: str,
) -> ScopedResourceClient:
    scope = select_scope(capabilities, requested_namespace, force_all, default_namespace)
    return ScopedResourceClient(metadata=metadata, scope=scope)
