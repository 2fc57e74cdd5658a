"""
Shared pytest fixtures.

FakeCluster stands in for the Kubernetes API: it records every server-side
apply it receives, merges submitted fields into stored objects, and serves
Secrets from an in-memory map.
"""

from __future__ import annotations

import base64
import copy
from dataclasses import dataclass
from typing import Any

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException

from moonscale.config import Settings
from moonscale.schemas.kubernetes import ApplyOptions, KindDescriptor, ResourceScope
from moonscale.services.apply import ApplyEngine
from moonscale.services.credentials import CredentialReader
from moonscale.services.discovery import StaticDiscovery
from moonscale.services.scoped_client import ScopedResourceClient

CONFIGMAP = KindDescriptor(group="", version="v1", kind="ConfigMap")
CLUSTERROLE = KindDescriptor(group="rbac.authorization.k8s.io", version="v1", kind="ClusterRole")
DEPLOYMENT = KindDescriptor(group="apps", version="v1", kind="Deployment")


@dataclass
class ApplyCall:
    handle: ScopedResourceClient
    name: str
    body: dict[str, Any]
    options: ApplyOptions


def _merge(current: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(current)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class FakeCluster:
    def __init__(self) -> None:
        self.calls: list[ApplyCall] = []
        self.objects: dict[tuple[str, str | None, str], dict[str, Any]] = {}
        self.secrets: dict[tuple[str, str], client.V1Secret] = {}
        self.apply_error: Exception | None = None
        self.secret_reads: list[tuple[str, str]] = []

    async def server_side_apply(
        self,
        handle: ScopedResourceClient,
        name: str,
        body: dict[str, Any],
        options: ApplyOptions,
    ) -> dict[str, Any]:
        self.calls.append(ApplyCall(handle=handle, name=name, body=body, options=options))
        if self.apply_error is not None:
            raise self.apply_error
        body_namespace = (body.get("metadata") or {}).get("namespace")
        if handle.namespace is not None and body_namespace != handle.namespace:
            raise ApiException(
                status=400,
                reason="the namespace of the provided object does not match the namespace sent on the request",
            )
        key = (handle.metadata.plural, handle.namespace, name)
        merged = _merge(self.objects.get(key, {}), body)
        if not options.dry_run:
            self.objects[key] = merged
        return merged

    async def read_secret(self, namespace: str, name: str) -> client.V1Secret:
        self.secret_reads.append((namespace, name))
        try:
            return self.secrets[(namespace, name)]
        except KeyError:
            raise ApiException(status=404, reason="Not Found") from None

    def add_secret(self, namespace: str, name: str, data: dict[str, bytes] | None) -> None:
        encoded = None
        if data is not None:
            encoded = {k: base64.b64encode(v).decode("ascii") for k, v in data.items()}
        self.secrets[(namespace, name)] = client.V1Secret(
            metadata=client.V1ObjectMeta(name=name, namespace=namespace),
            data=encoded,
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, app_env="test")


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def discovery() -> StaticDiscovery:
    return StaticDiscovery(
        {
            CONFIGMAP: ("configmaps", ResourceScope.NAMESPACED),
            CLUSTERROLE: ("clusterroles", ResourceScope.CLUSTER),
            DEPLOYMENT: ("deployments", ResourceScope.NAMESPACED),
        }
    )


@pytest.fixture
def engine(cluster: FakeCluster, discovery: StaticDiscovery, settings: Settings) -> ApplyEngine:
    return ApplyEngine(cluster, discovery, settings)


@pytest.fixture
def reader(cluster: FakeCluster, settings: Settings) -> CredentialReader:
    return CredentialReader(cluster, settings)
