from __future__ import annotations

import asyncio
from typing import Any, Protocol

import structlog
from kubernetes import client, config, dynamic
from kubernetes.client import ApiClient
from kubernetes.config.config_exception import ConfigException

from moonscale.config import Settings, get_settings
from moonscale.schemas.kubernetes import ApplyOptions
from moonscale.services.discovery import DynamicDiscovery
from moonscale.services.scoped_client import ScopedResourceClient

logger = structlog.get_logger(__name__)


class ClusterClient(Protocol):
    """The remote operations the apply engine and credential reader need."""

    async def server_side_apply(
        self,
        handle: ScopedResourceClient,
        name: str,
        body: dict[str, Any],
        options: ApplyOptions,
    ) -> dict[str, Any]: ...

    async def read_secret(self, namespace: str, name: str) -> Any: ...


class KubernetesService:
    """Thin async wrapper around the Kubernetes Python client."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._client_lock = asyncio.Lock()
        self._api_client: ApiClient | None = None
        self._core_v1: client.CoreV1Api | None = None
        self._dynamic: dynamic.DynamicClient | None = None
        self._cluster_display_name = self.settings.kube_context or "default"

    @property
    def cluster_name(self) -> str:
        return self._cluster_display_name

    async def discovery(self) -> DynamicDiscovery:
        _, dyn = await self._ensure_clients()
        return DynamicDiscovery(dyn)

    async def read_secret(self, namespace: str, name: str) -> client.V1Secret:
        core_v1, _ = await self._ensure_clients()

        def _do() -> client.V1Secret:
            return core_v1.read_namespaced_secret(name=name, namespace=namespace)

        return await asyncio.to_thread(_do)

    async def server_side_apply(
        self,
        handle: ScopedResourceClient,
        name: str,
        body: dict[str, Any],
        options: ApplyOptions,
    ) -> dict[str, Any]:
        _, dyn = await self._ensure_clients()
        resource = handle.metadata.resource
        if resource is None:
            raise RuntimeError(f"{handle.metadata.kind} was not resolved through dynamic discovery")

        def _do() -> dict[str, Any]:
            kwargs: dict[str, Any] = {"field_manager": options.field_manager}
            if options.dry_run:
                kwargs["dry_run"] = "All"
            result = dyn.server_side_apply(
                resource,
                body=body,
                name=name,
                namespace=handle.namespace,
                force_conflicts=options.force_conflicts,
                **kwargs,
            )
            to_dict = getattr(result, "to_dict", None)
            return to_dict() if callable(to_dict) else dict(result or {})

        return await asyncio.to_thread(_do)

    async def close(self) -> None:
        async with self._client_lock:
            if self._api_client is not None:
                api_client = self._api_client
                await asyncio.to_thread(api_client.close)
            self._api_client = None
            self._core_v1 = None
            self._dynamic = None

    async def _ensure_clients(self) -> tuple[client.CoreV1Api, dynamic.DynamicClient]:
        if self._core_v1 and self._dynamic:
            return self._core_v1, self._dynamic

        async with self._client_lock:
            if self._core_v1 and self._dynamic:
                return self._core_v1, self._dynamic

            def _build_clients() -> tuple[ApiClient, client.CoreV1Api, dynamic.DynamicClient]:
                display_name = None
                try:
                    if self.settings.service_account_token_path:
                        config.load_incluster_config()
                        display_name = "in-cluster"
                    else:
                        config.load_kube_config(
                            config_file=self.settings.kube_config_path,
                            context=self.settings.kube_context,
                        )
                        display_name = self.settings.kube_context or "default"
                except ConfigException as exc:
                    logger.warning("kubernetes.config_missing", error=str(exc))

                if display_name:
                    self._cluster_display_name = display_name

                api_client = client.ApiClient()
                # DynamicClient performs API discovery on construction.
                return api_client, client.CoreV1Api(api_client), dynamic.DynamicClient(api_client)

            api_client, core_v1, dyn = await asyncio.to_thread(_build_clients)
            self._api_client = api_client
            self._core_v1 = core_v1
            self._dynamic = dyn
            logger.info("kubernetes.clients_ready", cluster=self._cluster_display_name)
            return core_v1, dyn
