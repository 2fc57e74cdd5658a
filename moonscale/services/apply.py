"""
Declarative apply of arbitrary manifests.

Each document is resolved through live discovery, addressed under the scope
its resource type and namespace call for, and submitted as a single
server-side apply patch.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

import structlog
import yaml

from moonscale.config import Settings, get_settings
from moonscale.exceptions import ApplyFailed
from moonscale.schemas.kubernetes import ApplyOptions, ApplyResult
from moonscale.services import scoped_client
from moonscale.services.discovery import Discovery
from moonscale.services.kube_client import ClusterClient
from moonscale.services.resource_locator import (
    document_name,
    document_namespace,
    kind_descriptor_from_document,
    locate,
)

logger = structlog.get_logger(__name__)

MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"


def decode_documents(text: str) -> list[dict[str, Any]]:
    """Decode a YAML stream into its non-empty documents, in order."""
    try:
        return [doc for doc in yaml.safe_load_all(text) if doc is not None]
    except yaml.YAMLError as exc:
        logger.error("apply.decode_failed", error=str(exc))
        raise


class ApplyEngine:
    def __init__(
        self,
        cluster: ClusterClient,
        discovery: Discovery,
        settings: Settings | None = None,
    ) -> None:
        self._cluster = cluster
        self._discovery = discovery
        self.settings = settings or get_settings()

    def default_options(self) -> ApplyOptions:
        return ApplyOptions(
            field_manager=self.settings.field_manager,
            force_conflicts=self.settings.force_conflicts,
            dry_run=self.settings.dry_run,
        )

    async def apply_document(
        self,
        document: Mapping[str, Any],
        *,
        options: ApplyOptions | None = None,
        namespace: str | None = None,
        force_all: bool = False,
    ) -> ApplyResult:
        """Server-side apply one decoded document.

        ``namespace`` overrides the document's own ``metadata.namespace``.
        Raises MissingTypeMetadata or UnknownResourceType before any remote
        call, and ApplyFailed when the server rejects the patch.
        """
        kind = kind_descriptor_from_document(document)
        metadata, capabilities = locate(kind, self._discovery)
        name = document_name(document)
        options = options or self.default_options()

        handle = scoped_client.select(
            metadata,
            capabilities,
            namespace or document_namespace(document),
            force_all,
            self.settings.default_namespace,
        )
        body = self._serialize(document, handle, options)

        try:
            await self._cluster.server_side_apply(handle, name, body, options)
        except Exception as exc:
            logger.error(
                "apply.document_failed",
                kind=str(kind),
                name=name,
                target=handle.describe(),
                error=str(exc),
            )
            raise ApplyFailed(kind, name, exc) from exc

        logger.info(
            "apply.document_applied",
            kind=str(kind),
            name=name,
            target=handle.describe(),
            dry_run=options.dry_run,
        )
        return ApplyResult(kind=kind, name=name, scope=handle.scope, dry_run=options.dry_run)

    async def apply_manifest(self, text: str, **kwargs: Any) -> list[ApplyResult]:
        """Apply every document of a YAML stream in order; the first failure stops the run."""
        results: list[ApplyResult] = []
        for document in decode_documents(text):
            results.append(await self.apply_document(document, **kwargs))
        return results

    def _serialize(
        self,
        document: Mapping[str, Any],
        handle: scoped_client.ScopedResourceClient,
        options: ApplyOptions,
    ) -> dict[str, Any]:
        body: dict[str, Any] = copy.deepcopy(dict(document))
        md = body.get("metadata")
        if not isinstance(md, dict):
            md = body["metadata"] = {}
        # The object must name the namespace the request is addressed to.
        if handle.namespace is not None:
            md["namespace"] = handle.namespace
        elif not handle.metadata.namespaced:
            md.pop("namespace", None)
        if self.settings.inject_managed_by_label:
            labels = md.get("labels")
            if not isinstance(labels, dict):
                labels = md["labels"] = {}
            labels.setdefault(MANAGED_BY_LABEL, options.field_manager)
        return body
