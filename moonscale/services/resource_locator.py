"""
Resource locating for schema-agnostic documents.

Extracts the kind descriptor, name and namespace from a decoded manifest and
resolves the kind to its REST shape through a discovery snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from moonscale.exceptions import MissingTypeMetadata, UnknownResourceType
from moonscale.schemas.kubernetes import KindDescriptor
from moonscale.services.discovery import Discovery, Resolved

logger = structlog.get_logger(__name__)


def _metadata(document: Mapping[str, Any]) -> Mapping[str, Any]:
    md = document.get("metadata")
    return md if isinstance(md, Mapping) else {}


def kind_descriptor_from_document(document: Any) -> KindDescriptor:
    """Read ``apiVersion``/``kind`` from a document.

    Raises:
        MissingTypeMetadata: the document is not a mapping, lacks either
            field, or carries an ``apiVersion`` that is not ``v1``-like or
            ``group/v1``-like.
    """
    if not isinstance(document, Mapping):
        logger.error("locator.missing_type_metadata", reason="not_a_mapping")
        raise MissingTypeMetadata("Document is not a mapping")

    api_version = document.get("apiVersion")
    kind = document.get("kind")
    if not isinstance(api_version, str) or not api_version.strip() or not isinstance(kind, str) or not kind.strip():
        logger.error("locator.missing_type_metadata", name=document_name(document))
        raise MissingTypeMetadata()

    try:
        return KindDescriptor.from_api_version(api_version.strip(), kind.strip())
    except ValueError as exc:
        logger.error("locator.invalid_api_version", api_version=api_version, kind=kind)
        raise MissingTypeMetadata(f"Failed to get GVK: {exc}") from exc


def document_name(document: Mapping[str, Any]) -> str:
    """``metadata.name``, falling back to ``metadata.generateName``, then ``""``."""
    md = _metadata(document)
    return str(md.get("name") or md.get("generateName") or "")


def document_namespace(document: Mapping[str, Any]) -> str | None:
    ns = _metadata(document).get("namespace")
    if isinstance(ns, str) and ns.strip():
        return ns.strip()
    return None


def locate(kind: KindDescriptor, discovery: Discovery) -> Resolved:
    """Resolve ``kind`` through ``discovery``; no side effects beyond the lookup."""
    resolved = discovery.resolve(kind)
    if resolved is None:
        logger.error("locator.unknown_resource_type", kind=str(kind))
        raise UnknownResourceType(kind)
    return resolved
