"""
Apply and credential services.
"""

from .apply import ApplyEngine, decode_documents
from .credentials import CredentialReader
from .discovery import Discovery, DynamicDiscovery, StaticDiscovery
from .kube_client import ClusterClient, KubernetesService


async def create_apply_engine(kube: KubernetesService) -> ApplyEngine:
    """Build an ApplyEngine wired to the live discovery of ``kube``'s cluster."""
    return ApplyEngine(kube, await kube.discovery(), kube.settings)


__all__ = [
    "ApplyEngine",
    "ClusterClient",
    "CredentialReader",
    "Discovery",
    "DynamicDiscovery",
    "KubernetesService",
    "StaticDiscovery",
    "create_apply_engine",
    "decode_documents",
]
