from __future__ import annotations

import base64
import binascii

import structlog

from moonscale.config import Settings, get_settings
from moonscale.exceptions import InvalidCredentialEncoding, KeyNotFound, SecretNotFound
from moonscale.services.kube_client import ClusterClient

logger = structlog.get_logger(__name__)


class CredentialReader:
    """Reads per-instance database credentials stored as opaque Secrets."""

    def __init__(self, cluster: ClusterClient, settings: Settings | None = None) -> None:
        self._cluster = cluster
        self.settings = settings or get_settings()

    def secret_name_for(self, instance_name: str) -> str:
        return f"{self.settings.secret_prefix}-{instance_name}"

    async def get_database_password(self, instance_name: str) -> str:
        secret_name = self.secret_name_for(instance_name)
        namespace = self.settings.credential_namespace
        key = self.settings.password_key

        try:
            secret = await self._cluster.read_secret(namespace, secret_name)
        except Exception as exc:
            logger.error("credentials.secret_not_found", instance=instance_name, secret=secret_name, error=str(exc))
            raise SecretNotFound(secret_name, namespace) from exc

        data = getattr(secret, "data", None) or {}
        encoded = data.get(key)
        if encoded is None:
            logger.error("credentials.key_not_found", instance=instance_name, secret=secret_name, key=key)
            raise KeyNotFound(secret_name, key)

        # The API returns Secret data base64 encoded.
        try:
            return base64.b64decode(encoded, validate=True).decode("utf-8")
        except (binascii.Error, ValueError) as exc:
            logger.error("credentials.invalid_encoding", instance=instance_name, secret=secret_name, key=key)
            raise InvalidCredentialEncoding(secret_name, key) from exc
