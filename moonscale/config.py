from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    model_config = SettingsConfigDict(env_file=(".env",), env_file_encoding="utf-8", extra="ignore")

    app_env: Literal["development", "production", "test"] = "development"
    log_level: str = "INFO"
    kube_context: str | None = None
    kube_config_path: str | None = Field(default=None, alias="KUBE_CONFIG_PATH")
    service_account_token_path: str | None = None
    # Apply engine
    default_namespace: str = Field(
        default="moonscale",
        description="Namespace used for namespaced documents that do not name one",
    )
    field_manager: str = Field(default="moonscale", description="Field manager identity for server-side apply")
    force_conflicts: bool = Field(default=False, description="Take ownership of conflicting fields on apply")
    dry_run: bool = Field(default=False, description="Submit applies with dryRun=All")
    inject_managed_by_label: bool = Field(
        default=False,
        description="Add app.kubernetes.io/managed-by=<field_manager> to applied documents",
    )
    # Credential lookup
    credential_namespace: str = Field(default="moonscale", description="Namespace holding instance secrets")
    secret_prefix: str = Field(default="moonscale-instance", description="Prefix of per-instance secret names")
    password_key: str = Field(default="mysql-root-password", description="Secret key holding the root password")

    @computed_field
    @property
    def is_debug(self) -> bool:
        return self.app_env == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]
