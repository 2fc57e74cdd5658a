from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class KindDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    group: str = ""
    version: str
    kind: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @classmethod
    def from_api_version(cls, api_version: str, kind: str) -> "KindDescriptor":
        """Split an ``apiVersion`` string (``v1`` or ``apps/v1``) into group and version.

        Raises ``ValueError`` when the string is not of either shape.
        """
        parts = api_version.split("/")
        if len(parts) == 1 and parts[0]:
            return cls(group="", version=parts[0], kind=kind)
        if len(parts) == 2 and all(parts):
            return cls(group=parts[0], version=parts[1], kind=kind)
        raise ValueError(f"invalid apiVersion {api_version!r}")

    def __str__(self) -> str:
        return f"{self.api_version}/{self.kind}"


class ResourceScope(str, Enum):
    CLUSTER = "Cluster"
    NAMESPACED = "Namespaced"


class ResourceCapabilities(BaseModel):
    model_config = ConfigDict(frozen=True)

    scope: ResourceScope
    verbs: list[str] = Field(default_factory=list)


class ResourceMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: KindDescriptor
    plural: str
    namespaced: bool
    # The client-side resource object discovery handed back (kubernetes.dynamic Resource).
    resource: Any = Field(default=None, exclude=True, repr=False)


class ClusterScope(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["cluster"] = "cluster"

    @property
    def namespace(self) -> None:
        return None


class ExplicitNamespace(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["explicit"] = "explicit"
    name: str

    @property
    def namespace(self) -> str:
        return self.name


class DefaultNamespace(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["default"] = "default"
    name: str

    @property
    def namespace(self) -> str:
        return self.name


ScopeSelection = Annotated[ClusterScope | ExplicitNamespace | DefaultNamespace, Field(discriminator="mode")]


class ApplyOptions(BaseModel):
    """Server-side apply parameters, forwarded to the API server as-is."""

    model_config = ConfigDict(frozen=True)

    field_manager: str = "moonscale"
    force_conflicts: bool = False
    dry_run: bool = False


class ApplyResult(BaseModel):
    kind: KindDescriptor
    name: str
    scope: ScopeSelection
    dry_run: bool = False
