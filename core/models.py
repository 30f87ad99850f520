"""Data models for synthesized ARM output."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from core.constants import CONTENT_VERSION, MANIFEST_VERSION
from core.scopes import DeploymentScope


class ArmResource(BaseModel):
    """Single resource fragment of an ARM template."""

    type: str = Field(..., description="ARM resource type, e.g. Microsoft.KeyVault/vaults")
    api_version: str = Field(..., alias="apiVersion")
    name: str
    scope: Optional[str] = Field(default=None, description="Target of an extension resource")
    location: Optional[str] = None
    tags: Optional[dict[str, str]] = None
    kind: Optional[str] = None
    sku: Optional[dict[str, Any]] = None
    identity: Optional[dict[str, Any]] = None
    properties: Optional[dict[str, Any]] = None
    depends_on: Optional[list[str]] = Field(default=None, alias="dependsOn")

    model_config = {
        "populate_by_name": True,
    }

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ArmTemplate(BaseModel):
    """Deployable ARM template document."""

    template_schema: str = Field(..., alias="$schema")
    content_version: str = Field(default=CONTENT_VERSION, alias="contentVersion")
    parameters: dict[str, Any] = Field(default_factory=dict)
    resources: list[dict[str, Any]] = Field(default_factory=list)
    outputs: dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "populate_by_name": True,
    }

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class TemplateArtifact(BaseModel):
    """Manifest entry describing one written template."""

    name: str
    stack: str
    scope: DeploymentScope
    file: str
    resource_count: int = Field(default=0, alias="resourceCount")
    depends_on: list[str] = Field(default_factory=list, alias="dependsOn")

    model_config = {
        "populate_by_name": True,
        "use_enum_values": True,
    }


class AssemblyManifest(BaseModel):
    version: str = MANIFEST_VERSION
    artifacts: list[TemplateArtifact] = Field(default_factory=list)

    def for_stack(self, stack: str) -> list[TemplateArtifact]:
        return [artifact for artifact in self.artifacts if artifact.stack == stack]


__all__ = ["ArmResource", "ArmTemplate", "AssemblyManifest", "TemplateArtifact"]
