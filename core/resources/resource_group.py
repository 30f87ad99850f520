"""Resource group construct, deployed from a subscription stack."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from core.construct import Construct
from core.resource import Resource, resolve_location
from core.stacks import validate_resource_group_name


class ResourceGroup(Resource):
    RESOURCE_TYPE = "Microsoft.Resources/resourceGroups"
    API_VERSION = "2024-03-01"

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        resource_group_name: str,
        location: str | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        validate_resource_group_name(resource_group_name)
        location = resolve_location(scope, location, resource="resource group")
        super().__init__(scope, id, name=resource_group_name, location=location, tags=tags)

    def to_arm_template(self) -> Dict[str, Any]:
        return self._build_arm()

    def _compute_resource_id(self) -> str:
        return f"[subscriptionResourceId('Microsoft.Resources/resourceGroups', '{self.name}')]"


__all__ = ["ResourceGroup"]
