"""User-assigned managed identity construct."""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping

from core.authorization.roles import PrincipalType
from core.construct import Construct
from core.naming import generate_fallback_name
from core.resource import Resource, resolve_location, unwrap_expression
from core.validation import validate_length, validate_pattern

IDENTITY_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_-]*$")


class UserAssignedIdentity(Resource):
    """Standalone identity that can be attached to resources and granted roles."""

    RESOURCE_TYPE = "Microsoft.ManagedIdentity/userAssignedIdentities"
    API_VERSION = "2023-01-31"

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        identity_name: str | None = None,
        location: str | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        name = identity_name or generate_fallback_name(id, "id", max_length=128, allowed="a-z0-9_-")
        location = resolve_location(scope, location, resource="user-assigned identity")
        validate_length(name, "identity_name", 3, 128)
        validate_pattern(name, "identity_name", IDENTITY_NAME_PATTERN, details="Start with a letter or digit; use letters, digits, '_' or '-'")
        super().__init__(scope, id, name=name, location=location, tags=tags)

    @property
    def principal_id(self) -> str:
        return f"[reference({unwrap_expression(self.resource_id)}).principalId]"

    @property
    def client_id(self) -> str:
        return f"[reference({unwrap_expression(self.resource_id)}).clientId]"

    @property
    def principal_type(self) -> PrincipalType:
        return PrincipalType.SERVICE_PRINCIPAL

    @property
    def tenant_id(self) -> str | None:
        return self.node.context.tenant_id

    def attach_to(self, resource: Resource) -> None:
        """Add this identity to ``resource``'s identity block."""
        resource.add_user_assigned_identity(self.resource_id)
        resource.add_dependency(self)

    def to_arm_template(self) -> Dict[str, Any]:
        return self._build_arm()


__all__ = ["UserAssignedIdentity"]
