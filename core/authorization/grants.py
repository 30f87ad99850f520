"""Grant helpers: create role assignments from resources to principals."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, runtime_checkable

from core.authorization.role_assignment import RoleAssignment
from core.authorization.roles import PrincipalType
from core.constants import AUTO_ENABLED_IDENTITY_METADATA
from core.construct import Construct, DeploymentContext
from core.errors import MissingIdentityError
from core.resource import Resource, unwrap_expression

logger = logging.getLogger(__name__)


@runtime_checkable
class Grantable(Protocol):
    """Anything that can receive a role: exposes a principal id and type."""

    @property
    def principal_id(self) -> str: ...

    @property
    def principal_type(self) -> PrincipalType: ...

    @property
    def tenant_id(self) -> str | None: ...


@dataclass(frozen=True, slots=True)
class Principal:
    """External principal such as an Entra ID user or group."""

    principal_id: str
    principal_type: PrincipalType = PrincipalType.USER
    tenant_id: str | None = None


@dataclass(frozen=True, slots=True)
class GrantResult:
    role_assignment: RoleAssignment
    role_definition_id: str
    grantee: Grantable
    scope: str


class GrantableResource(Resource):
    """Resource that can grant roles on itself and act as a grantee via its system identity."""

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        name: str,
        location: str | None = None,
        tags: Mapping[str, str] | None = None,
        parent: Resource | None = None,
        context: DeploymentContext | None = None,
    ) -> None:
        super().__init__(scope, id, name=name, location=location, tags=tags, parent=parent, context=context)
        self._grant_counter = 0

    @property
    def principal_id(self) -> str:
        if not self.identity.system_assigned:
            raise MissingIdentityError(
                f"{self.node.path} has no system-assigned identity; call enable_system_identity() "
                "before granting it access to other resources"
            )
        return f"[reference({unwrap_expression(self.resource_id)}, '{self.api_version}', 'Full').identity.principalId]"

    @property
    def principal_type(self) -> PrincipalType:
        return PrincipalType.SERVICE_PRINCIPAL

    @property
    def tenant_id(self) -> str | None:
        return self.node.context.tenant_id

    def grant(
        self,
        grantee: Grantable,
        role_definition_id: str,
        *,
        description: str | None = None,
        scope: str | None = None,
    ) -> GrantResult:
        """Assign ``role_definition_id`` to ``grantee`` on this resource.

        Each call adds a child ``Grant<n>`` construct. Granting to the resource
        itself turns on its system-assigned identity when it is missing.
        """
        if grantee is self and not self.identity.system_assigned:
            self.enable_system_identity()
            self.node.add_metadata(AUTO_ENABLED_IDENTITY_METADATA, {"reason": "grant to self"})
            logger.warning("Enabled system-assigned identity on %s to satisfy a grant", self.node.path)

        target_scope = scope or self.resource_id
        assignment = RoleAssignment(
            self,
            f"Grant{self._grant_counter}",
            assignment_scope=target_scope,
            role_definition_id=role_definition_id,
            principal_id=grantee.principal_id,
            principal_type=grantee.principal_type,
            tenant_id=_foreign_tenant(grantee),
            description=description,
        )
        self._grant_counter += 1
        if isinstance(grantee, Resource) and grantee is not self:
            assignment.resource.add_dependency(grantee)
        return GrantResult(
            role_assignment=assignment,
            role_definition_id=role_definition_id,
            grantee=grantee,
            scope=target_scope,
        )


# ------------------------------------------------------------------
def _foreign_tenant(grantee: Any) -> str | None:
    if grantee.principal_type == PrincipalType.FOREIGN_GROUP:
        return grantee.tenant_id
    return None


__all__ = ["Grantable", "GrantResult", "GrantableResource", "Principal"]
