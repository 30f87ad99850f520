"""Role assignment resources with deterministic names."""

from __future__ import annotations

import re
from typing import Any, Dict

from core.construct import Construct
from core.errors import ImmutableResourceError, ValidationError
from core.resource import Resource, unwrap_expression
from core.authorization.roles import PrincipalType

MAX_DESCRIPTION_LENGTH = 1024

# Principals referenced through a resource identity collapse to the resource id
# so the generated guid() only uses deploy-time-stable inputs.
_IDENTITY_REFERENCE = re.compile(r"^\[?reference\((.*)\)\.identity\.principalId\]?$")

_DEPLOYMENT_LEVEL_SCOPES = {"[subscription().id]", "[resourceGroup().id]"}


class RoleAssignmentArm(Resource):
    """Direct mapping of Microsoft.Authorization/roleAssignments."""

    RESOURCE_TYPE = "Microsoft.Authorization/roleAssignments"
    API_VERSION = "2022-04-01"

    def __init__(
        self,
        construct_scope: Construct,
        id: str,
        *,
        scope: str,
        role_definition_id: str,
        principal_id: str,
        principal_type: PrincipalType | str = PrincipalType.SERVICE_PRINCIPAL,
        tenant_id: str | None = None,
        description: str | None = None,
        condition: str | None = None,
        condition_version: str | None = None,
    ) -> None:
        principal_type = _coerce_principal_type(principal_type)
        _validate_props(scope, role_definition_id, principal_id, principal_type, tenant_id, description, condition, condition_version)
        self.scope = scope
        self.role_definition_id = role_definition_id
        self.principal_id = principal_id
        self.principal_type = principal_type
        self.tenant_id = tenant_id
        self.description = description
        self.condition = condition
        self.condition_version = condition_version
        super().__init__(
            construct_scope,
            id,
            name=generate_assignment_guid(scope, role_definition_id, principal_id),
        )
        # Extension resources are deployed at their target scope, not a region.
        self.location = None
        self.tags = {}

    def to_arm_template(self) -> Dict[str, Any]:
        properties: Dict[str, Any] = {
            "roleDefinitionId": self.role_definition_id,
            "principalId": self.principal_id,
            "principalType": self.principal_type.value,
            "tenantId": self.tenant_id,
            "description": self.description,
            "condition": self.condition,
            "conditionVersion": self.condition_version if self.condition else None,
        }
        target = None if self.scope in _DEPLOYMENT_LEVEL_SCOPES else self.scope
        return self._build_arm(properties, scope=target)

    def _compute_resource_id(self) -> str:
        return f"{self.scope}/providers/Microsoft.Authorization/roleAssignments/{self.name}"


class RoleAssignment(Construct):
    """Configure-once role assignment wrapping a :class:`RoleAssignmentArm`."""

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        assignment_scope: str,
        role_definition_id: str,
        principal_id: str,
        principal_type: PrincipalType | str = PrincipalType.SERVICE_PRINCIPAL,
        tenant_id: str | None = None,
        description: str | None = None,
        condition: str | None = None,
        condition_version: str | None = None,
    ) -> None:
        _validate_props(
            assignment_scope,
            role_definition_id,
            principal_id,
            _coerce_principal_type(principal_type),
            tenant_id,
            description,
            condition,
            condition_version,
        )
        super().__init__(scope, id)
        self.resource = RoleAssignmentArm(
            self,
            "Resource",
            scope=assignment_scope,
            role_definition_id=role_definition_id,
            principal_id=principal_id,
            principal_type=principal_type,
            tenant_id=tenant_id,
            description=description,
            condition=condition,
            condition_version=condition_version,
        )

    @property
    def scope(self) -> str:
        return self.resource.scope

    @property
    def role_definition_id(self) -> str:
        return self.resource.role_definition_id

    @property
    def principal_id(self) -> str:
        return self.resource.principal_id

    @property
    def name(self) -> str:
        return self.resource.name

    @property
    def resource_id(self) -> str:
        return self.resource.resource_id

    def add_description(self, description: str) -> None:
        raise ImmutableResourceError(
            "Role assignments are immutable; pass description= when creating the assignment"
        )

    def add_condition(self, condition: str, condition_version: str = "2.0") -> None:
        raise ImmutableResourceError(
            "Role assignments are immutable; pass condition= and condition_version= when creating the assignment"
        )


def generate_assignment_guid(scope: str, role_definition_id: str, principal_id: str) -> str:
    """ARM ``guid()`` expression that is a pure function of scope, role and principal."""
    principal = principal_id
    match = _IDENTITY_REFERENCE.match(principal_id)
    if match:
        principal = f"[{_first_argument(match.group(1))}]"
    return f"[guid({unwrap_expression(scope)}, {unwrap_expression(role_definition_id)}, {unwrap_expression(principal)})]"


# ------------------------------------------------------------------
def _first_argument(arguments: str) -> str:
    depth = 0
    quoted = False
    for index, char in enumerate(arguments):
        if char == "'":
            quoted = not quoted
        elif not quoted and char == "(":
            depth += 1
        elif not quoted and char == ")":
            depth -= 1
        elif not quoted and char == "," and depth == 0:
            return arguments[:index].strip()
    return arguments.strip()


def _coerce_principal_type(value: PrincipalType | str | None) -> PrincipalType:
    if not value:
        raise ValidationError(
            "Role assignment requires a principal_type",
            details="The principal type indicates what kind of identity receives the role",
            suggestion="Use a PrincipalType value such as PrincipalType.SERVICE_PRINCIPAL",
            property_path="principal_type",
        )
    try:
        return PrincipalType(value)
    except ValueError as exc:
        raise ValidationError(
            f"Invalid principal_type: '{value}'",
            details=f"Allowed values: {', '.join(item.value for item in PrincipalType)}",
            suggestion="Use a PrincipalType member",
            property_path="principal_type",
        ) from exc


def _validate_props(
    scope: str,
    role_definition_id: str,
    principal_id: str,
    principal_type: PrincipalType,
    tenant_id: str | None,
    description: str | None,
    condition: str | None,
    condition_version: str | None,
) -> None:
    if not scope or not scope.strip():
        raise ValidationError(
            "Role assignment requires a scope",
            details="The scope specifies where the role is assigned",
            suggestion="Provide a valid Azure resource ID for the scope",
            property_path="scope",
        )
    if not role_definition_id or not role_definition_id.strip():
        raise ValidationError(
            "Role assignment requires a role_definition_id",
            details="The role definition id identifies which role to assign",
            suggestion="Use role_definition_id(WellKnownRoleIds.READER) for built-in roles",
            property_path="role_definition_id",
        )
    if not principal_id or not principal_id.strip():
        raise ValidationError(
            "Role assignment requires a principal_id",
            details="The principal id identifies who receives the role",
            suggestion="Provide an Entra ID object id or an ARM reference expression",
            property_path="principal_id",
        )
    if description and len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Role assignment description cannot exceed {MAX_DESCRIPTION_LENGTH} characters",
            details=f"Current description length: {len(description)} characters",
            suggestion=f"Shorten the description to {MAX_DESCRIPTION_LENGTH} characters or less",
            property_path="description",
        )
    if condition and not condition_version:
        raise ValidationError(
            "condition_version is required when condition is specified",
            details="ABAC conditions require a version",
            suggestion="Set condition_version to '2.0'",
            property_path="condition_version",
        )
    if principal_type == PrincipalType.FOREIGN_GROUP and not tenant_id:
        raise ValidationError(
            "tenant_id is required for ForeignGroup principal type",
            details="Cross-tenant group assignments require the tenant id",
            suggestion="Provide the tenant id where the foreign group exists",
            property_path="tenant_id",
        )


__all__ = ["RoleAssignment", "RoleAssignmentArm", "generate_assignment_guid"]
