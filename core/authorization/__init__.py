"""Role-based access control: built-in roles, role assignments and grants."""

from .grants import Grantable, GrantableResource, GrantResult, Principal
from .role_assignment import RoleAssignment, RoleAssignmentArm, generate_assignment_guid
from .roles import PrincipalType, WellKnownRoleIds, role_definition_id

__all__ = [
    "GrantResult",
    "Grantable",
    "GrantableResource",
    "Principal",
    "PrincipalType",
    "RoleAssignment",
    "RoleAssignmentArm",
    "WellKnownRoleIds",
    "generate_assignment_guid",
    "role_definition_id",
]
