"""Resource base class: a construct that maps to exactly one ARM resource."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Mapping

from core.construct import Construct, DeploymentContext
from core.errors import ValidationError
from core.models import ArmResource

SYSTEM_ASSIGNED = "SystemAssigned"
USER_ASSIGNED = "UserAssigned"
SYSTEM_AND_USER_ASSIGNED = "SystemAssigned,UserAssigned"


@dataclass(slots=True)
class ManagedServiceIdentity:
    """Identity block attached to resources that support managed identities."""

    system_assigned: bool = False
    user_assigned: List[str] = field(default_factory=list)

    @property
    def type(self) -> str | None:
        if self.system_assigned and self.user_assigned:
            return SYSTEM_AND_USER_ASSIGNED
        if self.system_assigned:
            return SYSTEM_ASSIGNED
        if self.user_assigned:
            return USER_ASSIGNED
        return None

    def to_arm(self) -> Dict[str, Any] | None:
        identity_type = self.type
        if identity_type is None:
            return None
        payload: Dict[str, Any] = {"type": identity_type}
        if self.user_assigned:
            payload["userAssignedIdentities"] = {identity_id: {} for identity_id in self.user_assigned}
        return payload


class Resource(Construct, ABC):
    """Construct specialized with an ARM type, a resource id and a JSON mapping."""

    RESOURCE_TYPE: ClassVar[str] = ""
    API_VERSION: ClassVar[str] = ""

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        name: str,
        location: str | None = None,
        tags: Mapping[str, str] | None = None,
        parent: "Resource | None" = None,
        context: DeploymentContext | None = None,
    ) -> None:
        if not self.RESOURCE_TYPE or not self.API_VERSION:
            raise TypeError(f"{type(self).__name__} must define RESOURCE_TYPE and API_VERSION")
        super().__init__(scope, id, context=context)
        self._name = name
        self._parent_resource = parent
        self.location = location
        self.tags: Dict[str, str] = {**self.node.context.tags, **dict(tags or {})}
        self.identity = ManagedServiceIdentity()
        self._resource_id = self._compute_resource_id()

    @property
    def resource_type(self) -> str:
        return self.RESOURCE_TYPE

    @property
    def api_version(self) -> str:
        return self.API_VERSION

    @property
    def resource_id(self) -> str:
        return self._resource_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent_resource(self) -> "Resource | None":
        return self._parent_resource

    @property
    def name_segments(self) -> List[str]:
        if self._parent_resource is None:
            return [self._name]
        return [*self._parent_resource.name_segments, self._name]

    @property
    def arm_name(self) -> str:
        """Name as written in the template; nested resources use ``parent/child``."""
        return "/".join(self.name_segments)

    def add_dependency(self, *resources: "Resource") -> None:
        self.node.add_dependency(*resources)

    def enable_system_identity(self) -> None:
        self.identity.system_assigned = True

    def add_user_assigned_identity(self, identity_id: str) -> None:
        if identity_id not in self.identity.user_assigned:
            self.identity.user_assigned.append(identity_id)

    @abstractmethod
    def to_arm_template(self) -> Dict[str, Any]:
        """Return the JSON-serializable fragment for this resource."""

    # ------------------------------------------------------------------
    def _compute_resource_id(self) -> str:
        segments = ", ".join(f"'{segment}'" for segment in self.name_segments)
        return f"[resourceId('{self.resource_type}', {segments})]"

    def _build_arm(self, properties: Mapping[str, Any] | None = None, **fields: Any) -> Dict[str, Any]:
        resource = ArmResource(
            type=self.resource_type,
            api_version=self.api_version,
            name=self.arm_name,
            location=self.location,
            tags=self.tags or None,
            identity=self.identity.to_arm(),
            properties=omit_none(properties) if properties is not None else None,
            **fields,
        )
        return resource.to_dict()


def omit_none(mapping: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None, recursing into nested mappings."""
    result: Dict[str, Any] = {}
    for key, value in mapping.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            value = omit_none(value)
        result[key] = value
    return result


def unwrap_expression(value: str) -> str:
    """Return the body of an ``[...]`` ARM expression, or the value as a quoted literal."""
    if value.startswith("[") and value.endswith("]"):
        return value[1:-1]
    return f"'{value}'"


def resolve_location(scope: Construct, location: str | None, *, resource: str) -> str:
    resolved = location or scope.node.context.location
    if not resolved:
        raise ValidationError(
            f"Location is required for {resource}",
            details="No location was given and the enclosing stack does not define one",
            suggestion="Pass location=... or set a location on the stack",
            property_path="location",
        )
    return resolved


__all__ = [
    "ManagedServiceIdentity",
    "Resource",
    "SYSTEM_ASSIGNED",
    "SYSTEM_AND_USER_ASSIGNED",
    "USER_ASSIGNED",
    "omit_none",
    "resolve_location",
    "unwrap_expression",
]
