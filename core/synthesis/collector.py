"""Group resources under their owning stacks and check scope placement."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping

from core.constants import STACK_METADATA_TYPES, SUBSCRIPTION_SCOPED_TYPES
from core.construct import Construct
from core.errors import OrphanResourceError, ScopeViolationError
from core.resource import Resource
from core.scopes import DeploymentScope
from core.synthesis.traverser import TreeTraverser

logger = logging.getLogger(__name__)

_SCOPE_BY_CLASS_NAME = {
    "SubscriptionStack": DeploymentScope.SUBSCRIPTION,
    "ResourceGroupStack": DeploymentScope.RESOURCE_GROUP,
}


@dataclass(slots=True)
class StackInfo:
    name: str
    construct: Construct
    scope: DeploymentScope
    resources: List[Resource] = field(default_factory=list)


class ResourceCollector:
    """Bucket every resource under its nearest enclosing stack."""

    def collect(self, constructs: Iterable[Construct], stacks: Mapping[str, Construct]) -> Dict[str, StackInfo]:
        infos: Dict[str, StackInfo] = {}
        by_identity: Dict[int, StackInfo] = {}
        for key, stack in stacks.items():
            info = StackInfo(name=stack.node.id, construct=stack, scope=resolve_stack_scope(stack))
            infos[key] = info
            by_identity[id(stack)] = info

        for construct in constructs:
            if not isinstance(construct, Resource):
                continue
            owner = TreeTraverser.find_stack(construct)
            if owner is None or id(owner) not in by_identity:
                raise OrphanResourceError(f"Resource {construct.node.path} is not part of any stack")
            by_identity[id(owner)].resources.append(construct)

        for info in infos.values():
            logger.debug("Stack %s (%s) owns %d resource(s)", info.name, info.scope.value, len(info.resources))
        return infos

    def validate_resources(self, stacks: Mapping[str, StackInfo]) -> None:
        for info in stacks.values():
            if info.scope != DeploymentScope.RESOURCE_GROUP:
                continue
            for resource in info.resources:
                if resource.resource_type in SUBSCRIPTION_SCOPED_TYPES:
                    raise ScopeViolationError(
                        f"Subscription-scoped resource {resource.resource_type} cannot be deployed "
                        f"in ResourceGroupStack {info.name}"
                    )


def resolve_stack_scope(stack: Construct) -> DeploymentScope:
    """Scope from the stack marker's metadata, else from the concrete class."""
    for entry in stack.node.metadata:
        if entry.type in STACK_METADATA_TYPES and isinstance(entry.data, Mapping) and entry.data.get("scope"):
            return DeploymentScope(entry.data["scope"])
    for cls in type(stack).__mro__:
        if cls.__name__ in _SCOPE_BY_CLASS_NAME:
            return _SCOPE_BY_CLASS_NAME[cls.__name__]
    return DeploymentScope.RESOURCE_GROUP


__all__ = ["ResourceCollector", "StackInfo", "resolve_stack_scope"]
