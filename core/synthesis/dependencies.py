"""Resource dependency discovery, dependsOn resolution and ordering."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from core.construct import Construct
from core.errors import DependencyCycleError
from core.resource import Resource
from core.synthesis.context import SynthesisContext
from core.synthesis.traverser import TreeTraverser


@dataclass(slots=True)
class ResolvedDependencies:
    depends_on: List[str] = field(default_factory=list)
    templates: List[str] = field(default_factory=list)


class DependencyResolver:
    """Turn construct relationships into ``dependsOn`` entries and template ordering."""

    def __init__(self, context: SynthesisContext) -> None:
        self.context = context

    @staticmethod
    def dependencies_of(resource: Resource) -> List[Resource]:
        """Nearest resource ancestor first, then explicit dependencies in insertion order."""
        found: List[Resource] = []
        parent = _nearest_resource_ancestor(resource)
        if parent is not None:
            found.append(parent)
        for dependency in resource.node.dependencies:
            targets = [dependency] if isinstance(dependency, Resource) else _resources_below(dependency)
            for target in targets:
                if target is not resource and target not in found:
                    found.append(target)
        return found

    def resolve(self, resource: Resource, template_name: str) -> ResolvedDependencies:
        resolved = ResolvedDependencies()
        for dependency in self.dependencies_of(resource):
            producer = self.context.template_of(dependency)
            if producer is None:
                continue
            if producer == template_name:
                if dependency.resource_id not in resolved.depends_on:
                    resolved.depends_on.append(dependency.resource_id)
            else:
                self.context.require_output(dependency)
                if producer not in resolved.templates:
                    resolved.templates.append(producer)
        return resolved

    @classmethod
    def topological_sort(cls, resources: Sequence[Resource]) -> List[Resource]:
        """Order producers before consumers, keeping depth-first order where unconstrained."""
        members = {id(resource) for resource in resources}
        state: Dict[int, str] = {}
        ordered: List[Resource] = []

        def visit(resource: Resource, trail: List[Resource]) -> None:
            marker = state.get(id(resource))
            if marker == "done":
                return
            if marker == "visiting":
                cycle = " -> ".join(item.node.path for item in [*trail, resource])
                raise DependencyCycleError(f"Dependency cycle detected: {cycle}")
            state[id(resource)] = "visiting"
            for dependency in cls.dependencies_of(resource):
                if id(dependency) in members:
                    visit(dependency, [*trail, resource])
            state[id(resource)] = "done"
            ordered.append(resource)

        for resource in resources:
            visit(resource, [])
        return ordered


# ------------------------------------------------------------------
def _nearest_resource_ancestor(resource: Resource) -> Resource | None:
    current = resource.node.scope
    while current is not None:
        if isinstance(current, Resource):
            return current
        current = current.node.scope
    return None


def _resources_below(construct: Construct) -> List[Resource]:
    return [item for item in TreeTraverser.get_descendants(construct) if isinstance(item, Resource)]


__all__ = ["DependencyResolver", "ResolvedDependencies"]
