"""Construct tree nodes, metadata entries and the deployment context passed down the tree."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, List

from core.errors import ValidationError

_ID_PATTERN = re.compile(r"[^/]+")


@dataclass(frozen=True, slots=True)
class DeploymentContext:
    """Defaults a construct inherits from its parent at construction time."""

    location: str | None = None
    tags: dict[str, str] = field(default_factory=dict)
    subscription_id: str | None = None
    tenant_id: str | None = None
    resource_group_name: str | None = None

    def derive(self, *, tags: dict[str, str] | None = None, **overrides: Any) -> "DeploymentContext":
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, tags={**self.tags, **(tags or {})}, **values)


@dataclass(slots=True)
class MetadataEntry:
    type: str
    data: Any = None


class Node:
    """Tree bookkeeping owned by every construct."""

    def __init__(
        self,
        host: "Construct",
        scope: "Construct | None",
        id: str,
        context: DeploymentContext | None = None,
    ) -> None:
        if not isinstance(id, str) or not _ID_PATTERN.fullmatch(id):
            raise ValidationError(
                f"Invalid construct id '{id}'",
                details="Construct ids must be non-empty strings without '/'",
                suggestion="Use a short descriptive id such as 'Storage' or 'AppDatabase'",
                property_path="id",
            )
        self.host = host
        self.id = id
        self.scope = scope
        self.metadata: List[MetadataEntry] = []
        self._children: List[Construct] = []
        self._dependencies: List[Construct] = []
        self._context_values: dict[str, Any] = {}
        if context is None:
            context = scope.node.context if scope is not None else DeploymentContext()
        self.context = context
        if scope is not None:
            scope.node._add_child(host, id)

    @property
    def children(self) -> List["Construct"]:
        return list(self._children)

    @property
    def scopes(self) -> List["Construct"]:
        """All constructs from the root down to and including this one."""
        chain: List[Construct] = []
        current: Construct | None = self.host
        while current is not None:
            chain.append(current)
            current = current.node.scope
        return list(reversed(chain))

    @property
    def root(self) -> "Construct":
        return self.scopes[0]

    @property
    def path(self) -> str:
        return "/".join(construct.node.id for construct in self.scopes[1:])

    @property
    def dependencies(self) -> List["Construct"]:
        return list(self._dependencies)

    def add_metadata(self, type: str, data: Any = None) -> None:
        self.metadata.append(MetadataEntry(type=type, data=data))

    def has_metadata(self, type: str) -> bool:
        return any(entry.type == type for entry in self.metadata)

    def try_find_child(self, id: str) -> "Construct | None":
        for child in self._children:
            if child.node.id == id:
                return child
        return None

    def find_child(self, id: str) -> "Construct":
        child = self.try_find_child(id)
        if child is None:
            raise KeyError(f"No construct with id '{id}' under '{self.path or self.id}'")
        return child

    def add_dependency(self, *constructs: "Construct") -> None:
        for construct in constructs:
            if construct is self.host:
                raise ValidationError(
                    f"Construct '{self.path}' cannot depend on itself",
                    property_path="dependencies",
                )
            if construct not in self._dependencies:
                self._dependencies.append(construct)

    def set_context(self, key: str, value: Any) -> None:
        if self._children:
            raise ValidationError(
                f"Cannot set context key '{key}' after children have been added",
                suggestion="Provide context values when constructing the App",
            )
        self._context_values[key] = value

    def try_get_context(self, key: str) -> Any:
        """Look up a context value on this node or the nearest ancestor that defines it."""
        current: Construct | None = self.host
        while current is not None:
            if key in current.node._context_values:
                return current.node._context_values[key]
            current = current.node.scope
        return None

    # ------------------------------------------------------------------
    def _add_child(self, child: "Construct", id: str) -> None:
        if self.try_find_child(id) is not None:
            raise ValidationError(
                f"There is already a construct with id '{id}' under '{self.path or self.id}'",
                suggestion="Give sibling constructs unique ids",
                property_path="id",
            )
        self._children.append(child)


class Construct:
    """Base class for every node of the construct tree."""

    def __init__(self, scope: "Construct | None", id: str, *, context: DeploymentContext | None = None) -> None:
        self.node = Node(self, scope, id, context)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.node.path or self.node.id}>"


__all__ = ["Construct", "DeploymentContext", "MetadataEntry", "Node"]
