"""Depth-first construct tree traversal."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from core.constants import STACK_METADATA_TYPES
from core.construct import Construct
from core.errors import CircularReferenceError


@dataclass(slots=True)
class TraversalResult:
    constructs: List[Construct] = field(default_factory=list)
    stacks: Dict[str, Construct] = field(default_factory=dict)
    constructs_by_path: Dict[str, Construct] = field(default_factory=dict)


class TreeTraverser:
    """Walk a construct tree, collecting every node and the stack boundaries."""

    def __init__(self) -> None:
        self._visited: set[str] = set()

    def traverse(self, root: Construct) -> TraversalResult:
        self._visited = set()
        result = TraversalResult()
        self._visit(root, result)
        return result

    @staticmethod
    def is_stack(construct: Construct) -> bool:
        return any(entry.type in STACK_METADATA_TYPES for entry in construct.node.metadata)

    @staticmethod
    def find_stack(construct: Construct) -> Construct | None:
        """Return the nearest stack at or above ``construct``, or None."""
        current: Construct | None = construct
        while current is not None:
            if TreeTraverser.is_stack(current):
                return current
            current = current.node.scope
        return None

    @staticmethod
    def get_descendants(construct: Construct) -> List[Construct]:
        descendants: List[Construct] = []
        stack = list(reversed(construct.node.children))
        while stack:
            current = stack.pop()
            descendants.append(current)
            stack.extend(reversed(current.node.children))
        return descendants

    # ------------------------------------------------------------------
    def _visit(self, construct: Construct, result: TraversalResult) -> None:
        node_id = construct.node.path or construct.node.id
        if node_id in self._visited:
            raise CircularReferenceError(f"Circular reference detected in construct tree at: {node_id}")
        self._visited.add(node_id)

        result.constructs.append(construct)
        result.constructs_by_path[node_id] = construct
        if self.is_stack(construct):
            result.stacks[node_id] = construct

        for child in construct.node.children:
            self._visit(child, result)


__all__ = ["TraversalResult", "TreeTraverser"]
