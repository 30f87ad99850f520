"""Tree traversal order, stack detection and cycle handling."""

from __future__ import annotations

import pytest

from core.app import App
from core.construct import Construct
from core.errors import CircularReferenceError
from core.resource import Resource
from core.stacks import ResourceGroupStack, SubscriptionStack
from core.synthesis.traverser import TreeTraverser


class _Storage(Resource):
    RESOURCE_TYPE = "Microsoft.Storage/storageAccounts"
    API_VERSION = "2023-01-01"

    def __init__(self, scope: Construct, id: str) -> None:
        super().__init__(scope, id, name=id.lower(), location=scope.node.context.location)

    def to_arm_template(self):
        return self._build_arm({})


def _tree():
    app = App()
    sub = SubscriptionStack(app, "Sub", subscription_id="00000000-0000-0000-0000-000000000000", location="eastus")
    rg = ResourceGroupStack(sub, "Rg", resource_group_name="rg-app")
    group = Construct(rg, "Group")
    first = _Storage(group, "First")
    second = _Storage(rg, "Second")
    return app, sub, rg, group, first, second


def test_traverse_returns_depth_first_preorder():
    app, sub, rg, group, first, second = _tree()
    result = TreeTraverser().traverse(app)
    assert result.constructs == [app, sub, rg, group, first, second]


def test_traverse_indexes_by_path_and_finds_stacks():
    app, sub, rg, group, first, _ = _tree()
    result = TreeTraverser().traverse(app)
    assert result.constructs_by_path["App"] is app
    assert result.constructs_by_path["Sub/Rg/Group/First"] is first
    assert list(result.stacks) == ["Sub", "Sub/Rg"]
    assert result.stacks["Sub/Rg"] is rg


def test_traverse_twice_yields_identical_lists():
    app, *_ = _tree()
    traverser = TreeTraverser()
    first_pass = traverser.traverse(app).constructs
    second_pass = traverser.traverse(app).constructs
    assert first_pass == second_pass
    assert all(a is b for a, b in zip(first_pass, second_pass))


def test_traverse_detects_cycles():
    app, _, rg, *_ = _tree()
    rg.node._children.append(app)
    with pytest.raises(CircularReferenceError, match="Circular reference detected in construct tree at: App"):
        TreeTraverser().traverse(app)


def test_aws_stack_marker_is_recognized():
    app = App()
    legacy = Construct(app, "Legacy")
    legacy.node.add_metadata("aws:cdk:stack")
    result = TreeTraverser().traverse(app)
    assert result.stacks == {"Legacy": legacy}


def test_find_stack_walks_upward():
    app, sub, rg, group, first, second = _tree()
    assert TreeTraverser.find_stack(first) is rg
    assert TreeTraverser.find_stack(second) is rg
    assert TreeTraverser.find_stack(sub) is sub
    loose = _Storage(app, "Loose")
    assert TreeTraverser.find_stack(loose) is None


def test_get_descendants_excludes_self():
    app, sub, rg, group, first, second = _tree()
    assert TreeTraverser.get_descendants(rg) == [group, first, second]
    assert TreeTraverser.get_descendants(first) == []
