"""Resource collection per stack and scope placement checks."""

from __future__ import annotations

import pytest

from core.app import App
from core.construct import Construct
from core.errors import OrphanResourceError, ScopeViolationError
from core.resource import Resource
from core.resources.resource_group import ResourceGroup
from core.scopes import DeploymentScope
from core.stacks import ResourceGroupStack, SubscriptionStack
from core.synthesis.collector import ResourceCollector, resolve_stack_scope
from core.synthesis.traverser import TreeTraverser

SUBSCRIPTION = "00000000-0000-0000-0000-000000000000"


class _Storage(Resource):
    RESOURCE_TYPE = "Microsoft.Storage/storageAccounts"
    API_VERSION = "2023-01-01"

    def __init__(self, scope: Construct, id: str) -> None:
        super().__init__(scope, id, name=id.lower(), location="eastus")

    def to_arm_template(self):
        return self._build_arm({})


def _collect(app: App):
    traversal = TreeTraverser().traverse(app)
    collector = ResourceCollector()
    return collector, collector.collect(traversal.constructs, traversal.stacks)


def test_collect_groups_resources_under_nearest_stack():
    app = App()
    sub = SubscriptionStack(app, "Sub", subscription_id=SUBSCRIPTION, location="eastus")
    rg = ResourceGroupStack(sub, "Rg", resource_group_name="rg-app")
    a = _Storage(rg, "A")
    group = Construct(rg, "Group")
    b = _Storage(group, "B")
    group_resource = ResourceGroup(sub, "Group", resource_group_name="rg-other")

    _, stacks = _collect(app)

    assert list(stacks) == ["Sub", "Sub/Rg"]
    assert stacks["Sub"].scope == DeploymentScope.SUBSCRIPTION
    assert stacks["Sub"].resources == [group_resource]
    assert stacks["Sub/Rg"].name == "Rg"
    assert stacks["Sub/Rg"].scope == DeploymentScope.RESOURCE_GROUP
    assert stacks["Sub/Rg"].resources == [a, b]


def test_collect_rejects_orphan_resources():
    app = App()
    SubscriptionStack(app, "Sub", subscription_id=SUBSCRIPTION, location="eastus")
    _Storage(app, "Loose")
    with pytest.raises(OrphanResourceError, match="Resource Loose is not part of any stack"):
        _collect(app)


def test_collect_without_stacks_is_empty():
    app = App()
    Construct(app, "Nothing")
    _, stacks = _collect(app)
    assert stacks == {}


def test_scope_resolved_from_class_name_when_metadata_has_none():
    app = App()
    subscription_cls = type("SubscriptionStack", (Construct,), {})
    custom_cls = type("CustomStack", (Construct,), {})
    subscription_like = subscription_cls(app, "Legacy")
    subscription_like.node.add_metadata("aws:cdk:stack")
    custom = custom_cls(app, "Custom")
    custom.node.add_metadata("azure:arm:stack")

    assert resolve_stack_scope(subscription_like) == DeploymentScope.SUBSCRIPTION
    assert resolve_stack_scope(custom) == DeploymentScope.RESOURCE_GROUP


def test_subscription_scoped_resource_allowed_in_subscription_stack():
    app = App()
    sub = SubscriptionStack(app, "Sub", subscription_id=SUBSCRIPTION, location="eastus")
    ResourceGroup(sub, "Group", resource_group_name="rg-app")
    collector, stacks = _collect(app)
    collector.validate_resources(stacks)


def test_subscription_scoped_resource_rejected_in_resource_group_stack():
    app = App()
    sub = SubscriptionStack(app, "Sub", subscription_id=SUBSCRIPTION, location="eastus")
    rg = ResourceGroupStack(sub, "Workload", resource_group_name="rg-app")
    ResourceGroup(rg, "Nested", resource_group_name="rg-nested")
    collector, stacks = _collect(app)
    with pytest.raises(ScopeViolationError, match="Subscription-scoped resource .* cannot be deployed") as excinfo:
        collector.validate_resources(stacks)
    assert "ResourceGroupStack Workload" in str(excinfo.value)
