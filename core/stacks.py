"""Deployment boundary constructs: subscription and resource group stacks."""

from __future__ import annotations

import re
from typing import ClassVar, Dict, Mapping

from core.app import App
from core.constants import AZURE_STACK_METADATA
from core.construct import Construct, DeploymentContext
from core.errors import ValidationError
from core.scopes import DeploymentScope
from core.validation import validate_length

_RESOURCE_GROUP_NAME = re.compile(r"^[-\w.()]+$")


class Stack(Construct):
    """Construct tagged as a deployment boundary; synthesizes to its own template."""

    DEPLOYMENT_SCOPE: ClassVar[DeploymentScope] = DeploymentScope.RESOURCE_GROUP

    def __init__(self, scope: Construct, id: str, *, context: DeploymentContext) -> None:
        super().__init__(scope, id, context=context)
        self.node.add_metadata(AZURE_STACK_METADATA, {"scope": self.DEPLOYMENT_SCOPE.value})
        root = self.node.root
        if isinstance(root, App):
            root.register_stack(self)

    @property
    def deployment_scope(self) -> DeploymentScope:
        return self.DEPLOYMENT_SCOPE

    @property
    def location(self) -> str | None:
        return self.node.context.location

    @property
    def tags(self) -> Dict[str, str]:
        return dict(self.node.context.tags)


class SubscriptionStack(Stack):
    DEPLOYMENT_SCOPE = DeploymentScope.SUBSCRIPTION

    def __init__(
        self,
        app: App,
        id: str,
        *,
        subscription_id: str | None = None,
        location: str | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        context = app.node.context.derive(
            tags=dict(tags or {}),
            location=location,
            subscription_id=subscription_id,
        )
        super().__init__(app, id, context=context)
        self.app = app

    @property
    def subscription_id(self) -> str | None:
        return self.node.context.subscription_id


class ResourceGroupStack(Stack):
    DEPLOYMENT_SCOPE = DeploymentScope.RESOURCE_GROUP

    def __init__(
        self,
        subscription_stack: SubscriptionStack,
        id: str,
        *,
        resource_group_name: str,
        location: str | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        if not isinstance(subscription_stack, SubscriptionStack):
            raise ValidationError(
                "ResourceGroupStack must be created inside a SubscriptionStack",
                details=f"Got parent of type {type(subscription_stack).__name__}",
                suggestion="Create a SubscriptionStack first and pass it as the scope",
                property_path="scope",
            )
        validate_resource_group_name(resource_group_name)
        context = subscription_stack.node.context.derive(
            tags=dict(tags or {}),
            location=location,
            resource_group_name=resource_group_name,
        )
        super().__init__(subscription_stack, id, context=context)
        self.subscription_stack = subscription_stack

    @property
    def resource_group_name(self) -> str:
        return self.node.context.resource_group_name or ""


def validate_resource_group_name(name: str) -> None:
    if not name:
        raise ValidationError(
            "resource_group_name is required",
            suggestion="Provide a resource group name such as 'rg-app-prod'",
            property_path="resource_group_name",
        )
    validate_length(name, "resource_group_name", 1, 90)
    if not _RESOURCE_GROUP_NAME.match(name) or name.endswith("."):
        raise ValidationError(
            f"Invalid resource group name: '{name}'",
            details="Only alphanumerics, underscores, hyphens, periods and parentheses are allowed, and the name cannot end with a period",
            suggestion="Remove unsupported characters or the trailing period",
            property_path="resource_group_name",
        )


__all__ = ["ResourceGroupStack", "Stack", "SubscriptionStack", "validate_resource_group_name"]
