"""ARM deployment scope table: schemas, containment and available resource types."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List


class DeploymentScope(str, Enum):
    TENANT = "tenant"
    MANAGEMENT_GROUP = "managementGroup"
    SUBSCRIPTION = "subscription"
    RESOURCE_GROUP = "resourceGroup"


_SCHEMA_BASE = "https://schema.management.azure.com/schemas"

SCHEMA_URLS: Dict[DeploymentScope, str] = {
    DeploymentScope.TENANT: f"{_SCHEMA_BASE}/2019-08-01/tenantDeploymentTemplate.json#",
    DeploymentScope.MANAGEMENT_GROUP: f"{_SCHEMA_BASE}/2019-08-01/managementGroupDeploymentTemplate.json#",
    DeploymentScope.SUBSCRIPTION: f"{_SCHEMA_BASE}/2018-05-01/subscriptionDeploymentTemplate.json#",
    DeploymentScope.RESOURCE_GROUP: f"{_SCHEMA_BASE}/2019-04-01/deploymentTemplate.json#",
}

_CONTAINMENT: Dict[DeploymentScope, tuple[DeploymentScope, ...]] = {
    DeploymentScope.TENANT: (DeploymentScope.MANAGEMENT_GROUP, DeploymentScope.SUBSCRIPTION),
    DeploymentScope.MANAGEMENT_GROUP: (DeploymentScope.MANAGEMENT_GROUP, DeploymentScope.SUBSCRIPTION),
    DeploymentScope.SUBSCRIPTION: (DeploymentScope.RESOURCE_GROUP,),
    DeploymentScope.RESOURCE_GROUP: (),
}

_PARENTS: Dict[DeploymentScope, DeploymentScope | None] = {
    DeploymentScope.TENANT: None,
    DeploymentScope.MANAGEMENT_GROUP: DeploymentScope.TENANT,
    DeploymentScope.SUBSCRIPTION: DeploymentScope.MANAGEMENT_GROUP,
    DeploymentScope.RESOURCE_GROUP: DeploymentScope.SUBSCRIPTION,
}

# Representative, not exhaustive. Resource groups accept the widest range of types.
SCOPE_AVAILABLE_RESOURCES: Dict[DeploymentScope, List[str]] = {
    DeploymentScope.TENANT: [
        "Microsoft.Authorization/policyDefinitions",
        "Microsoft.Authorization/policySetDefinitions",
        "Microsoft.Management/managementGroups",
        "Microsoft.Subscription/aliases",
    ],
    DeploymentScope.MANAGEMENT_GROUP: [
        "Microsoft.Authorization/policyAssignments",
        "Microsoft.Authorization/policyDefinitions",
        "Microsoft.Authorization/roleAssignments",
        "Microsoft.Authorization/roleDefinitions",
        "Microsoft.Management/managementGroups/subscriptions",
    ],
    DeploymentScope.SUBSCRIPTION: [
        "Microsoft.Resources/resourceGroups",
        "Microsoft.Authorization/policyAssignments",
        "Microsoft.Authorization/policyDefinitions",
        "Microsoft.Authorization/roleAssignments",
        "Microsoft.Authorization/roleDefinitions",
        "Microsoft.Insights/actionGroups",
        "Microsoft.Consumption/budgets",
        "Microsoft.Security/pricings",
    ],
    DeploymentScope.RESOURCE_GROUP: [
        "Microsoft.Storage/storageAccounts",
        "Microsoft.Network/virtualNetworks",
        "Microsoft.Network/networkSecurityGroups",
        "Microsoft.Network/publicIPAddresses",
        "Microsoft.KeyVault/vaults",
        "Microsoft.Web/sites",
        "Microsoft.Web/serverfarms",
        "Microsoft.CognitiveServices/accounts",
        "Microsoft.DocumentDB/databaseAccounts",
        "Microsoft.DocumentDB/databaseAccounts/sqlDatabases",
        "Microsoft.DocumentDB/databaseAccounts/sqlDatabases/containers",
        "Microsoft.OperationalInsights/workspaces",
        "Microsoft.ManagedIdentity/userAssignedIdentities",
        "Microsoft.Authorization/roleAssignments",
        "Microsoft.Insights/components",
        "Microsoft.ApiManagement/service",
    ],
}


def get_schema(scope: DeploymentScope) -> str:
    return SCHEMA_URLS[DeploymentScope(scope)]


def can_contain(parent: DeploymentScope, child: DeploymentScope) -> bool:
    """Return True when a deployment at ``parent`` may nest one at ``child``."""
    return DeploymentScope(child) in _CONTAINMENT[DeploymentScope(parent)]


def get_parent_scope(scope: DeploymentScope) -> DeploymentScope | None:
    return _PARENTS[DeploymentScope(scope)]


def get_child_scopes(scope: DeploymentScope) -> List[DeploymentScope]:
    return list(_CONTAINMENT[DeploymentScope(scope)])


def is_resource_available(scope: DeploymentScope, resource_type: str) -> bool:
    """Case-insensitive membership test against the representative type list."""
    lowered = resource_type.lower()
    return any(candidate.lower() == lowered for candidate in SCOPE_AVAILABLE_RESOURCES[DeploymentScope(scope)])


__all__ = [
    "DeploymentScope",
    "SCHEMA_URLS",
    "SCOPE_AVAILABLE_RESOURCES",
    "can_contain",
    "get_child_scopes",
    "get_parent_scope",
    "get_schema",
    "is_resource_available",
]
