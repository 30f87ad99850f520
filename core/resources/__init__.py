"""Resource constructs for common Azure services."""

from .cosmos_db import CosmosDbAccount, CosmosDbContainer, CosmosDbLocation, CosmosDbSqlDatabase
from .key_vault import KeyVault
from .log_analytics import LogAnalyticsWorkspace
from .managed_identity import UserAssignedIdentity
from .resource_group import ResourceGroup

__all__ = [
    "CosmosDbAccount",
    "CosmosDbContainer",
    "CosmosDbLocation",
    "CosmosDbSqlDatabase",
    "KeyVault",
    "LogAnalyticsWorkspace",
    "ResourceGroup",
    "UserAssignedIdentity",
]
