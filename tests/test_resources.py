"""Resource constructs: validation and ARM mapping."""

from __future__ import annotations

import pytest

from core.app import App
from core.errors import ValidationError
from core.resources.cosmos_db import CosmosDbAccount, CosmosDbLocation
from core.resources.key_vault import KeyVault
from core.resources.log_analytics import LogAnalyticsWorkspace
from core.resources.managed_identity import UserAssignedIdentity
from core.resources.resource_group import ResourceGroup
from core.stacks import ResourceGroupStack, SubscriptionStack

TENANT = "11111111-2222-3333-4444-555555555555"


def _stack(**context) -> ResourceGroupStack:
    app = App(context={"tenantId": TENANT, **context})
    sub = SubscriptionStack(app, "Sub", subscription_id="00000000-0000-0000-0000-000000000000", location="westeurope")
    return ResourceGroupStack(sub, "Workload", resource_group_name="rg-workload", tags={"env": "test"})


# Cosmos DB ----------------------------------------------------------------


def test_cosmos_account_defaults():
    account = CosmosDbAccount(_stack(), "Data")
    template = account.to_arm_template()
    assert account.name == "cosdb-data"
    assert account.document_endpoint == "https://cosdb-data.documents.azure.com:443/"
    assert template["kind"] == "GlobalDocumentDB"
    assert template["location"] == "westeurope"
    assert template["tags"] == {"env": "test"}
    assert template["properties"] == {
        "databaseAccountOfferType": "Standard",
        "locations": [{"locationName": "westeurope", "failoverPriority": 0}],
        "consistencyPolicy": {"defaultConsistencyLevel": "Session"},
        "publicNetworkAccess": "Disabled",
    }


def test_cosmos_account_serverless_capability():
    template = CosmosDbAccount(_stack(), "Data", enable_serverless=True).to_arm_template()
    assert template["properties"]["capabilities"] == [{"name": "EnableServerless"}]


def test_cosmos_account_name_fallback_is_truncated():
    account = CosmosDbAccount(_stack(), "A" * 60)
    assert account.name == "cosdb-" + "a" * 38
    assert len(account.name) == 44


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"database_account_name": "Bad_Name"}, "Invalid database_account_name"),
        ({"database_account_name": "ab"}, "between 3 and 44"),
        ({"consistency_level": "Sometimes"}, "Invalid consistency_level"),
        (
            {"locations": [CosmosDbLocation("westeurope", 0), CosmosDbLocation("northeurope", 0)]},
            "Duplicate failover priority",
        ),
        ({"locations": [CosmosDbLocation("westeurope", -1)]}, "cannot be negative"),
    ],
)
def test_cosmos_account_validation(kwargs, message):
    with pytest.raises(ValidationError, match=message):
        CosmosDbAccount(_stack(), "Data", **kwargs)


def test_cosmos_container_requires_leading_slash():
    database = CosmosDbAccount(_stack(), "Data").add_sql_database("Db")
    with pytest.raises(ValidationError, match="Partition key path must start with /"):
        database.add_container("Orders", partition_key_path="tenantId")


def test_cosmos_container_mapping_and_ids():
    account = CosmosDbAccount(_stack(), "Data")
    database = account.add_sql_database("Db", throughput=400)
    container = database.add_container("Orders", partition_key_path="/tenantId", max_throughput=4000, default_ttl=-1)

    assert container.arm_name == "cosdb-data/Db/Orders"
    assert container.resource_id == (
        "[resourceId('Microsoft.DocumentDB/databaseAccounts/sqlDatabases/containers', 'cosdb-data', 'Db', 'Orders')]"
    )
    assert database.to_arm_template()["properties"] == {"resource": {"id": "Db"}, "options": {"throughput": 400}}
    properties = container.to_arm_template()["properties"]
    assert properties["resource"] == {
        "id": "Orders",
        "partitionKey": {"paths": ["/tenantId"], "kind": "Hash"},
        "defaultTtl": -1,
    }
    assert properties["options"] == {"autoscaleSettings": {"maxThroughput": 4000}}


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"throughput": 350}, "at least 400"),
        ({"throughput": 450}, "increments of 100"),
        ({"max_throughput": 1500}, "increments of 1000"),
        ({"throughput": 400, "max_throughput": 1000}, "either throughput or max_throughput"),
    ],
)
def test_cosmos_container_throughput_validation(kwargs, message):
    database = CosmosDbAccount(_stack(), "Data").add_sql_database("Db")
    with pytest.raises(ValidationError, match=message):
        database.add_container("Orders", partition_key_path="/id", **kwargs)


def test_serverless_rejects_provisioned_throughput():
    account = CosmosDbAccount(_stack(), "Data", enable_serverless=True)
    with pytest.raises(ValidationError, match="Serverless"):
        account.add_sql_database("Db", throughput=400)


def test_container_grants_are_scoped_to_container():
    stack = _stack()
    container = CosmosDbAccount(stack, "Data").add_sql_database("Db").add_container("Orders", partition_key_path="/id")
    identity = UserAssignedIdentity(stack, "Worker")
    read = container.grant_read_data(identity)
    write = container.grant_write_data(identity)
    assert read.scope == write.scope == container.resource_id
    assert write.role_assignment.node.id == "Grant1"


# Key Vault ----------------------------------------------------------------


def test_key_vault_omits_unset_properties():
    vault = KeyVault(_stack(), "Secrets")
    template = vault.to_arm_template()
    assert vault.name == "kv-secrets"
    assert vault.vault_uri == "https://kv-secrets.vault.azure.net/"
    assert template["type"] == "Microsoft.KeyVault/vaults"
    assert template["apiVersion"] == "2024-11-01"
    assert template["properties"] == {"tenantId": TENANT, "sku": {"family": "A", "name": "standard"}}


def test_key_vault_includes_configured_properties():
    vault = KeyVault(_stack(), "Secrets", enable_rbac_authorization=True, soft_delete_retention_in_days=7, sku_name="premium")
    properties = vault.to_arm_template()["properties"]
    assert properties["enableRbacAuthorization"] is True
    assert properties["softDeleteRetentionInDays"] == 7
    assert properties["sku"] == {"family": "A", "name": "premium"}


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"vault_name": "bad--name"}, "Invalid Key Vault name"),
        ({"vault_name": "-leading"}, "Invalid Key Vault name"),
        ({"vault_name": "x" * 25}, "between 3 and 24"),
        ({"tenant_id": "not-a-uuid"}, "tenant id in UUID format"),
        ({"sku_family": "B"}, "Invalid sku family"),
        ({"soft_delete_retention_in_days": 5}, "between 7 and 90"),
    ],
)
def test_key_vault_validation(kwargs, message):
    with pytest.raises(ValidationError, match=message):
        KeyVault(_stack(), "Secrets", **kwargs)


def test_key_vault_accepts_tenant_expression():
    app = App()
    sub = SubscriptionStack(app, "Sub", location="eastus")
    rg = ResourceGroupStack(sub, "Rg", resource_group_name="rg")
    vault = KeyVault(rg, "Secrets", tenant_id="[subscription().tenantId]")
    assert vault.to_arm_template()["properties"]["tenantId"] == "[subscription().tenantId]"


# Log Analytics ------------------------------------------------------------


def test_log_analytics_defaults():
    workspace = LogAnalyticsWorkspace(_stack(), "Logs", tags={"team": "ops"})
    template = workspace.to_arm_template()
    assert workspace.name == "log-logs"
    assert template["tags"] == {"env": "test", "team": "ops"}
    assert template["properties"] == {"sku": {"name": "PerGB2018"}, "retentionInDays": 30}


def test_log_analytics_retention_bounds():
    with pytest.raises(ValidationError, match="retention_in_days"):
        LogAnalyticsWorkspace(_stack(), "Logs", retention_in_days=20)


# Identity and resource group ----------------------------------------------


def test_user_assigned_identity_references():
    identity = UserAssignedIdentity(_stack(), "Worker")
    assert identity.name == "id-worker"
    assert identity.resource_id == "[resourceId('Microsoft.ManagedIdentity/userAssignedIdentities', 'id-worker')]"
    assert identity.principal_id == (
        "[reference(resourceId('Microsoft.ManagedIdentity/userAssignedIdentities', 'id-worker')).principalId]"
    )
    assert "properties" not in identity.to_arm_template()


def test_user_assigned_identity_name_rules():
    with pytest.raises(ValidationError):
        UserAssignedIdentity(_stack(), "Worker", identity_name="-bad")
    with pytest.raises(ValidationError, match="between 3 and 128"):
        UserAssignedIdentity(_stack(), "Worker", identity_name="ab")


def test_identity_attach_adds_identity_block():
    stack = _stack()
    identity = UserAssignedIdentity(stack, "Worker")
    account = CosmosDbAccount(stack, "Data")
    identity.attach_to(account)
    assert account.to_arm_template()["identity"] == {
        "type": "UserAssigned",
        "userAssignedIdentities": {identity.resource_id: {}},
    }
    assert account.node.dependencies == [identity]


def test_location_is_required():
    app = App()
    sub = SubscriptionStack(app, "Sub")
    rg = ResourceGroupStack(sub, "Rg", resource_group_name="rg")
    with pytest.raises(ValidationError, match="Location is required"):
        LogAnalyticsWorkspace(rg, "Logs")


def test_resource_group_resource():
    app = App()
    sub = SubscriptionStack(app, "Sub", location="eastus")
    group = ResourceGroup(sub, "Group", resource_group_name="rg-app")
    assert group.resource_id == "[subscriptionResourceId('Microsoft.Resources/resourceGroups', 'rg-app')]"
    assert group.to_arm_template() == {
        "type": "Microsoft.Resources/resourceGroups",
        "apiVersion": "2024-03-01",
        "name": "rg-app",
        "location": "eastus",
    }
