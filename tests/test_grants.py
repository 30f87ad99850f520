"""Grant helpers on grantable resources."""

from __future__ import annotations

import pytest

from core.app import App
from core.authorization.grants import Principal
from core.authorization.roles import PrincipalType, WellKnownRoleIds, role_definition_id
from core.constants import AUTO_ENABLED_IDENTITY_METADATA
from core.errors import MissingIdentityError, ValidationError
from core.resources.cosmos_db import CosmosDbAccount
from core.resources.key_vault import KeyVault
from core.resources.managed_identity import UserAssignedIdentity
from core.stacks import ResourceGroupStack, SubscriptionStack

TENANT = "11111111-2222-3333-4444-555555555555"


def _stack() -> ResourceGroupStack:
    app = App(context={"tenantId": TENANT})
    sub = SubscriptionStack(app, "Sub", subscription_id="00000000-0000-0000-0000-000000000000", location="westeurope")
    return ResourceGroupStack(sub, "Workload", resource_group_name="rg-workload")


def test_sequential_grants_create_distinct_children_with_same_scope():
    stack = _stack()
    account = CosmosDbAccount(stack, "Data")
    identity = UserAssignedIdentity(stack, "Worker")

    first = account.grant_data_read(identity)
    second = account.grant_account_reader(identity)

    assert first.role_assignment.node.id == "Grant0"
    assert second.role_assignment.node.id == "Grant1"
    assert first.role_assignment is not second.role_assignment
    assert first.scope == second.scope == account.resource_id
    assert first.role_assignment.scope == account.resource_id
    assert first.role_assignment.name != second.role_assignment.name
    assert first.role_definition_id == role_definition_id(WellKnownRoleIds.COSMOS_DB_DATA_READER)
    assert second.role_definition_id == role_definition_id(WellKnownRoleIds.COSMOS_DB_ACCOUNT_READER)
    assert first.grantee is identity


def test_grant_counters_are_per_instance():
    stack = _stack()
    one = CosmosDbAccount(stack, "One")
    two = CosmosDbAccount(stack, "Two")
    user = Principal("99999999-2222-3333-4444-555555555555")
    one.grant_data_read(user)
    assert two.grant_data_read(user).role_assignment.node.id == "Grant0"


def test_grant_to_self_enables_system_identity():
    stack = _stack()
    account = CosmosDbAccount(stack, "Data")
    result = account.grant_operator(account)

    assert account.identity.system_assigned
    assert account.node.has_metadata(AUTO_ENABLED_IDENTITY_METADATA)
    assert result.role_assignment.principal_id == (
        "[reference(resourceId('Microsoft.DocumentDB/databaseAccounts', 'cosdb-data'), "
        "'2024-08-15', 'Full').identity.principalId]"
    )
    assert account.to_arm_template()["identity"] == {"type": "SystemAssigned"}


def test_grant_to_resource_without_identity_fails():
    stack = _stack()
    account = CosmosDbAccount(stack, "Data")
    vault = KeyVault(stack, "Secrets")
    with pytest.raises(MissingIdentityError, match="no system-assigned identity"):
        account.grant_data_read(vault)
    assert account.node.try_find_child("Grant0") is None


def test_grant_to_resource_with_identity_records_dependency():
    stack = _stack()
    vault = KeyVault(stack, "Secrets")
    account = CosmosDbAccount(stack, "Data")
    account.enable_system_identity()
    result = vault.grant_secrets_read(account)
    assert result.role_assignment.resource.node.dependencies == [account]
    assert result.role_assignment.resource.principal_type == PrincipalType.SERVICE_PRINCIPAL


def test_foreign_group_grantee_passes_tenant():
    stack = _stack()
    vault = KeyVault(stack, "Secrets")
    group = Principal("99999999-2222-3333-4444-555555555555", PrincipalType.FOREIGN_GROUP, tenant_id=TENANT)
    result = vault.grant_read(group)
    assert result.role_assignment.resource.to_arm_template()["properties"]["tenantId"] == TENANT


def test_rejected_grant_leaves_no_child_and_next_grant_succeeds():
    stack = _stack()
    vault = KeyVault(stack, "Secrets")
    group = Principal("99999999-2222-3333-4444-555555555555", PrincipalType.FOREIGN_GROUP)

    with pytest.raises(ValidationError, match="tenant_id is required"):
        vault.grant_read(group)
    assert vault.node.try_find_child("Grant0") is None

    result = vault.grant_read(Principal("99999999-2222-3333-4444-555555555555"))
    assert result.role_assignment.node.id == "Grant0"
    assert [child.node.id for child in vault.node.children] == ["Grant0"]
