"""Role assignment naming, validation and immutability."""

from __future__ import annotations

import pytest

from core.app import App
from core.authorization.role_assignment import RoleAssignment, RoleAssignmentArm, generate_assignment_guid
from core.authorization.roles import PrincipalType, WellKnownRoleIds, role_definition_id
from core.errors import ImmutableResourceError, ValidationError

SCOPE = "[resourceId('Microsoft.KeyVault/vaults', 'kv-app')]"
READER = role_definition_id(WellKnownRoleIds.READER)


def _assignment(**overrides) -> RoleAssignmentArm:
    props = {
        "scope": SCOPE,
        "role_definition_id": READER,
        "principal_id": "11111111-2222-3333-4444-555555555555",
        "principal_type": PrincipalType.USER,
    }
    props.update(overrides)
    return RoleAssignmentArm(App(), "Assignment", **props)


def test_role_definition_id_wraps_guid():
    assert READER == (
        "[subscriptionResourceId('Microsoft.Authorization/roleDefinitions', "
        "'acdd72a7-3385-48ef-bd42-f606fba81ae7')]"
    )


def test_guid_quotes_literals_and_unwraps_expressions():
    assert generate_assignment_guid("/subscriptions/abc", "role", "principal") == "[guid('/subscriptions/abc', 'role', 'principal')]"
    principal = "[reference(resourceId('Microsoft.Web/sites', 'app'), '2023-01-01', 'Full').identity.principalId]"
    assert generate_assignment_guid(SCOPE, READER, principal) == (
        "[guid(resourceId('Microsoft.KeyVault/vaults', 'kv-app'), "
        "subscriptionResourceId('Microsoft.Authorization/roleDefinitions', 'acdd72a7-3385-48ef-bd42-f606fba81ae7'), "
        "resourceId('Microsoft.Web/sites', 'app'))]"
    )


def test_name_is_deterministic():
    assert _assignment().name == _assignment().name
    assert _assignment().name != _assignment(principal_id="99999999-2222-3333-4444-555555555555").name


def test_arm_template_shape():
    assignment = _assignment(description="Read vault")
    template = assignment.to_arm_template()
    assert template["type"] == "Microsoft.Authorization/roleAssignments"
    assert template["apiVersion"] == "2022-04-01"
    assert template["scope"] == SCOPE
    assert "location" not in template
    assert "tags" not in template
    assert template["properties"] == {
        "roleDefinitionId": READER,
        "principalId": "11111111-2222-3333-4444-555555555555",
        "principalType": "User",
        "description": "Read vault",
    }
    assert assignment.resource_id == f"{SCOPE}/providers/Microsoft.Authorization/roleAssignments/{assignment.name}"


def test_deployment_level_scope_is_not_emitted():
    template = _assignment(scope="[resourceGroup().id]").to_arm_template()
    assert "scope" not in template


def test_condition_requires_version():
    with pytest.raises(ValidationError, match="condition_version is required"):
        _assignment(condition="@Resource[name] StringEquals 'x'")
    template = _assignment(condition="@Resource[name] StringEquals 'x'", condition_version="2.0").to_arm_template()
    assert template["properties"]["conditionVersion"] == "2.0"


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"scope": ""}, "requires a scope"),
        ({"role_definition_id": " "}, "requires a role_definition_id"),
        ({"principal_id": ""}, "requires a principal_id"),
        ({"principal_type": "Robot"}, "Invalid principal_type"),
        ({"description": "x" * 1025}, "cannot exceed 1024"),
        ({"principal_type": PrincipalType.FOREIGN_GROUP}, "tenant_id is required"),
    ],
)
def test_invalid_properties_are_rejected(overrides, message):
    with pytest.raises(ValidationError, match=message):
        _assignment(**overrides)


def test_failed_validation_leaves_tree_untouched():
    app = App()
    with pytest.raises(ValidationError):
        RoleAssignmentArm(app, "Broken", scope="", role_definition_id=READER, principal_id="p")
    assert app.node.children == []


def test_role_assignment_is_immutable():
    assignment = RoleAssignment(
        App(),
        "Assignment",
        assignment_scope=SCOPE,
        role_definition_id=READER,
        principal_id="11111111-2222-3333-4444-555555555555",
    )
    assert assignment.scope == SCOPE
    assert assignment.resource.node.path == "Assignment/Resource"
    with pytest.raises(ImmutableResourceError):
        assignment.add_description("later")
    with pytest.raises(ImmutableResourceError):
        assignment.add_condition("@Resource[name] StringEquals 'x'")


def test_rejected_wrapper_is_not_attached():
    app = App()
    with pytest.raises(ValidationError, match="Invalid principal_type"):
        RoleAssignment(
            app,
            "Assignment",
            assignment_scope=SCOPE,
            role_definition_id=READER,
            principal_id="11111111-2222-3333-4444-555555555555",
            principal_type="Robot",
        )
    assert app.node.children == []
