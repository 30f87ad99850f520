"""Key Vault construct."""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping

from core.authorization.grants import Grantable, GrantableResource, GrantResult
from core.authorization.roles import WellKnownRoleIds, role_definition_id
from core.construct import Construct
from core.errors import ValidationError
from core.naming import generate_fallback_name
from core.resource import resolve_location
from core.validation import is_uuid, validate_choice, validate_length

VAULT_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9-]+$")
SKU_NAMES = ("standard", "premium")
MIN_SOFT_DELETE_DAYS = 7
MAX_SOFT_DELETE_DAYS = 90


class KeyVault(GrantableResource):
    RESOURCE_TYPE = "Microsoft.KeyVault/vaults"
    API_VERSION = "2024-11-01"

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        vault_name: str | None = None,
        location: str | None = None,
        tenant_id: str | None = None,
        sku_name: str = "standard",
        sku_family: str = "A",
        enable_rbac_authorization: bool | None = None,
        enable_soft_delete: bool | None = None,
        soft_delete_retention_in_days: int | None = None,
        enable_purge_protection: bool | None = None,
        public_network_access: str | None = None,
        network_acls: Mapping[str, Any] | None = None,
        enabled_for_deployment: bool | None = None,
        enabled_for_disk_encryption: bool | None = None,
        enabled_for_template_deployment: bool | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        name = vault_name or generate_fallback_name(id, "kv", max_length=24)
        location = resolve_location(scope, location, resource="Key Vault")
        tenant_id = tenant_id or scope.node.context.tenant_id
        _validate_vault(name, tenant_id, sku_name, sku_family, soft_delete_retention_in_days)
        super().__init__(scope, id, name=name, location=location, tags=tags)
        self.vault_tenant_id = tenant_id
        self.sku = {"family": sku_family, "name": sku_name}
        self.enable_rbac_authorization = enable_rbac_authorization
        self.enable_soft_delete = enable_soft_delete
        self.soft_delete_retention_in_days = soft_delete_retention_in_days
        self.enable_purge_protection = enable_purge_protection
        self.public_network_access = public_network_access
        self.network_acls = dict(network_acls) if network_acls is not None else None
        self.enabled_for_deployment = enabled_for_deployment
        self.enabled_for_disk_encryption = enabled_for_disk_encryption
        self.enabled_for_template_deployment = enabled_for_template_deployment

    @property
    def vault_uri(self) -> str:
        return f"https://{self.name}.vault.azure.net/"

    def grant_secrets_read(self, grantee: Grantable) -> GrantResult:
        return self.grant(grantee, role_definition_id(WellKnownRoleIds.KEY_VAULT_SECRETS_USER), description="Read Key Vault secrets")

    def grant_secrets_full_access(self, grantee: Grantable) -> GrantResult:
        return self.grant(grantee, role_definition_id(WellKnownRoleIds.KEY_VAULT_SECRETS_OFFICER), description="Manage Key Vault secrets")

    def grant_crypto_use(self, grantee: Grantable) -> GrantResult:
        return self.grant(grantee, role_definition_id(WellKnownRoleIds.KEY_VAULT_CRYPTO_USER), description="Use Key Vault keys")

    def grant_read(self, grantee: Grantable) -> GrantResult:
        return self.grant(grantee, role_definition_id(WellKnownRoleIds.KEY_VAULT_READER), description="Read Key Vault metadata")

    def grant_administrator(self, grantee: Grantable) -> GrantResult:
        return self.grant(grantee, role_definition_id(WellKnownRoleIds.KEY_VAULT_ADMINISTRATOR), description="Administer Key Vault")

    def to_arm_template(self) -> Dict[str, Any]:
        properties = {
            "tenantId": self.vault_tenant_id,
            "sku": self.sku,
            "enableRbacAuthorization": self.enable_rbac_authorization,
            "enableSoftDelete": self.enable_soft_delete,
            "softDeleteRetentionInDays": self.soft_delete_retention_in_days,
            "enablePurgeProtection": self.enable_purge_protection,
            "publicNetworkAccess": self.public_network_access,
            "networkAcls": self.network_acls,
            "enabledForDeployment": self.enabled_for_deployment,
            "enabledForDiskEncryption": self.enabled_for_disk_encryption,
            "enabledForTemplateDeployment": self.enabled_for_template_deployment,
        }
        return self._build_arm(properties)


# ------------------------------------------------------------------
def _validate_vault(
    name: str,
    tenant_id: str | None,
    sku_name: str,
    sku_family: str,
    soft_delete_retention_in_days: int | None,
) -> None:
    validate_length(name, "vault_name", 3, 24)
    if not VAULT_NAME_PATTERN.match(name) or name.startswith("-") or name.endswith("-") or "--" in name:
        raise ValidationError(
            f"Invalid Key Vault name: '{name}'",
            details="Use letters, digits and single hyphens; the name cannot start or end with a hyphen",
            suggestion="Rename the vault, e.g. 'kv-app-prod'",
            property_path="vault_name",
        )
    # ARM expressions such as [subscription().tenantId] resolve at deploy time.
    if not tenant_id or not (is_uuid(tenant_id) or (tenant_id.startswith("[") and tenant_id.endswith("]"))):
        raise ValidationError(
            "Key Vault requires a tenant id in UUID format",
            details=f"Got '{tenant_id}'",
            suggestion="Pass tenant_id=... or set 'tenantId' in the app context; '[subscription().tenantId]' also works",
            property_path="tenant_id",
        )
    if sku_family != "A":
        raise ValidationError(
            f"Invalid sku family '{sku_family}'",
            details="Key Vault only supports sku family 'A'",
            property_path="sku_family",
        )
    validate_choice(sku_name, "sku_name", SKU_NAMES)
    if soft_delete_retention_in_days is not None and not (
        MIN_SOFT_DELETE_DAYS <= soft_delete_retention_in_days <= MAX_SOFT_DELETE_DAYS
    ):
        raise ValidationError(
            f"soft_delete_retention_in_days must be between {MIN_SOFT_DELETE_DAYS} and {MAX_SOFT_DELETE_DAYS}",
            details=f"Got {soft_delete_retention_in_days}",
            property_path="soft_delete_retention_in_days",
        )


__all__ = ["KeyVault"]
