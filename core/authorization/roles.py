"""Built-in Azure role definition ids and principal types."""

from __future__ import annotations

from enum import Enum
from typing import Dict


class PrincipalType(str, Enum):
    USER = "User"
    GROUP = "Group"
    SERVICE_PRINCIPAL = "ServicePrincipal"
    FOREIGN_GROUP = "ForeignGroup"
    DEVICE = "Device"


class WellKnownRoleIds:
    """GUIDs of built-in role definitions used by the grant helpers."""

    READER = "acdd72a7-3385-48ef-bd42-f606fba81ae7"
    CONTRIBUTOR = "b24988ac-6180-42a0-ab88-20f7382dd24c"
    OWNER = "8e3af657-a8ff-443c-a75c-2fe8c4bcb635"

    COSMOS_DB_ACCOUNT_READER = "fbdf93bf-df7d-467e-a4d2-9458aa1360c8"
    COSMOS_DB_OPERATOR = "230815da-be43-4aae-9cb4-875f7bd000aa"
    # Cosmos DB data plane roles are account-local SQL role definitions.
    COSMOS_DB_DATA_READER = "00000000-0000-0000-0000-000000000001"
    COSMOS_DB_DATA_CONTRIBUTOR = "00000000-0000-0000-0000-000000000002"

    KEY_VAULT_SECRETS_USER = "4633458b-17de-408a-b874-0445c86b69e6"
    KEY_VAULT_SECRETS_OFFICER = "b86a8fe4-44ce-4948-aee5-eccb2c155cd7"
    KEY_VAULT_CRYPTO_USER = "12338af0-0e69-4776-bea7-57ae8d297424"
    KEY_VAULT_READER = "21090545-7ca7-4776-b22c-e363652d74d2"
    KEY_VAULT_ADMINISTRATOR = "00482a5a-887f-4fb3-b363-3b7fe8e74483"

    @classmethod
    def all(cls) -> Dict[str, str]:
        return {
            name: value
            for name, value in vars(cls).items()
            if name.isupper() and isinstance(value, str)
        }


def role_definition_id(role_guid: str) -> str:
    """Wrap a role GUID in the subscription-level role definition resource id."""
    return f"[subscriptionResourceId('Microsoft.Authorization/roleDefinitions', '{role_guid}')]"


__all__ = ["PrincipalType", "WellKnownRoleIds", "role_definition_id"]
