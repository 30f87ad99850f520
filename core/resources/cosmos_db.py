"""Cosmos DB (SQL API) account, database and container constructs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence

from core.authorization.grants import Grantable, GrantableResource, GrantResult
from core.authorization.roles import WellKnownRoleIds, role_definition_id
from core.construct import Construct
from core.errors import ValidationError
from core.naming import generate_fallback_name
from core.resource import Resource, resolve_location
from core.validation import (
    validate_autoscale_throughput,
    validate_choice,
    validate_length,
    validate_manual_throughput,
    validate_pattern,
)

ACCOUNT_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]{1,42}[a-z0-9]$")
CHILD_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_-]{0,254}$")

CONSISTENCY_LEVELS = ("Eventual", "ConsistentPrefix", "Session", "BoundedStaleness", "Strong")
ACCOUNT_KINDS = ("GlobalDocumentDB", "MongoDB", "Parse")
PUBLIC_NETWORK_ACCESS = ("Enabled", "Disabled", "SecuredByPerimeter")


@dataclass(slots=True)
class CosmosDbLocation:
    location_name: str
    failover_priority: int = 0
    is_zone_redundant: bool | None = None

    def to_arm(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"locationName": self.location_name, "failoverPriority": self.failover_priority}
        if self.is_zone_redundant is not None:
            payload["isZoneRedundant"] = self.is_zone_redundant
        return payload


class CosmosDbAccount(GrantableResource):
    RESOURCE_TYPE = "Microsoft.DocumentDB/databaseAccounts"
    API_VERSION = "2024-08-15"

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        database_account_name: str | None = None,
        location: str | None = None,
        locations: Sequence[CosmosDbLocation] | None = None,
        consistency_level: str = "Session",
        kind: str = "GlobalDocumentDB",
        public_network_access: str = "Disabled",
        enable_serverless: bool = False,
        enable_automatic_failover: bool | None = None,
        enable_multiple_write_locations: bool | None = None,
        enable_free_tier: bool | None = None,
        ip_rules: Sequence[str] | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        name = database_account_name or generate_fallback_name(id, "cosdb", max_length=44)
        location = resolve_location(scope, location, resource="Cosmos DB account")
        resolved_locations = list(locations) if locations else [CosmosDbLocation(location_name=location)]
        _validate_account(name, resolved_locations, consistency_level, kind, public_network_access)
        super().__init__(scope, id, name=name, location=location, tags=tags)
        self.locations = resolved_locations
        self.consistency_level = consistency_level
        self.kind = kind
        self.public_network_access = public_network_access
        self.enable_serverless = enable_serverless
        self.enable_automatic_failover = enable_automatic_failover
        self.enable_multiple_write_locations = enable_multiple_write_locations
        self.enable_free_tier = enable_free_tier
        self.ip_rules = list(ip_rules or [])

    @property
    def document_endpoint(self) -> str:
        return f"https://{self.name}.documents.azure.com:443/"

    def add_sql_database(
        self,
        id: str,
        *,
        database_name: str | None = None,
        throughput: int | None = None,
        max_throughput: int | None = None,
    ) -> "CosmosDbSqlDatabase":
        return CosmosDbSqlDatabase(self, id, database_name=database_name, throughput=throughput, max_throughput=max_throughput)

    def grant_data_read(self, grantee: Grantable) -> GrantResult:
        return self.grant(
            grantee,
            role_definition_id(WellKnownRoleIds.COSMOS_DB_DATA_READER),
            description="Read data in Cosmos DB account",
        )

    def grant_data_write(self, grantee: Grantable) -> GrantResult:
        return self.grant(
            grantee,
            role_definition_id(WellKnownRoleIds.COSMOS_DB_DATA_CONTRIBUTOR),
            description="Read and write data in Cosmos DB account",
        )

    def grant_account_reader(self, grantee: Grantable) -> GrantResult:
        return self.grant(
            grantee,
            role_definition_id(WellKnownRoleIds.COSMOS_DB_ACCOUNT_READER),
            description="Read Cosmos DB account metadata",
        )

    def grant_operator(self, grantee: Grantable) -> GrantResult:
        return self.grant(
            grantee,
            role_definition_id(WellKnownRoleIds.COSMOS_DB_OPERATOR),
            description="Manage Cosmos DB account without data access",
        )

    def to_arm_template(self) -> Dict[str, Any]:
        capabilities = [{"name": "EnableServerless"}] if self.enable_serverless else None
        properties = {
            "databaseAccountOfferType": "Standard",
            "locations": [location.to_arm() for location in self.locations],
            "consistencyPolicy": {"defaultConsistencyLevel": self.consistency_level},
            "publicNetworkAccess": self.public_network_access,
            "enableAutomaticFailover": self.enable_automatic_failover,
            "enableMultipleWriteLocations": self.enable_multiple_write_locations,
            "enableFreeTier": self.enable_free_tier,
            "ipRules": [{"ipAddressOrRange": rule} for rule in self.ip_rules] or None,
            "capabilities": capabilities,
        }
        return self._build_arm(properties, kind=self.kind)


class CosmosDbSqlDatabase(Resource):
    RESOURCE_TYPE = "Microsoft.DocumentDB/databaseAccounts/sqlDatabases"
    API_VERSION = "2024-08-15"

    def __init__(
        self,
        account: CosmosDbAccount,
        id: str,
        *,
        database_name: str | None = None,
        throughput: int | None = None,
        max_throughput: int | None = None,
    ) -> None:
        if not isinstance(account, CosmosDbAccount):
            raise ValidationError(
                "A Cosmos DB SQL database must be created inside a CosmosDbAccount",
                suggestion="Use account.add_sql_database(...)",
                property_path="scope",
            )
        name = database_name or id
        validate_pattern(name, "database_name", CHILD_NAME_PATTERN, details="Start with a letter or digit; use letters, digits, '_' or '-'")
        _validate_throughput(account, throughput, max_throughput)
        super().__init__(account, id, name=name, parent=account)
        self.account = account
        self.throughput = throughput
        self.max_throughput = max_throughput

    def add_container(
        self,
        id: str,
        *,
        partition_key_path: str,
        container_name: str | None = None,
        throughput: int | None = None,
        max_throughput: int | None = None,
        default_ttl: int | None = None,
    ) -> "CosmosDbContainer":
        return CosmosDbContainer(
            self,
            id,
            partition_key_path=partition_key_path,
            container_name=container_name,
            throughput=throughput,
            max_throughput=max_throughput,
            default_ttl=default_ttl,
        )

    def to_arm_template(self) -> Dict[str, Any]:
        properties = {
            "resource": {"id": self.name},
            "options": _throughput_options(self.throughput, self.max_throughput),
        }
        return self._build_arm(properties)


class CosmosDbContainer(GrantableResource):
    RESOURCE_TYPE = "Microsoft.DocumentDB/databaseAccounts/sqlDatabases/containers"
    API_VERSION = "2024-08-15"

    def __init__(
        self,
        database: CosmosDbSqlDatabase,
        id: str,
        *,
        partition_key_path: str,
        container_name: str | None = None,
        throughput: int | None = None,
        max_throughput: int | None = None,
        default_ttl: int | None = None,
        unique_key_paths: Sequence[Sequence[str]] | None = None,
    ) -> None:
        if not partition_key_path or not partition_key_path.startswith("/"):
            raise ValidationError(
                "Partition key path must start with /",
                details=f"Got '{partition_key_path}'",
                suggestion=f"Use '/{(partition_key_path or 'id').lstrip('/')}'",
                property_path="partition_key_path",
            )
        name = container_name or id
        validate_pattern(name, "container_name", CHILD_NAME_PATTERN, details="Start with a letter or digit; use letters, digits, '_' or '-'")
        _validate_throughput(database.account, throughput, max_throughput)
        if default_ttl is not None and (default_ttl == 0 or default_ttl < -1):
            raise ValidationError(
                "default_ttl must be -1 or a positive number of seconds",
                details=f"Got {default_ttl}",
                suggestion="Use -1 to enable TTL without a default, or omit it",
                property_path="default_ttl",
            )
        super().__init__(database, id, name=name, parent=database)
        self.database = database
        self.partition_key_path = partition_key_path
        self.throughput = throughput
        self.max_throughput = max_throughput
        self.default_ttl = default_ttl
        self.unique_key_paths: List[List[str]] = [list(paths) for paths in unique_key_paths or []]

    def grant_read_data(self, grantee: Grantable) -> GrantResult:
        return self.grant(
            grantee,
            role_definition_id(WellKnownRoleIds.COSMOS_DB_DATA_READER),
            description=f"Read data in container {self.name}",
        )

    def grant_write_data(self, grantee: Grantable) -> GrantResult:
        return self.grant(
            grantee,
            role_definition_id(WellKnownRoleIds.COSMOS_DB_DATA_CONTRIBUTOR),
            description=f"Read and write data in container {self.name}",
        )

    def to_arm_template(self) -> Dict[str, Any]:
        resource: Dict[str, Any] = {
            "id": self.name,
            "partitionKey": {"paths": [self.partition_key_path], "kind": "Hash"},
            "defaultTtl": self.default_ttl,
        }
        if self.unique_key_paths:
            resource["uniqueKeyPolicy"] = {"uniqueKeys": [{"paths": paths} for paths in self.unique_key_paths]}
        properties = {
            "resource": resource,
            "options": _throughput_options(self.throughput, self.max_throughput),
        }
        return self._build_arm(properties)


# ------------------------------------------------------------------
def _validate_account(
    name: str,
    locations: List[CosmosDbLocation],
    consistency_level: str,
    kind: str,
    public_network_access: str,
) -> None:
    validate_length(name, "database_account_name", 3, 44)
    validate_pattern(
        name,
        "database_account_name",
        ACCOUNT_NAME_PATTERN,
        details="Lowercase letters, digits and hyphens only; must start and end with a letter or digit",
    )
    seen_priorities: set[int] = set()
    for index, location in enumerate(locations):
        if not location.location_name:
            raise ValidationError(
                "Each Cosmos DB location needs a location_name",
                property_path=f"locations[{index}].location_name",
            )
        if location.failover_priority < 0:
            raise ValidationError(
                "Failover priority cannot be negative",
                details=f"Got {location.failover_priority}",
                property_path=f"locations[{index}].failover_priority",
            )
        if location.failover_priority in seen_priorities:
            raise ValidationError(
                f"Duplicate failover priority {location.failover_priority}",
                suggestion="Give every location a unique failover priority starting at 0",
                property_path=f"locations[{index}].failover_priority",
            )
        seen_priorities.add(location.failover_priority)
    validate_choice(consistency_level, "consistency_level", CONSISTENCY_LEVELS)
    validate_choice(kind, "kind", ACCOUNT_KINDS)
    validate_choice(public_network_access, "public_network_access", PUBLIC_NETWORK_ACCESS)


def _validate_throughput(account: CosmosDbAccount, throughput: int | None, max_throughput: int | None) -> None:
    if throughput is not None and max_throughput is not None:
        raise ValidationError(
            "Specify either throughput or max_throughput, not both",
            details="throughput selects manual provisioning, max_throughput selects autoscale",
            property_path="throughput",
        )
    if account.enable_serverless and (throughput is not None or max_throughput is not None):
        raise ValidationError(
            "Serverless accounts do not support provisioned throughput",
            suggestion="Remove throughput settings or disable serverless",
            property_path="throughput",
        )
    if throughput is not None:
        validate_manual_throughput(throughput)
    if max_throughput is not None:
        validate_autoscale_throughput(max_throughput)


def _throughput_options(throughput: int | None, max_throughput: int | None) -> Dict[str, Any] | None:
    if max_throughput is not None:
        return {"autoscaleSettings": {"maxThroughput": max_throughput}}
    if throughput is not None:
        return {"throughput": throughput}
    return None


__all__ = ["CosmosDbAccount", "CosmosDbContainer", "CosmosDbLocation", "CosmosDbSqlDatabase"]
