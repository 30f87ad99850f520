"""Log Analytics workspace construct."""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping

from core.construct import Construct
from core.errors import ValidationError
from core.naming import generate_fallback_name
from core.resource import Resource, resolve_location, unwrap_expression
from core.validation import validate_choice, validate_length, validate_pattern

WORKSPACE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9-]*[A-Za-z0-9]$")
WORKSPACE_SKUS = ("Free", "Standalone", "PerNode", "PerGB2018", "CapacityReservation", "LACluster")
MIN_RETENTION_DAYS = 30
MAX_RETENTION_DAYS = 730


class LogAnalyticsWorkspace(Resource):
    RESOURCE_TYPE = "Microsoft.OperationalInsights/workspaces"
    API_VERSION = "2023-09-01"

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        workspace_name: str | None = None,
        location: str | None = None,
        sku: str = "PerGB2018",
        retention_in_days: int = MIN_RETENTION_DAYS,
        daily_quota_gb: float | None = None,
        public_network_access_for_ingestion: str | None = None,
        public_network_access_for_query: str | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> None:
        name = workspace_name or generate_fallback_name(id, "log", max_length=63)
        location = resolve_location(scope, location, resource="Log Analytics workspace")
        validate_length(name, "workspace_name", 4, 63)
        validate_pattern(name, "workspace_name", WORKSPACE_NAME_PATTERN, details="Letters, digits and hyphens; start and end with a letter or digit")
        validate_choice(sku, "sku", WORKSPACE_SKUS)
        if not MIN_RETENTION_DAYS <= retention_in_days <= MAX_RETENTION_DAYS:
            raise ValidationError(
                f"retention_in_days must be between {MIN_RETENTION_DAYS} and {MAX_RETENTION_DAYS}",
                details=f"Got {retention_in_days}",
                property_path="retention_in_days",
            )
        if daily_quota_gb is not None and daily_quota_gb <= 0 and daily_quota_gb != -1:
            raise ValidationError(
                "daily_quota_gb must be positive, or -1 for no cap",
                details=f"Got {daily_quota_gb}",
                property_path="daily_quota_gb",
            )
        super().__init__(scope, id, name=name, location=location, tags=tags)
        self.sku = sku
        self.retention_in_days = retention_in_days
        self.daily_quota_gb = daily_quota_gb
        self.public_network_access_for_ingestion = public_network_access_for_ingestion
        self.public_network_access_for_query = public_network_access_for_query

    @property
    def customer_id(self) -> str:
        """Workspace id used by agents, resolved at deployment time."""
        return f"[reference({unwrap_expression(self.resource_id)}).customerId]"

    def to_arm_template(self) -> Dict[str, Any]:
        properties = {
            "sku": {"name": self.sku},
            "retentionInDays": self.retention_in_days,
            "workspaceCapping": {"dailyQuotaGb": self.daily_quota_gb} if self.daily_quota_gb is not None else None,
            "publicNetworkAccessForIngestion": self.public_network_access_for_ingestion,
            "publicNetworkAccessForQuery": self.public_network_access_for_query,
        }
        return self._build_arm(properties)


__all__ = ["LogAnalyticsWorkspace"]
