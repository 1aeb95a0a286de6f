"""
Managed service configuration.

Contains the static service targets the orchestrator is allowed to restart:
- ServiceTarget: one remote service and the credential scoped to its account
- WatchTarget: a ServiceTarget paired with its own health-check URL
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

__all__ = ["ServiceTarget", "WatchTarget", "parse_services_json"]

logger = logging.getLogger(__name__)


class ServiceTarget(BaseModel):
    """A remote service and the credential authorized to act on it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    service_id: str = Field(
        validation_alias=AliasChoices("service_id", "serviceId"),
        description="Remote service identifier",
    )
    credential: str = Field(
        validation_alias=AliasChoices("credential", "apiKey", "api_key"),
        repr=False,
        description="API key for the account that owns the service",
    )
    display_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("display_name", "displayName", "name"),
        description="Human-readable label used in logs and alerts",
    )

    @field_validator("service_id", "credential")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty identifiers and credentials."""
        v = v.strip()
        if not v:
            raise ValueError("Value must not be empty")
        return v

    @property
    def label(self) -> str:
        return self.display_name or self.service_id


class WatchTarget(ServiceTarget):
    """A service target monitored by the watchdog through its own endpoint."""

    health_url: str = Field(
        validation_alias=AliasChoices("health_url", "healthUrl", "healthCheckUrl"),
        description="URL probed with a plain GET on each watchdog tick",
    )

    def as_service(self) -> ServiceTarget:
        return ServiceTarget(
            service_id=self.service_id,
            credential=self.credential,
            display_name=self.display_name,
        )


def parse_services_json(raw: str) -> list[ServiceTarget]:
    """
    Parse a JSON array of service entries.

    A malformed list is a configuration error that must not stop the
    process: it is logged and an empty list is returned.

    Args:
        raw: JSON text, e.g. ``[{"apiKey": "...", "serviceId": "srv-1"}]``

    Returns:
        Parsed service targets, or an empty list on any error
    """
    try:
        data: Any = json.loads(raw) if raw.strip() else []
        if not isinstance(data, list):
            raise ValueError("services JSON must be an array")
        return [ServiceTarget.model_validate(entry) for entry in data]
    except (ValueError, ValidationError) as e:
        logger.error(f"Failed to parse services JSON: {e}")
        return []
