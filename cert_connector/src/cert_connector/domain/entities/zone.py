"""Issuance zone entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from cert_connector.domain.entities.policy import Policy
from cert_connector.domain.value_objects.identifiers import CompanyId, PolicyId, ZoneId, ZoneTag


@dataclass(frozen=True)
class Zone:
    """Named issuance configuration scope."""
    zone_id: ZoneId
    tag: ZoneTag
    identity_policy_id: PolicyId
    use_policy_id: PolicyId
    company_id: Optional[CompanyId] = None
    zone_type: str = ""

    @property
    def policy_ids(self) -> tuple[PolicyId, PolicyId]:
        return (self.identity_policy_id, self.use_policy_id)


@dataclass(frozen=True)
class ZoneConfiguration:
    """Everything needed to build a request that the zone will accept."""
    zone: Zone
    policy: Policy
    organization: str = ""
