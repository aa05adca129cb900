"""Zone and certificate policy resolution.

Resolves a zone tag to its descriptor and chases the zone's two policy ids
to build the merged issuance policy. Policy resolution is all-or-nothing:
if either fragment cannot be fetched, no policy is returned.
"""

from __future__ import annotations

from typing import Optional

from cert_connector.domain.entities.account import Session, require_session
from cert_connector.domain.entities.policy import Policy, PolicyFragment, merge_policy_fragments
from cert_connector.domain.entities.zone import Zone, ZoneConfiguration
from cert_connector.domain.errors import MalformedResponse, PolicyFetchFailed, UnexpectedStatus
from cert_connector.domain.services.response_parsers import parse_policy_fragment, parse_zone
from cert_connector.domain.value_objects.identifiers import PolicyId
from cert_connector.domain.value_objects.resources import Resource
from cert_connector.infrastructure.logging import get_logger


class PolicyResolver:
    """Resolve zones and their merged policies."""

    def __init__(self) -> None:
        self._logger = get_logger(__name__, component="policy_resolver")

    def resolve_zone(self, session: Optional[Session], zone_tag: str) -> Zone:
        """Look up a zone by tag.

        Raises:
            NotAuthenticated: Without a session.
            ZoneNotFound: If the service does not answer 200.
        """
        session = require_session(session, "read the zone configuration")
        response = session.transport.request("GET", Resource.ZONE_BY_TAG.path(zone_tag))
        zone = parse_zone(response, zone_tag)
        self._logger.debug("zone_resolved", zone_tag=zone_tag, zone_id=zone.zone_id)
        return zone

    def fetch_policy(self, session: Optional[Session], zone: Zone) -> Policy:
        """Fetch and merge the identity and use policies of ``zone``.

        Raises:
            PolicyFetchFailed: If a policy id is empty or its fetch fails.
        """
        session = require_session(session, "read the zone configuration")
        fragments: list[Optional[PolicyFragment]] = []
        for policy_id in zone.policy_ids:
            fragments.append(self._fetch_fragment(session, policy_id))
        policy = merge_policy_fragments(fragments)
        self._logger.debug(
            "policy_resolved",
            zone_tag=zone.tag,
            policy_ids=list(policy.policy_ids),
        )
        return policy

    def resolve_policy(self, session: Optional[Session], zone_tag: str) -> tuple[Zone, Policy]:
        """Resolve a zone tag to its descriptor and merged policy."""
        zone = self.resolve_zone(session, zone_tag)
        return zone, self.fetch_policy(session, zone)

    def read_zone_configuration(self, session: Optional[Session], zone_tag: str) -> ZoneConfiguration:
        """Zone, merged policy and the organization of the session's company."""
        zone, policy = self.resolve_policy(session, zone_tag)
        organization = session.organization if session is not None else ""
        return ZoneConfiguration(zone=zone, policy=policy, organization=organization)

    def _fetch_fragment(self, session: Session, policy_id: PolicyId) -> Optional[PolicyFragment]:
        if not policy_id:
            raise PolicyFetchFailed(policy_id, "zone does not reference a policy")
        response = session.transport.request("GET", Resource.POLICY_BY_ID.path(policy_id))
        try:
            return parse_policy_fragment(response)
        except (UnexpectedStatus, MalformedResponse) as e:
            self._logger.warning("policy_fetch_failed", policy_id=policy_id, error=str(e))
            raise PolicyFetchFailed(policy_id, str(e)) from e
