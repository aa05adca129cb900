"""Account and session entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from cert_connector.domain.errors import NotAuthenticated
from cert_connector.domain.value_objects.identifiers import CompanyId, UserId

if TYPE_CHECKING:
    from cert_connector.ports.outbound.transport_port import TransportPort


@dataclass(frozen=True)
class Credentials:
    """API key credentials."""
    api_key: str

    def __repr__(self) -> str:
        return "Credentials(api_key='***')"


@dataclass(frozen=True)
class User:
    user_id: UserId
    username: str
    company_id: Optional[CompanyId] = None
    email_address: str = ""
    user_type: str = ""
    user_account_type: str = ""
    user_status: str = ""


@dataclass(frozen=True)
class Company:
    company_id: CompanyId
    name: str
    company_type: str = ""
    active: bool = True


@dataclass(frozen=True)
class UserDetails:
    """Account the API key belongs to."""
    user: Optional[User] = None
    company: Optional[Company] = None


@dataclass(frozen=True)
class Session:
    """Authenticated context threaded into every operation.

    Built once by ``authenticate`` and never mutated. The transport is bound
    to the session's API key.
    """
    transport: TransportPort
    details: UserDetails

    @property
    def is_authenticated(self) -> bool:
        return self.details.company is not None

    @property
    def organization(self) -> str:
        return self.details.company.name if self.details.company else ""


def require_session(session: Optional[Session], action: str) -> Session:
    """Return ``session`` if it belongs to a resolved account.

    Raises:
        NotAuthenticated: If there is no session or it has no company.
    """
    if session is None or not session.is_authenticated:
        raise NotAuthenticated(action)
    return session
