"""Resource paths of the certificate service API.

Paths are templates with positional ``%s`` placeholders. Each template
declares its parameter count, checked when the table is built and again
on every substitution.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

DEFAULT_API_URL = "https://api.venafi.cloud/v1/"


@dataclass(frozen=True)
class ResourceTemplate:
    """Path template with a fixed number of placeholders."""
    pattern: str
    param_count: int

    def __post_init__(self) -> None:
        found = self.pattern.count("%s")
        if found != self.param_count:
            raise ValueError(
                f"template {self.pattern!r} has {found} placeholders, "
                f"declared {self.param_count}"
            )

    def format(self, *params: str) -> str:
        if len(params) != self.param_count:
            raise ValueError(
                f"template {self.pattern!r} takes {self.param_count} parameters, "
                f"got {len(params)}"
            )
        if not params:
            return self.pattern
        return self.pattern % tuple(quote(str(p), safe="") for p in params)


class Resource(Enum):
    """API resources used by the connector."""
    USER_ACCOUNTS = ResourceTemplate("useraccounts", 0)
    PING = ResourceTemplate("ping", 0)
    ZONE_BY_TAG = ResourceTemplate("zones/tag/%s", 1)
    POLICY_BY_ID = ResourceTemplate("certificatepolicies/%s", 1)
    CERTIFICATE_REQUESTS = ResourceTemplate("certificaterequests", 0)
    CERTIFICATE_STATUS = ResourceTemplate("certificaterequests/%s", 1)
    CERTIFICATE_RETRIEVE = ResourceTemplate(
        "certificaterequests/%s/certificate?chainOrder=%s&format=PEM", 2
    )
    CERTIFICATE_SEARCH = ResourceTemplate("certificatesearch", 0)
    MANAGED_CERTIFICATE_BY_ID = ResourceTemplate("managedcertificates/%s", 1)

    def path(self, *params: str) -> str:
        """Substitute ``params`` into the resource's template."""
        return self.value.format(*params)
