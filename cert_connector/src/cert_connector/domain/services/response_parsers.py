"""Parsers for certificate service responses.

Pure functions: each takes a ``TransportResponse``, checks the status code
the endpoint answers with on success, and converts the JSON body into a
domain entity. Wire shapes are described by private pydantic models so
that field aliases and null handling live in one place.

Raises (all parsers):
    UnexpectedStatus: Status code other than the expected one, with the
        server's error list attached.
    MalformedResponse: Body is not the JSON shape the endpoint promises.
"""

from __future__ import annotations

import re
from typing import Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from cert_connector.domain.entities.account import Company, User, UserDetails
from cert_connector.domain.entities.certificate import (
    CertificateSearchHit,
    ManagedCertificate,
    RequestAcknowledgment,
    RequestState,
    RequestStatus,
    SearchResult,
)
from cert_connector.domain.entities.policy import (
    POLICY_TYPE_IDENTITY,
    POLICY_TYPE_USE,
    AllowedKeyType,
    IdentityPolicy,
    PolicyFragment,
    UsePolicy,
)
from cert_connector.domain.entities.zone import Zone
from cert_connector.domain.errors import (
    MalformedResponse,
    ResponseError,
    UnexpectedStatus,
    ZoneNotFound,
)
from cert_connector.domain.value_objects.identifiers import (
    CertificateId,
    CompanyId,
    ManagedCertificateId,
    PolicyId,
    RequestId,
    UserId,
    ZoneId,
    ZoneTag,
)
from cert_connector.ports.outbound.transport_port import TransportResponse

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_ACCEPTED = 202
HTTP_CONFLICT = 409


# =============================================================================
# Wire models
# =============================================================================


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class _ErrorEntry(_Wire):
    code: int = 0
    message: str = ""


class _ErrorList(_Wire):
    errors: Optional[list[_ErrorEntry]] = None


class _UserBody(_Wire):
    id: str
    username: str = ""
    company_id: Optional[str] = Field(default=None, alias="companyId")
    email_address: str = Field(default="", alias="emailAddress")
    user_type: str = Field(default="", alias="userType")
    user_account_type: str = Field(default="", alias="userAccountType")
    user_status: str = Field(default="", alias="userStatus")


class _CompanyBody(_Wire):
    id: str
    name: str = ""
    company_type: str = Field(default="", alias="companyType")
    active: bool = True


class _UserDetailsBody(_Wire):
    user: Optional[_UserBody] = None
    company: Optional[_CompanyBody] = None


class _ZoneBody(_Wire):
    id: str
    tag: str = ""
    company_id: Optional[str] = Field(default=None, alias="companyId")
    zone_type: str = Field(default="", alias="zoneType")
    identity_policy_id: str = Field(default="", alias="defaultCertificateIdentityPolicyId")
    use_policy_id: str = Field(default="", alias="defaultCertificateUsePolicyId")


class _KeyTypeBody(_Wire):
    key_type: str = Field(alias="keyType")
    key_lengths: Optional[list[int]] = Field(default=None, alias="keyLengths")
    key_curves: Optional[list[str]] = Field(default=None, alias="keyCurves")


class _PolicyBody(_Wire):
    id: str
    policy_type: str = Field(alias="certificatePolicyType")
    name: str = ""
    subject_cn_regexes: Optional[list[str]] = Field(default=None, alias="subjectCNRegexes")
    subject_o_regexes: Optional[list[str]] = Field(default=None, alias="subjectORegexes")
    subject_ou_regexes: Optional[list[str]] = Field(default=None, alias="subjectOURegexes")
    subject_st_regexes: Optional[list[str]] = Field(default=None, alias="subjectSTRegexes")
    subject_l_regexes: Optional[list[str]] = Field(default=None, alias="subjectLRegexes")
    subject_c_regexes: Optional[list[str]] = Field(default=None, alias="subjectCValues")
    san_regexes: Optional[list[str]] = Field(default=None, alias="sanRegexes")
    key_types: Optional[list[_KeyTypeBody]] = Field(default=None, alias="keyTypes")
    key_reuse: bool = Field(default=False, alias="keyReuse")

    @field_validator(
        "subject_cn_regexes", "subject_o_regexes", "subject_ou_regexes", "subject_st_regexes",
        "subject_l_regexes", "subject_c_regexes", "san_regexes",
    )
    @classmethod
    def regexes_compile(cls, patterns: Optional[list[str]]) -> Optional[list[str]]:
        for pattern in patterns or ():
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid regex {pattern!r}: {e}") from e
        return patterns


class _RequestRef(_Wire):
    id: str


class _CertificateRequestsBody(_Wire):
    certificate_requests: Optional[list[_RequestRef]] = Field(
        default=None, alias="certificateRequests"
    )


class _StatusBody(_Wire):
    id: str
    status: str
    zone_id: Optional[str] = Field(default=None, alias="zoneId")
    managed_certificate_id: Optional[str] = Field(default=None, alias="managedCertificateId")
    error_information: Optional[dict] = Field(default=None, alias="errorInformation")


class _ManagedCertificateBody(_Wire):
    id: str
    latest_request_id: str = Field(default="", alias="latestCertificateRequestId")
    certificate_name: str = Field(default="", alias="certificateName")
    company_id: str = Field(default="", alias="companyId")


class _SearchHitBody(_Wire):
    id: str
    certificate_request_id: str = Field(default="", alias="certificateRequestId")
    managed_certificate_id: Optional[str] = Field(default=None, alias="managedCertificateId")


class _SearchBody(_Wire):
    count: int = 0
    certificates: Optional[list[_SearchHitBody]] = None


M = TypeVar("M", bound=BaseModel)


def _decode(model: type[M], body: bytes, what: str) -> M:
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        raise MalformedResponse(what, str(e)) from e


def _strings(values: Optional[list[str]]) -> tuple[str, ...]:
    return tuple(values or ())


# =============================================================================
# Parsers
# =============================================================================


def parse_response_errors(body: bytes) -> list[ResponseError]:
    """Parse the server's error list; unparseable bodies yield no errors."""
    if not body:
        return []
    try:
        parsed = _ErrorList.model_validate_json(body)
    except ValidationError:
        return []
    return [ResponseError(code=e.code, message=e.message) for e in parsed.errors or ()]


def unexpected_status(operation: str, response: TransportResponse) -> UnexpectedStatus:
    """Build the error for a response with an unexpected status code."""
    return UnexpectedStatus(
        operation,
        response.status_code,
        response.status_text,
        parse_response_errors(response.body),
    )


def parse_user_details(response: TransportResponse, expected_status: int = HTTP_OK) -> UserDetails:
    """Parse ``useraccounts`` (200 on GET, 201 on registration)."""
    if response.status_code != expected_status:
        raise unexpected_status("user account lookup", response)
    body = _decode(_UserDetailsBody, response.body, "user details")
    user = None
    if body.user is not None:
        user = User(
            user_id=UserId(body.user.id),
            username=body.user.username,
            company_id=CompanyId(body.user.company_id) if body.user.company_id else None,
            email_address=body.user.email_address,
            user_type=body.user.user_type,
            user_account_type=body.user.user_account_type,
            user_status=body.user.user_status,
        )
    company = None
    if body.company is not None:
        company = Company(
            company_id=CompanyId(body.company.id),
            name=body.company.name,
            company_type=body.company.company_type,
            active=body.company.active,
        )
    return UserDetails(user=user, company=company)


def parse_zone(response: TransportResponse, zone_tag: str) -> Zone:
    """Parse ``zones/tag/{tag}``; any non-200 means the zone does not exist."""
    if response.status_code != HTTP_OK:
        raise ZoneNotFound(zone_tag, response.status_code, parse_response_errors(response.body))
    body = _decode(_ZoneBody, response.body, "zone")
    return Zone(
        zone_id=ZoneId(body.id),
        tag=ZoneTag(body.tag or zone_tag),
        identity_policy_id=PolicyId(body.identity_policy_id),
        use_policy_id=PolicyId(body.use_policy_id),
        company_id=CompanyId(body.company_id) if body.company_id else None,
        zone_type=body.zone_type,
    )


def parse_policy_fragment(response: TransportResponse) -> Optional[PolicyFragment]:
    """Parse ``certificatepolicies/{id}``.

    Returns:
        The fragment, or None for a policy type this client does not know.
    """
    if response.status_code != HTTP_OK:
        raise unexpected_status("certificate policy lookup", response)
    body = _decode(_PolicyBody, response.body, "certificate policy")
    if body.policy_type == POLICY_TYPE_IDENTITY:
        return IdentityPolicy(
            policy_id=PolicyId(body.id),
            subject_cn_regexes=_strings(body.subject_cn_regexes),
            subject_o_regexes=_strings(body.subject_o_regexes),
            subject_ou_regexes=_strings(body.subject_ou_regexes),
            subject_st_regexes=_strings(body.subject_st_regexes),
            subject_l_regexes=_strings(body.subject_l_regexes),
            subject_c_regexes=_strings(body.subject_c_regexes),
            san_regexes=_strings(body.san_regexes),
            name=body.name,
        )
    if body.policy_type == POLICY_TYPE_USE:
        key_types = tuple(
            AllowedKeyType(
                key_type=k.key_type,
                key_lengths=tuple(k.key_lengths or ()),
                key_curves=_strings(k.key_curves),
            )
            for k in body.key_types or ()
        )
        return UsePolicy(
            policy_id=PolicyId(body.id),
            key_types=key_types,
            key_reuse=body.key_reuse,
            name=body.name,
        )
    return None


def parse_request_acknowledgment(response: TransportResponse) -> RequestAcknowledgment:
    """Parse ``POST certificaterequests`` (201 Created)."""
    if response.status_code != HTTP_CREATED:
        raise unexpected_status("certificate request", response)
    body = _decode(_CertificateRequestsBody, response.body, "certificate request response")
    if not body.certificate_requests:
        raise MalformedResponse("certificate request response", "no certificate request ids")
    return RequestAcknowledgment(
        request_ids=tuple(RequestId(ref.id) for ref in body.certificate_requests)
    )


def parse_request_status(response: TransportResponse) -> RequestStatus:
    """Parse ``certificaterequests/{id}``."""
    if response.status_code != HTTP_OK:
        raise unexpected_status("certificate request status", response)
    body = _decode(_StatusBody, response.body, "certificate request status")
    try:
        state = RequestState(body.status)
    except ValueError as e:
        raise MalformedResponse("certificate request status", f"unknown status {body.status!r}") from e
    return RequestStatus(
        request_id=RequestId(body.id),
        status=state,
        zone_id=ZoneId(body.zone_id) if body.zone_id else None,
        managed_certificate_id=(
            ManagedCertificateId(body.managed_certificate_id)
            if body.managed_certificate_id
            else None
        ),
        error_information=body.error_information or {},
    )


def parse_managed_certificate(response: TransportResponse) -> ManagedCertificate:
    """Parse ``managedcertificates/{id}``."""
    if response.status_code != HTTP_OK:
        raise unexpected_status("managed certificate lookup", response)
    body = _decode(_ManagedCertificateBody, response.body, "managed certificate")
    return ManagedCertificate(
        managed_certificate_id=ManagedCertificateId(body.id),
        latest_request_id=RequestId(body.latest_request_id),
        certificate_name=body.certificate_name,
        company_id=body.company_id,
    )


def parse_search_result(response: TransportResponse) -> SearchResult:
    """Parse ``POST certificatesearch``."""
    if response.status_code != HTTP_OK:
        raise unexpected_status("certificate search", response)
    body = _decode(_SearchBody, response.body, "certificate search results")
    return SearchResult(
        hits=tuple(
            CertificateSearchHit(
                certificate_id=CertificateId(hit.id),
                request_id=RequestId(hit.certificate_request_id),
                managed_certificate_id=(
                    ManagedCertificateId(hit.managed_certificate_id)
                    if hit.managed_certificate_id
                    else None
                ),
            )
            for hit in body.certificates or ()
        )
    )
