"""Unit tests for certificate service response parsers."""

import pytest

from cert_connector.domain.entities.certificate import RequestState
from cert_connector.domain.entities.policy import AllowedKeyType, IdentityPolicy, UsePolicy
from cert_connector.domain.errors import MalformedResponse, UnexpectedStatus, ZoneNotFound
from cert_connector.domain.services.response_parsers import (
    parse_managed_certificate,
    parse_policy_fragment,
    parse_request_acknowledgment,
    parse_request_status,
    parse_response_errors,
    parse_search_result,
    parse_user_details,
    parse_zone,
)
from cert_connector.ports.outbound.transport_port import TransportResponse

from service_fakes import (
    acknowledgment_payload,
    identity_policy_payload,
    json_response,
    managed_certificate_payload,
    search_payload,
    status_payload,
    use_policy_payload,
    user_details_payload,
    zone_payload,
)

ERRORS_BODY = {"errors": [{"code": 10051, "message": "Unable to find zone"}]}


@pytest.mark.unit
class TestErrorParsing:
    """Test server error lists."""

    def test_parse_error_list(self):
        """Error entries keep their code and message."""
        errors = parse_response_errors(json_response(400, ERRORS_BODY).body)
        assert len(errors) == 1
        assert errors[0].code == 10051
        assert "Unable to find zone" in str(errors[0])

    def test_unparseable_error_body(self):
        """Bodies that are not an error list give no errors."""
        assert parse_response_errors(b"<html>bad gateway</html>") == []
        assert parse_response_errors(b"") == []

    def test_unexpected_status_carries_errors(self):
        """Status errors include the server's error messages."""
        with pytest.raises(UnexpectedStatus) as exc_info:
            parse_user_details(json_response(401, ERRORS_BODY, "Unauthorized"))
        assert exc_info.value.status_code == 401
        assert exc_info.value.errors[0].code == 10051
        assert "Unauthorized" in str(exc_info.value)


@pytest.mark.unit
class TestAccountParsing:
    """Test user account parsing."""

    def test_parse_user_details(self):
        """User and company are parsed from useraccounts."""
        details = parse_user_details(json_response(200, user_details_payload("ACME")))
        assert details.user.username == "automation@example.com"
        assert details.user.company_id == "c-1"
        assert details.company.name == "ACME"

    def test_registration_expects_created(self):
        """Registration answers 201, anything else is unexpected."""
        details = parse_user_details(json_response(201, user_details_payload()), expected_status=201)
        assert details.company is not None
        with pytest.raises(UnexpectedStatus):
            parse_user_details(json_response(200, user_details_payload()), expected_status=201)


@pytest.mark.unit
class TestZoneAndPolicyParsing:
    """Test zone and policy parsing."""

    def test_parse_zone(self):
        """Zone ids and policy ids are parsed."""
        zone = parse_zone(json_response(200, zone_payload()), "Z1")
        assert zone.zone_id == "zone-1"
        assert zone.tag == "Z1"
        assert zone.policy_ids == ("pol-id", "pol-use")

    @pytest.mark.parametrize("status", [400, 404, 500])
    def test_zone_not_found_on_any_error_status(self, status):
        """Any non-200 zone lookup means the zone is not found."""
        with pytest.raises(ZoneNotFound) as exc_info:
            parse_zone(json_response(status, ERRORS_BODY), "missing")
        assert exc_info.value.zone_tag == "missing"
        assert exc_info.value.status_code == status

    def test_parse_identity_policy(self):
        """Identity fragments keep their regexes; nulls become empty."""
        fragment = parse_policy_fragment(json_response(200, identity_policy_payload()))
        assert isinstance(fragment, IdentityPolicy)
        assert fragment.subject_cn_regexes == (r".*\.example\.com",)
        assert fragment.subject_c_regexes == ("US",)
        assert fragment.subject_ou_regexes == ()

    def test_parse_use_policy(self):
        """Use fragments keep key types and key reuse."""
        fragment = parse_policy_fragment(json_response(200, use_policy_payload(key_reuse=True)))
        assert isinstance(fragment, UsePolicy)
        assert fragment.key_reuse is True
        assert AllowedKeyType("RSA", key_lengths=(2048, 4096)) in fragment.key_types
        assert AllowedKeyType("EC", key_curves=("P256", "P384")) in fragment.key_types

    def test_unknown_policy_type(self):
        """Unknown policy types parse to nothing."""
        payload = {"id": "p-x", "certificatePolicyType": "CERTIFICATE_FUTURE"}
        assert parse_policy_fragment(json_response(200, payload)) is None

    def test_policy_without_type_is_malformed(self):
        """A policy body without a type does not parse."""
        with pytest.raises(MalformedResponse):
            parse_policy_fragment(json_response(200, {"id": "p-x"}))

    def test_invalid_policy_regex_is_malformed(self):
        """A policy regex that does not compile is rejected while parsing."""
        payload = identity_policy_payload(cn=("*.example.com",))
        with pytest.raises(MalformedResponse) as exc_info:
            parse_policy_fragment(json_response(200, payload))
        assert "*.example.com" in exc_info.value.reason


@pytest.mark.unit
class TestRequestParsing:
    """Test certificate request parsing."""

    def test_parse_acknowledgment(self):
        """All returned request ids are kept, first is the pickup id."""
        ack = parse_request_acknowledgment(json_response(201, acknowledgment_payload("r1", "r2")))
        assert ack.request_ids == ("r1", "r2")
        assert ack.pickup_id == "r1"

    def test_acknowledgment_requires_created(self):
        """Submission must answer 201."""
        with pytest.raises(UnexpectedStatus):
            parse_request_acknowledgment(json_response(200, acknowledgment_payload("r1")))

    def test_acknowledgment_without_ids_is_malformed(self):
        """An empty request list is not an acknowledgment."""
        with pytest.raises(MalformedResponse):
            parse_request_acknowledgment(json_response(201, {"certificateRequests": []}))

    def test_parse_status(self):
        """Status, zone and managed certificate are parsed."""
        status = parse_request_status(json_response(200, status_payload("r1", "PENDING")))
        assert status.status is RequestState.PENDING
        assert status.zone_id == "zone-1"
        assert status.managed_certificate_id == "mc-1"

    def test_status_with_null_ids(self):
        """Null ids parse to None."""
        payload = status_payload("r1", "ISSUED", zone_id=None, managed_certificate_id=None)
        status = parse_request_status(json_response(200, payload))
        assert status.zone_id is None
        assert status.managed_certificate_id is None

    def test_unknown_status_is_malformed(self):
        """Statuses outside the lifecycle are rejected."""
        with pytest.raises(MalformedResponse):
            parse_request_status(json_response(200, status_payload("r1", "ON_HOLD")))

    def test_non_json_body_is_malformed(self):
        """A 200 with a non-JSON body is malformed."""
        with pytest.raises(MalformedResponse):
            parse_request_status(TransportResponse(200, "OK", b"<html></html>"))

    def test_parse_managed_certificate(self):
        """Managed certificates expose their latest request id."""
        managed = parse_managed_certificate(json_response(200, managed_certificate_payload("mc-1", "r2")))
        assert managed.managed_certificate_id == "mc-1"
        assert managed.latest_request_id == "r2"

    def test_parse_search_result(self):
        """Search hits map certificates to requests."""
        result = parse_search_result(json_response(200, search_payload(("c1", "r1"), ("c2", "r1"))))
        assert len(result.hits) == 2
        assert result.request_ids() == ["r1"]

    def test_empty_search_result(self):
        """A search without certificates has no hits."""
        assert parse_search_result(json_response(200, {"count": 0, "certificates": None})).hits == ()
