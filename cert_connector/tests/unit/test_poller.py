"""Unit tests for the issuance wait state machine."""

import pytest

from cert_connector.domain.entities.certificate import RequestState, RequestStatus
from cert_connector.domain.errors import CertificatePending, IssuanceFailed, RetrieveTimeout
from cert_connector.domain.services.retrieval_poller import PollDecision, RetrievalPoller

from service_fakes import FakeClock


def _status(state: RequestState) -> RequestStatus:
    return RequestStatus(request_id="r1", status=state)


@pytest.mark.unit
class TestRetrievalPoller:
    """Test poll decisions."""

    def test_issued_retrieves(self):
        """An issued request is retrieved on the first tick."""
        poller = RetrievalPoller("r1", 0, clock=FakeClock())
        assert poller.observe(_status(RequestState.ISSUED)) is PollDecision.RETRIEVE
        assert poller.ticks == 1

    def test_failed_is_terminal(self):
        """A failed request stops the wait regardless of timeout."""
        poller = RetrievalPoller("r1", 60, clock=FakeClock())
        with pytest.raises(IssuanceFailed) as exc_info:
            poller.observe(_status(RequestState.FAILED))
        assert exc_info.value.request_id == "r1"

    @pytest.mark.parametrize("state", [RequestState.REQUESTED, RequestState.PENDING])
    def test_zero_timeout_fails_fast(self, state):
        """Without a timeout an in-progress request is reported pending."""
        poller = RetrievalPoller("r1", 0, clock=FakeClock())
        with pytest.raises(CertificatePending) as exc_info:
            poller.observe(_status(state))
        assert exc_info.value.status == state.value

    def test_waits_within_timeout(self):
        """In-progress requests wait until the timeout passes."""
        clock = FakeClock()
        poller = RetrievalPoller("r1", 10, clock=clock)
        clock.advance(4)
        assert poller.observe(_status(RequestState.PENDING)) is PollDecision.WAIT
        clock.advance(6)
        assert poller.observe(_status(RequestState.PENDING)) is PollDecision.WAIT
        clock.advance(0.5)
        with pytest.raises(RetrieveTimeout) as exc_info:
            poller.observe(_status(RequestState.PENDING))
        assert exc_info.value.timeout == 10
        assert poller.ticks == 3

    def test_issued_after_timeout_still_retrieves(self):
        """Issuance observed late is not turned into a timeout."""
        clock = FakeClock()
        poller = RetrievalPoller("r1", 1, clock=clock)
        clock.advance(5)
        assert poller.observe(_status(RequestState.ISSUED)) is PollDecision.RETRIEVE

    def test_negative_timeout_rejected(self):
        """Negative timeouts are invalid."""
        with pytest.raises(ValueError):
            RetrievalPoller("r1", -1)
