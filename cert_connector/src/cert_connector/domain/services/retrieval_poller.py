"""Decision logic for waiting on certificate issuance.

The poller is a state machine stepped once per observed request status. It
owns the protocol timeout but not the waiting itself: the driver decides
how to sleep and how to honour cancellation between ticks.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable

from cert_connector.domain.entities.certificate import RequestState, RequestStatus
from cert_connector.domain.errors import CertificatePending, IssuanceFailed, RetrieveTimeout
from cert_connector.domain.value_objects.identifiers import RequestId

logger = logging.getLogger(__name__)


class PollDecision(Enum):
    """What the driver should do after a tick."""
    RETRIEVE = "retrieve"  # Issued, fetch the certificate
    WAIT = "wait"          # Still in progress, wait and poll again


class RetrievalPoller:
    """Bounded wait for a request to reach a terminal status."""

    def __init__(
        self,
        request_id: RequestId,
        timeout: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize poller.

        Args:
            request_id: Request being waited for.
            timeout: Seconds to wait; 0 fails fast while the request is pending.
            clock: Monotonic clock in seconds.
        """
        if timeout < 0:
            raise ValueError("timeout must not be negative")
        self.request_id = request_id
        self.timeout = timeout
        self._clock = clock
        self._started_at = clock()
        self.ticks = 0

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started_at

    def observe(self, status: RequestStatus) -> PollDecision:
        """Advance the state machine with a fresh status.

        Returns:
            RETRIEVE once issued, WAIT while the timeout has not run out.

        Raises:
            IssuanceFailed: The server marked the request FAILED.
            CertificatePending: Still in progress and no timeout was given.
            RetrieveTimeout: Still in progress after the timeout.
        """
        self.ticks += 1
        if status.status.is_terminal:
            if status.status is RequestState.FAILED:
                raise IssuanceFailed(self.request_id, status)
            return PollDecision.RETRIEVE

        if self.timeout == 0:
            raise CertificatePending(self.request_id, status.status.value)
        if self.elapsed > self.timeout:
            raise RetrieveTimeout(self.request_id, self.timeout)

        logger.debug(
            f"Request {self.request_id} is {status.status.value} "
            f"(tick {self.ticks}, {self.elapsed:.1f}s elapsed)"
        )
        return PollDecision.WAIT
