"""
Response validation — runs before any payload is interpreted.

Two independent checks, in this order:
    1. chain id: the response must come from the expected chain.
    2. staleness: the response's ledger state must not be older than the
       newest state the client has already seen.

Both failures are terminal for the call that produced the response.
"""

from __future__ import annotations

import logging

from diem_client.errors import ChainIdMismatchError, StaleResponseError
from diem_client.ledger_state import LedgerStateTracker
from diem_client.models import ResponseEnvelope

log = logging.getLogger(__name__)


class ResponseValidator:
    """Validates envelopes against an expected chain id and a tracker.

    Args:
        chain_id: The chain id the client is configured for.
        tracker: The client's ledger state tracker. Updated on success.
    """

    def __init__(self, chain_id: int, tracker: LedgerStateTracker) -> None:
        self._chain_id = chain_id
        self._tracker = tracker

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def tracker(self) -> LedgerStateTracker:
        return self._tracker

    def validate(self, envelope: ResponseEnvelope) -> None:
        """Check ``envelope``; advance the tracker if it passes.

        Raises:
            ChainIdMismatchError: ``envelope.chain_id`` is set and differs.
            StaleResponseError: The envelope's ledger state is older than
                the tracker's.
        """
        if envelope.chain_id is not None and envelope.chain_id != self._chain_id:
            log.warning(
                "Rejecting response %s: chain id %d != %d",
                envelope.request_id, envelope.chain_id, self._chain_id,
            )
            raise ChainIdMismatchError(self._chain_id, envelope.chain_id)

        candidate = envelope.ledger_state()
        if candidate is None:
            return

        try:
            self._tracker.compare_and_update(candidate)
        except StaleResponseError as exc:
            log.warning(
                "Rejecting response %s: ledger %s older than %s",
                envelope.request_id, exc.candidate, exc.stored,
            )
            raise
