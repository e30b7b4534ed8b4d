"""
Confirmation poller — waits for a transaction's fate.

Both entry points (account + sequence, or a raw signed transaction)
resolve to a ``WaitTarget`` first and then share one polling loop:

    Polling ──► CONFIRMED | EXECUTION_FAILED | HASH_MISMATCH | EXPIRED | TIMED_OUT

Per iteration, while ``clock() < deadline``:
    1. get_account_transaction(address, sequence_number). Transport and
       JSON-RPC failures are transient: log, sleep, retry.
    2. Validate the envelope. Chain id mismatch and stale responses are
       raised immediately.
    3. Interpret the record.
        - CONFIRMED / EXECUTION_FAILED / HASH_MISMATCH → return.
        - NOT_FOUND → EXPIRED if the authority's clock has passed the
          expiration, otherwise sleep and retry.

The sleep is clipped to the time left before the deadline, so the loop
never oversleeps it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Awaitable, Callable, Protocol

from diem_client.bcs import decode_signed_transaction
from diem_client.errors import (
    ConfirmationTimeoutError,
    InvalidResponseError,
    RpcError,
    TransactionExecutionFailedError,
    TransactionExpiredError,
    TransactionHashMismatchError,
)
from diem_client.interpreter import IterationStatus, interpret, is_expired
from diem_client.ledger_state import LedgerStateTracker
from diem_client.models import ResponseEnvelope, TransactionRecord, VMStatus, parse_transaction
from diem_client.validator import ResponseValidator

log = logging.getLogger(__name__)

# Failures of a single status call that never end the loop.
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (RpcError, OSError, asyncio.TimeoutError)


class TransactionStatusSource(Protocol):
    """The one RPC the poller needs. ``JsonRpcClient`` implements it."""

    async def get_account_transaction(
        self,
        address: str,
        sequence_number: int,
        include_events: bool = False,
    ) -> ResponseEnvelope:
        ...


# =========================================================================
# Wait targets (identity resolution)
# =========================================================================


@dataclass(frozen=True)
class WaitTarget:
    """What to wait for.

    Attributes:
        address: Sender account address (hex).
        sequence_number: Sender sequence number of the transaction.
        expected_hash: Hash the committed transaction must have.
        expiration_time_secs: Declared expiration. None disables the
            expiration check.
    """

    address: str
    sequence_number: int
    expected_hash: str
    expiration_time_secs: int | None = None


def target_for_account(
    address: str,
    sequence_number: int,
    txn_hash: str,
    expiration_time_secs: int | None = None,
) -> WaitTarget:
    """Resolve an account + sequence number identity."""
    if sequence_number < 0:
        raise ValueError(f"sequence_number must be >= 0, got: {sequence_number}")
    return WaitTarget(
        address=address,
        sequence_number=sequence_number,
        expected_hash=txn_hash,
        expiration_time_secs=expiration_time_secs,
    )


def target_for_signed_transaction(
    signed_txn_hex: str,
    decoder: Callable[[str], Any] = decode_signed_transaction,
) -> WaitTarget:
    """Resolve a hex-encoded signed transaction.

    Raises:
        DecodeError: From ``decoder``. Raised before any RPC is made.
    """
    decoded = decoder(signed_txn_hex)
    return WaitTarget(
        address=decoded.sender,
        sequence_number=decoded.sequence_number,
        expected_hash=decoded.hash,
        expiration_time_secs=decoded.expiration_time_secs,
    )


# =========================================================================
# Outcome
# =========================================================================


class OutcomeStatus(StrEnum):
    """Terminal states of the poller."""

    CONFIRMED = "CONFIRMED"
    EXECUTION_FAILED = "EXECUTION_FAILED"
    HASH_MISMATCH = "HASH_MISMATCH"
    EXPIRED = "EXPIRED"
    TIMED_OUT = "TIMED_OUT"


_ITERATION_TO_OUTCOME = {
    IterationStatus.CONFIRMED: OutcomeStatus.CONFIRMED,
    IterationStatus.EXECUTION_FAILED: OutcomeStatus.EXECUTION_FAILED,
    IterationStatus.HASH_MISMATCH: OutcomeStatus.HASH_MISMATCH,
}


@dataclass(frozen=True)
class PollOutcome:
    """How a wait ended.

    Attributes:
        status: Terminal state.
        target: What was waited for.
        attempts: Number of status calls issued.
        transaction: The record for CONFIRMED, EXECUTION_FAILED and
            HASH_MISMATCH. None otherwise.
        timeout: The caller's timeout in seconds, set on TIMED_OUT.
    """

    status: OutcomeStatus
    target: WaitTarget
    attempts: int
    transaction: TransactionRecord | None = None
    timeout: float | None = None

    @property
    def expected_hash(self) -> str:
        return self.target.expected_hash

    @property
    def actual_hash(self) -> str | None:
        return self.transaction.hash if self.transaction is not None else None

    @property
    def vm_status(self) -> VMStatus | None:
        return self.transaction.vm_status if self.transaction is not None else None

    def raise_for_status(self) -> TransactionRecord:
        """Return the record if CONFIRMED, else raise the matching error.

        Raises:
            TransactionHashMismatchError, TransactionExecutionFailedError,
            TransactionExpiredError, ConfirmationTimeoutError.
        """
        if self.status == OutcomeStatus.CONFIRMED and self.transaction is not None:
            return self.transaction
        if self.status == OutcomeStatus.HASH_MISMATCH and self.transaction is not None:
            raise TransactionHashMismatchError(self.expected_hash, self.transaction.hash)
        if self.status == OutcomeStatus.EXECUTION_FAILED and self.transaction is not None:
            raise TransactionExecutionFailedError(self.transaction.vm_status)
        if self.status == OutcomeStatus.EXPIRED:
            raise TransactionExpiredError(self.target.expiration_time_secs or 0)
        raise ConfirmationTimeoutError(self.timeout or 0.0)


# =========================================================================
# Poller
# =========================================================================


class ConfirmationPoller:
    """Deadline-bounded polling loop.

    Args:
        rpc: Source of ``get_account_transaction`` envelopes.
        validator: Validates every envelope (and advances the tracker).
        clock: Monotonic clock in seconds. Inject for deterministic tests.
        sleep: Async sleep. Inject for deterministic tests.
    """

    def __init__(
        self,
        rpc: TransactionStatusSource,
        validator: ResponseValidator,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._rpc = rpc
        self._validator = validator
        self._clock = clock
        self._sleep = sleep

    @property
    def tracker(self) -> LedgerStateTracker:
        return self._validator.tracker

    @property
    def clock(self) -> Callable[[], float]:
        return self._clock

    async def poll(
        self,
        target: WaitTarget,
        *,
        deadline: float,
        delay: float,
        timeout: float | None = None,
    ) -> PollOutcome:
        """Poll until a terminal classification or ``deadline``.

        Args:
            target: What to wait for.
            deadline: Absolute deadline on ``clock``.
            delay: Seconds to sleep between attempts.
            timeout: Reported on TIMED_OUT. Defaults to the time left
                at the start of the call.

        Returns:
            PollOutcome. Never TIMED_OUT before ``deadline``.

        Raises:
            ChainIdMismatchError, StaleResponseError: Validation failures
                end the wait immediately.
        """
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got: {delay}")
        if timeout is None:
            timeout = max(0.0, deadline - self._clock())

        attempts = 0
        while self._clock() < deadline:
            attempts += 1
            result = await self._attempt(target, attempts)
            if result is not None:
                return PollOutcome(
                    status=result[0],
                    target=target,
                    attempts=attempts,
                    transaction=result[1],
                )

            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            await self._sleep(min(delay, remaining))

        log.info(
            "Transaction %s/%d not confirmed within %ss (%d attempts)",
            target.address, target.sequence_number, timeout, attempts,
        )
        return PollOutcome(
            status=OutcomeStatus.TIMED_OUT,
            target=target,
            attempts=attempts,
            timeout=timeout,
        )

    async def _attempt(
        self, target: WaitTarget, attempt: int
    ) -> tuple[OutcomeStatus, TransactionRecord | None] | None:
        """One iteration. Returns None to keep polling."""
        try:
            envelope = await self._rpc.get_account_transaction(
                target.address, target.sequence_number, include_events=True
            )
        except TRANSIENT_ERRORS as exc:
            log.debug("Attempt %d: status call failed: %s", attempt, exc)
            return None

        self._validator.validate(envelope)

        try:
            envelope.raise_for_error()
            record = parse_transaction(envelope.result)
        except (RpcError, InvalidResponseError) as exc:
            log.debug("Attempt %d: unusable response: %s", attempt, exc)
            return None

        result = interpret(target.expected_hash, record)
        if result.status != IterationStatus.NOT_FOUND:
            outcome = _ITERATION_TO_OUTCOME[result.status]
            log.info(
                "Transaction %s/%d: %s (expected %s, got %s)",
                target.address, target.sequence_number, outcome,
                target.expected_hash, result.actual_hash,
            )
            return outcome, result.transaction

        if target.expiration_time_secs is not None:
            authority_time_usec = self.tracker.state.timestamp_usec
            if is_expired(target.expiration_time_secs, authority_time_usec):
                log.info(
                    "Transaction %s/%d expired: authority time %dus >= %ds",
                    target.address, target.sequence_number,
                    authority_time_usec, target.expiration_time_secs,
                )
                return OutcomeStatus.EXPIRED, None

        log.debug(
            "Attempt %d: %s/%d not found yet",
            attempt, target.address, target.sequence_number,
        )
        return None
