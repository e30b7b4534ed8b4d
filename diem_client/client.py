"""
Diem client — the public facade.

Composes the JSON-RPC client, the response validator and the
confirmation poller around one ``LedgerStateTracker``. The tracker lives
as long as the client: every response received through any method is
checked against (and advances) the same ledger state, so staleness is
detected across unrelated calls.

Methods:
    - ``get_metadata()``, ``get_account()``, ``get_account_transaction()``,
      ``submit()`` — single validated calls. All errors propagate.
    - ``poll_transaction()`` — wait and return a PollOutcome.
    - ``wait_for_transaction()``, ``wait_for_signed_transaction()`` —
      wait and return the committed record, or raise a typed error.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

from diem_client.config import DEFAULT_RETRY_DELAY, ClientConfig
from diem_client.jsonrpc_client import JsonRpcClient
from diem_client.ledger_state import LedgerState, LedgerStateTracker
from diem_client.models import (
    Account,
    Metadata,
    ResponseEnvelope,
    TransactionRecord,
    parse_account,
    parse_metadata,
    parse_transaction,
)
from diem_client.poller import (
    ConfirmationPoller,
    PollOutcome,
    WaitTarget,
    target_for_account,
    target_for_signed_transaction,
)
from diem_client.transport import HttpxTransport, JsonRpcTransport
from diem_client.validator import ResponseValidator

log = logging.getLogger(__name__)


class DiemClient:
    """Validated JSON-RPC client with transaction confirmation.

    Args:
        url: JSON-RPC endpoint URL.
        chain_id: Chain id every response must carry (when present).
        transport: Injectable JSON-RPC transport. Defaults to HttpxTransport.
        retry_delay: Default seconds between status polls.
        tracker: Ledger state tracker. A fresh one (0, 0) by default.
        clock: Monotonic clock in seconds. Inject for tests.
        sleep: Async sleep. Inject for tests.
    """

    def __init__(
        self,
        url: str,
        chain_id: int,
        *,
        transport: JsonRpcTransport | None = None,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        tracker: LedgerStateTracker | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._rpc = JsonRpcClient(url, transport)
        self._tracker = tracker or LedgerStateTracker()
        self._validator = ResponseValidator(chain_id, self._tracker)
        self._retry_delay = retry_delay
        self._poller = ConfirmationPoller(
            self._rpc, self._validator, clock=clock, sleep=sleep
        )

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: JsonRpcTransport | None = None,
    ) -> DiemClient:
        return cls(
            config.url,
            config.chain_id,
            transport=transport or HttpxTransport(timeout=config.request_timeout),
            retry_delay=config.retry_delay,
        )

    @property
    def url(self) -> str:
        return self._rpc.url

    @property
    def chain_id(self) -> int:
        return self._validator.chain_id

    # -----------------------------------------------------------------
    # Ledger state
    # -----------------------------------------------------------------

    def last_response_ledger_state(self) -> LedgerState:
        """The newest ledger state seen in any response so far."""
        return self._tracker.state

    def update_last_response_ledger_state(self, state: LedgerState) -> None:
        """Seed or override the tracked ledger state."""
        self._tracker.update(state)

    # -----------------------------------------------------------------
    # Single calls
    # -----------------------------------------------------------------

    def _checked(self, envelope: ResponseEnvelope) -> Any:
        self._validator.validate(envelope)
        envelope.raise_for_error()
        return envelope.result

    async def get_metadata(self, version: int | None = None) -> Metadata:
        return parse_metadata(self._checked(await self._rpc.get_metadata(version)))

    async def get_account(self, address: str) -> Account | None:
        return parse_account(self._checked(await self._rpc.get_account(address)))

    async def get_account_transaction(
        self,
        address: str,
        sequence_number: int,
        include_events: bool = False,
    ) -> TransactionRecord | None:
        envelope = await self._rpc.get_account_transaction(
            address, sequence_number, include_events
        )
        return parse_transaction(self._checked(envelope))

    async def submit(self, signed_txn_hex: str) -> None:
        """Submit a signed transaction. Raises JsonRpcError on rejection."""
        self._checked(await self._rpc.submit(signed_txn_hex))

    # -----------------------------------------------------------------
    # Waiting
    # -----------------------------------------------------------------

    async def poll_transaction(
        self,
        target: WaitTarget,
        timeout: float,
        *,
        delay: float | None = None,
    ) -> PollOutcome:
        """Wait for ``target`` for at most ``timeout`` seconds.

        Raises:
            ChainIdMismatchError, StaleResponseError: From validation.
        """
        if timeout < 0:
            raise ValueError(f"timeout must be >= 0, got: {timeout}")
        deadline = self._poller.clock() + timeout
        return await self._poller.poll(
            target,
            deadline=deadline,
            delay=self._retry_delay if delay is None else delay,
            timeout=timeout,
        )

    async def wait_for_transaction(
        self,
        address: str,
        sequence_number: int,
        txn_hash: str,
        expiration_time_secs: int | None,
        timeout: float,
        *,
        delay: float | None = None,
    ) -> TransactionRecord:
        """Wait for an account's transaction to be committed and executed.

        Args:
            address: Sender address.
            sequence_number: Sender sequence number of the transaction.
            txn_hash: Expected transaction hash.
            expiration_time_secs: The transaction's expiration. None skips
                the expiration check.
            timeout: Seconds to wait in total.
            delay: Seconds between polls. Defaults to the client's
                retry_delay.

        Returns:
            The executed TransactionRecord.

        Raises:
            TransactionHashMismatchError, TransactionExecutionFailedError,
            TransactionExpiredError, ConfirmationTimeoutError,
            ChainIdMismatchError, StaleResponseError.
        """
        target = target_for_account(address, sequence_number, txn_hash, expiration_time_secs)
        outcome = await self.poll_transaction(target, timeout, delay=delay)
        return outcome.raise_for_status()

    async def wait_for_signed_transaction(
        self,
        signed_txn_hex: str,
        timeout: float,
        *,
        delay: float | None = None,
    ) -> TransactionRecord:
        """Wait for a hex-encoded signed transaction.

        Sender, sequence number, hash and expiration are decoded from the
        transaction itself.

        Raises:
            InvalidHexError, InvalidTransactionBytesError: Before any RPC.
            Otherwise as ``wait_for_transaction``.
        """
        target = target_for_signed_transaction(signed_txn_hex)
        log.debug(
            "Decoded signed transaction %s: %s/%d",
            target.expected_hash, target.address, target.sequence_number,
        )
        outcome = await self.poll_transaction(target, timeout, delay=delay)
        return outcome.raise_for_status()
