"""
Diem client: confirms transactions against a poll-based JSON-RPC ledger.

Public API:

    Facade:
        - ``DiemClient`` — validated calls plus ``wait_for_transaction`` and
          ``wait_for_signed_transaction``.
        - ``ClientConfig`` — url, chain id, retry delay, request timeout.

    Confirmation protocol (usable on their own):
        - ``LedgerState``, ``LedgerStateTracker`` — monotonic ledger view.
        - ``ResponseValidator`` — chain id and staleness checks.
        - ``interpret()``, ``is_expired()`` — per-iteration classification.
        - ``ConfirmationPoller``, ``WaitTarget``, ``PollOutcome``.

    Boundaries:
        - ``JsonRpcClient``, ``JsonRpcTransport``, ``HttpxTransport``.
        - ``decode_signed_transaction()`` — BCS SignedTransaction decoding.
"""

from diem_client.bcs import DecodedTransaction, decode_signed_transaction
from diem_client.client import DiemClient
from diem_client.config import ClientConfig
from diem_client.errors import (
    ChainIdMismatchError,
    ConfirmationTimeoutError,
    DecodeError,
    DiemClientError,
    InvalidHexError,
    InvalidResponseError,
    InvalidTransactionBytesError,
    JsonRpcError,
    RpcError,
    StaleResponseError,
    TransactionExecutionFailedError,
    TransactionExpiredError,
    TransactionHashMismatchError,
    TransportError,
    ValidationError,
    WaitForTransactionError,
)
from diem_client.interpreter import IterationResult, IterationStatus, interpret, is_expired
from diem_client.jsonrpc_client import JsonRpcClient
from diem_client.ledger_state import LedgerState, LedgerStateTracker
from diem_client.models import (
    Account,
    Executed,
    ExecutionFailure,
    Metadata,
    MiscellaneousError,
    MoveAbort,
    OutOfGas,
    ResponseEnvelope,
    TransactionRecord,
    VMStatus,
)
from diem_client.poller import (
    ConfirmationPoller,
    OutcomeStatus,
    PollOutcome,
    WaitTarget,
    target_for_account,
    target_for_signed_transaction,
)
from diem_client.transport import HttpxTransport, JsonRpcTransport
from diem_client.validator import ResponseValidator

__version__ = "0.1.0"

__all__ = [
    "Account",
    "ChainIdMismatchError",
    "ClientConfig",
    "ConfirmationPoller",
    "ConfirmationTimeoutError",
    "DecodeError",
    "DecodedTransaction",
    "DiemClient",
    "DiemClientError",
    "Executed",
    "ExecutionFailure",
    "HttpxTransport",
    "InvalidHexError",
    "InvalidResponseError",
    "InvalidTransactionBytesError",
    "IterationResult",
    "IterationStatus",
    "JsonRpcClient",
    "JsonRpcError",
    "JsonRpcTransport",
    "LedgerState",
    "LedgerStateTracker",
    "Metadata",
    "MiscellaneousError",
    "MoveAbort",
    "OutOfGas",
    "OutcomeStatus",
    "PollOutcome",
    "ResponseEnvelope",
    "ResponseValidator",
    "RpcError",
    "StaleResponseError",
    "TransactionExecutionFailedError",
    "TransactionExpiredError",
    "TransactionHashMismatchError",
    "TransactionRecord",
    "TransportError",
    "VMStatus",
    "ValidationError",
    "WaitForTransactionError",
    "WaitTarget",
    "decode_signed_transaction",
    "interpret",
    "is_expired",
    "target_for_account",
    "target_for_signed_transaction",
]
