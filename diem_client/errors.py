"""
Error taxonomy for the Diem client.

Every terminal classification has its own exception type so callers can
tell "try again later" apart from "this will never succeed":

    DiemClientError
    ├── ValidationError            — response rejected before interpretation
    │   ├── ChainIdMismatchError
    │   └── StaleResponseError
    ├── DecodeError                — signed transaction could not be decoded
    │   ├── InvalidHexError
    │   └── InvalidTransactionBytesError
    ├── RpcError                   — transient, swallowed by the poller
    │   ├── TransportError
    │   ├── JsonRpcError
    │   └── InvalidResponseError
    └── WaitForTransactionError    — terminal poll outcomes
        ├── TransactionHashMismatchError
        ├── TransactionExecutionFailedError
        ├── TransactionExpiredError
        └── ConfirmationTimeoutError
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from diem_client.ledger_state import LedgerState
    from diem_client.models import VMStatus


class DiemClientError(Exception):
    """Base class for all client errors."""


# =========================================================================
# Validation
# =========================================================================


class ValidationError(DiemClientError):
    """A response failed validation. Never retried."""


class ChainIdMismatchError(ValidationError):
    """The response came from a different chain than the client expects."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"chain id mismatch error: expected server response chain id == "
            f"{expected}, but got {actual}"
        )


class StaleResponseError(ValidationError):
    """The response reports a ledger state older than one already seen."""

    def __init__(self, candidate: LedgerState, stored: LedgerState) -> None:
        self.candidate = candidate
        self.stored = stored
        super().__init__(
            f"stale response error: expected server response ledger "
            f"{candidate} >= {stored}"
        )


# =========================================================================
# Decoding
# =========================================================================


class DecodeError(DiemClientError):
    """A signed transaction could not be decoded."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class InvalidHexError(DecodeError):
    """The input is not a hex string."""


class InvalidTransactionBytesError(DecodeError):
    """The bytes are valid hex but not a BCS SignedTransaction."""


# =========================================================================
# RPC (transient inside the poll loop)
# =========================================================================


class RpcError(DiemClientError):
    """A single RPC call failed."""


class TransportError(RpcError):
    """The request never produced a usable JSON-RPC response.

    Attributes:
        error_code: Coarse category ("TIMEOUT", "CONNECTION_FAILED",
            "HTTP_ERROR", "INVALID_JSON").
        details: Diagnostic context (url, status code, ...).
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


class JsonRpcError(RpcError):
    """The server answered with a JSON-RPC error object."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"json-rpc error {code}: {message}")


class InvalidResponseError(RpcError):
    """The response or its result object has an unexpected shape."""


# =========================================================================
# Terminal wait outcomes
# =========================================================================


class WaitForTransactionError(DiemClientError):
    """Waiting for a transaction ended without a successful execution."""


class TransactionHashMismatchError(WaitForTransactionError):
    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"transaction hash does not match, given {expected!r}, but got {actual!r}"
        )


class TransactionExecutionFailedError(WaitForTransactionError):
    """The transaction was committed but did not execute successfully."""

    def __init__(self, vm_status: VMStatus) -> None:
        self.vm_status = vm_status
        super().__init__(f"transaction execution failed: {vm_status}")


class TransactionExpiredError(WaitForTransactionError):
    """The authority's clock passed the transaction's expiration."""

    def __init__(self, expiration_time_secs: int) -> None:
        self.expiration_time_secs = expiration_time_secs
        super().__init__("transaction expired")


class ConfirmationTimeoutError(WaitForTransactionError):
    """The caller's deadline passed with no terminal classification."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(
            f"transaction not found within timeout period: {_format_seconds(timeout)}"
        )


def _format_seconds(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value)}s"
    return f"{value}s"
