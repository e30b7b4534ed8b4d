"""
Data model for JSON-RPC responses.

All types are boring frozen dataclasses. Parsers turn the loosely-typed
``result`` objects of a JSON-RPC response into them and raise
``InvalidResponseError`` on anything with the wrong shape.

``VMStatus`` is a closed union: a ``vm_status.type`` this module does not
know is a parse error rather than a silent fallback, so new kinds have to
be added here deliberately.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from diem_client.errors import InvalidResponseError, JsonRpcError
from diem_client.ledger_state import LedgerState


# =========================================================================
# Response envelope
# =========================================================================


@dataclass(frozen=True)
class RpcErrorInfo:
    """The ``error`` object of a JSON-RPC response."""

    code: int
    message: str
    data: Any = None


@dataclass(frozen=True)
class ResponseEnvelope:
    """One JSON-RPC response with the ledger metadata that rides along.

    Attributes:
        chain_id: ``diem_chain_id``. None if the server didn't send one.
        ledger_version: ``diem_ledger_version``. None if absent.
        ledger_timestamp_usec: ``diem_ledger_timestampusec``. None if absent.
        result: Raw ``result`` value. None means "absent" (e.g. the
            transaction is not visible yet).
        error: Parsed ``error`` object, if any.
        request_id: The JSON-RPC ``id`` echoed by the server.
    """

    chain_id: int | None = None
    ledger_version: int | None = None
    ledger_timestamp_usec: int | None = None
    result: Any = None
    error: RpcErrorInfo | None = None
    request_id: int | None = None

    @property
    def has_ledger_state(self) -> bool:
        return self.ledger_version is not None or self.ledger_timestamp_usec is not None

    def ledger_state(self) -> LedgerState | None:
        """The ledger state this response reports, or None if it has none."""
        if not self.has_ledger_state:
            return None
        return LedgerState(
            version=self.ledger_version or 0,
            timestamp_usec=self.ledger_timestamp_usec or 0,
        )

    def raise_for_error(self) -> None:
        """Raise ``JsonRpcError`` if the server returned an error object."""
        if self.error is not None:
            raise JsonRpcError(self.error.code, self.error.message, self.error.data)


# =========================================================================
# VM status (closed union)
# =========================================================================


@dataclass(frozen=True)
class Executed:
    type: ClassVar[str] = "executed"

    def __str__(self) -> str:
        return self.type


@dataclass(frozen=True)
class OutOfGas:
    type: ClassVar[str] = "out_of_gas"

    def __str__(self) -> str:
        return self.type


@dataclass(frozen=True)
class MoveAbort:
    type: ClassVar[str] = "move_abort"

    location: str
    abort_code: int
    explanation: dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"{self.type} (location={self.location}, abort_code={self.abort_code})"


@dataclass(frozen=True)
class ExecutionFailure:
    type: ClassVar[str] = "execution_failure"

    location: str
    function_index: int
    code_offset: int

    def __str__(self) -> str:
        return (
            f"{self.type} (location={self.location}, "
            f"function_index={self.function_index}, code_offset={self.code_offset})"
        )


@dataclass(frozen=True)
class MiscellaneousError:
    type: ClassVar[str] = "miscellaneous_error"

    def __str__(self) -> str:
        return self.type


VMStatus = Union[Executed, OutOfGas, MoveAbort, ExecutionFailure, MiscellaneousError]


# =========================================================================
# Result views
# =========================================================================


@dataclass(frozen=True)
class Event:
    key: str
    sequence_number: int
    transaction_version: int
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TransactionRecord:
    """A committed transaction as reported by the authority.

    Attributes:
        hash: Transaction hash (lowercase hex).
        version: Ledger version the transaction was committed at.
        vm_status: Execution outcome.
        transaction_type: ``transaction.type`` ("user", "blockmetadata", ...).
        sender: Sender address for user transactions, else None.
        sequence_number: Sender sequence number for user transactions.
        expiration_time_secs: Declared expiration for user transactions.
        gas_used: Gas consumed.
        events: Emitted events (empty unless requested).
    """

    hash: str
    version: int
    vm_status: VMStatus
    transaction_type: str
    sender: str | None = None
    sequence_number: int | None = None
    expiration_time_secs: int | None = None
    gas_used: int = 0
    events: tuple[Event, ...] = ()

    @property
    def executed(self) -> bool:
        return isinstance(self.vm_status, Executed)


@dataclass(frozen=True)
class Metadata:
    version: int
    timestamp_usec: int
    chain_id: int
    script_hash_allow_list: tuple[str, ...] = ()


@dataclass(frozen=True)
class Amount:
    amount: int
    currency: str


@dataclass(frozen=True)
class Account:
    address: str
    sequence_number: int
    authentication_key: str
    is_frozen: bool = False
    role: str = "unknown"
    balances: tuple[Amount, ...] = ()


# =========================================================================
# Parsers (pure, no I/O)
# =========================================================================


def _require(obj: dict[str, Any], key: str, what: str) -> Any:
    if key not in obj:
        raise InvalidResponseError(f"{what}: missing field {key!r}")
    return obj[key]


def _require_int(obj: dict[str, Any], key: str, what: str) -> int:
    value = _require(obj, key, what)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidResponseError(
            f"{what}: field {key!r} must be an integer, got {value!r}"
        )
    return value


def _require_str(obj: dict[str, Any], key: str, what: str) -> str:
    value = _require(obj, key, what)
    if not isinstance(value, str):
        raise InvalidResponseError(
            f"{what}: field {key!r} must be a string, got {value!r}"
        )
    return value


def _require_dict(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidResponseError(f"{what} must be an object, got {type(value).__name__}")
    return value


def parse_vm_status(value: Any) -> VMStatus:
    """Parse a ``vm_status`` object.

    Raises:
        InvalidResponseError: Unknown ``type`` or missing fields.
    """
    obj = _require_dict(value, "vm_status")
    kind = _require_str(obj, "type", "vm_status")

    if kind == Executed.type:
        return Executed()
    if kind == OutOfGas.type:
        return OutOfGas()
    if kind == MiscellaneousError.type:
        return MiscellaneousError()
    if kind == MoveAbort.type:
        explanation = obj.get("explanation")
        return MoveAbort(
            location=_require_str(obj, "location", "move_abort"),
            abort_code=_require_int(obj, "abort_code", "move_abort"),
            explanation=explanation if isinstance(explanation, dict) else None,
        )
    if kind == ExecutionFailure.type:
        return ExecutionFailure(
            location=_require_str(obj, "location", "execution_failure"),
            function_index=_require_int(obj, "function_index", "execution_failure"),
            code_offset=_require_int(obj, "code_offset", "execution_failure"),
        )
    raise InvalidResponseError(f"unknown vm_status type: {kind!r}")


def _parse_event(value: Any) -> Event:
    obj = _require_dict(value, "event")
    data = obj.get("data")
    return Event(
        key=_require_str(obj, "key", "event"),
        sequence_number=_require_int(obj, "sequence_number", "event"),
        transaction_version=_require_int(obj, "transaction_version", "event"),
        data=data if isinstance(data, dict) else {},
    )


def parse_transaction(result: Any) -> TransactionRecord | None:
    """Parse a transaction view. ``None`` (not yet visible) stays None."""
    if result is None:
        return None
    obj = _require_dict(result, "transaction")
    txn = _require_dict(_require(obj, "transaction", "transaction"), "transaction.transaction")
    txn_type = _require_str(txn, "type", "transaction.transaction")

    sender = txn.get("sender")
    sequence_number = txn.get("sequence_number")
    expiration = txn.get("expiration_timestamp_secs")

    return TransactionRecord(
        hash=_require_str(obj, "hash", "transaction").lower(),
        version=_require_int(obj, "version", "transaction"),
        vm_status=parse_vm_status(_require(obj, "vm_status", "transaction")),
        transaction_type=txn_type,
        sender=sender if isinstance(sender, str) else None,
        sequence_number=sequence_number if isinstance(sequence_number, int) else None,
        expiration_time_secs=expiration if isinstance(expiration, int) else None,
        gas_used=obj.get("gas_used") or 0,
        events=tuple(_parse_event(e) for e in obj.get("events") or ()),
    )


def parse_metadata(result: Any) -> Metadata:
    obj = _require_dict(result, "metadata")
    return Metadata(
        version=_require_int(obj, "version", "metadata"),
        timestamp_usec=_require_int(obj, "timestamp", "metadata"),
        chain_id=_require_int(obj, "chain_id", "metadata"),
        script_hash_allow_list=tuple(obj.get("script_hash_allow_list") or ()),
    )


def parse_account(result: Any) -> Account | None:
    """Parse an account view. ``None`` means the account does not exist."""
    if result is None:
        return None
    obj = _require_dict(result, "account")
    role = obj.get("role")
    balances = tuple(
        Amount(
            amount=_require_int(b, "amount", "amount"),
            currency=_require_str(b, "currency", "amount"),
        )
        for b in (_require_dict(v, "amount") for v in obj.get("balances") or ())
    )
    return Account(
        address=_require_str(obj, "address", "account"),
        sequence_number=_require_int(obj, "sequence_number", "account"),
        authentication_key=_require_str(obj, "authentication_key", "account"),
        is_frozen=bool(obj.get("is_frozen", False)),
        role=role.get("type", "unknown") if isinstance(role, dict) else "unknown",
        balances=balances,
    )
