"""
Transaction status interpretation and expiration judgement.

Both are pure functions. ``interpret`` classifies one poll iteration's
record; ``is_expired`` decides whether the authority's own clock has
passed a transaction's expiration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from diem_client.models import Executed, TransactionRecord, VMStatus

MICROS_PER_SECOND = 1_000_000


class IterationStatus(StrEnum):
    """Classification of one poll iteration."""

    NOT_FOUND = "NOT_FOUND"
    CONFIRMED = "CONFIRMED"
    EXECUTION_FAILED = "EXECUTION_FAILED"
    HASH_MISMATCH = "HASH_MISMATCH"


@dataclass(frozen=True)
class IterationResult:
    """Result of ``interpret()``.

    Attributes:
        status: The classification.
        transaction: The record, for every status except NOT_FOUND.
        expected_hash: The hash the caller is waiting for.
        actual_hash: The record's hash. Differs from expected_hash only
            on HASH_MISMATCH.
    """

    status: IterationStatus
    expected_hash: str
    transaction: TransactionRecord | None = None
    actual_hash: str | None = None

    @property
    def terminal(self) -> bool:
        return self.status != IterationStatus.NOT_FOUND

    @property
    def vm_status(self) -> VMStatus | None:
        if self.transaction is None:
            return None
        return self.transaction.vm_status


def interpret(expected_hash: str, record: TransactionRecord | None) -> IterationResult:
    """Classify a (possibly absent) transaction record.

    Hashes are compared case-insensitively since both sides are hex.
    """
    if record is None:
        return IterationResult(status=IterationStatus.NOT_FOUND, expected_hash=expected_hash)

    if record.hash.lower() != expected_hash.lower():
        return IterationResult(
            status=IterationStatus.HASH_MISMATCH,
            expected_hash=expected_hash,
            transaction=record,
            actual_hash=record.hash,
        )

    status = (
        IterationStatus.CONFIRMED
        if isinstance(record.vm_status, Executed)
        else IterationStatus.EXECUTION_FAILED
    )
    return IterationResult(
        status=status,
        expected_hash=expected_hash,
        transaction=record,
        actual_hash=record.hash,
    )


def is_expired(expiration_time_secs: int, authority_time_usec: int) -> bool:
    """True once the authority's clock reaches the expiration (inclusive)."""
    return authority_time_usec // MICROS_PER_SECOND >= expiration_time_secs
