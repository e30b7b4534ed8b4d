"""
Tests for interpret() and is_expired().

Test plan:
- interpret: absent → NOT_FOUND, hash mismatch → HASH_MISMATCH with both
  hashes, executed → CONFIRMED, move_abort/out_of_gas/execution_failure →
  EXECUTION_FAILED carrying the status, hash compare ignores case
- is_expired: boundary is inclusive, one microsecond earlier is not expired
"""

from diem_client.interpreter import IterationStatus, interpret, is_expired
from diem_client.models import (
    Executed,
    ExecutionFailure,
    MoveAbort,
    OutOfGas,
    TransactionRecord,
    VMStatus,
)

TXN_HASH = "0fa27a781a9086e80a870851ea4f1b14090fb8b5bd9933e27447ab806443e08e"
EXPIRATION_SECS = 1597722856


def _record(vm_status: VMStatus | None = None, txn_hash: str = TXN_HASH) -> TransactionRecord:
    return TransactionRecord(
        hash=txn_hash,
        version=106548,
        vm_status=vm_status or Executed(),
        transaction_type="user",
        sequence_number=0,
    )


class TestInterpret:
    def test_absent_is_not_found(self) -> None:
        result = interpret(TXN_HASH, None)
        assert result.status == IterationStatus.NOT_FOUND
        assert not result.terminal
        assert result.transaction is None

    def test_executed_is_confirmed(self) -> None:
        record = _record()
        result = interpret(TXN_HASH, record)
        assert result.status == IterationStatus.CONFIRMED
        assert result.terminal
        assert result.transaction is record

    def test_hash_mismatch(self) -> None:
        result = interpret("mismatched hash", _record())
        assert result.status == IterationStatus.HASH_MISMATCH
        assert result.expected_hash == "mismatched hash"
        assert result.actual_hash == TXN_HASH
        assert result.terminal

    def test_hash_mismatch_wins_over_failed_execution(self) -> None:
        result = interpret("b" * 64, _record(MoveAbort(location="0x1::M", abort_code=5)))
        assert result.status == IterationStatus.HASH_MISMATCH

    def test_hash_compare_ignores_case(self) -> None:
        result = interpret(TXN_HASH.upper(), _record())
        assert result.status == IterationStatus.CONFIRMED

    def test_move_abort_is_execution_failed(self) -> None:
        status = MoveAbort(
            location="00000000000000000000000000000001::DiemAccount", abort_code=5
        )
        result = interpret(TXN_HASH, _record(status))
        assert result.status == IterationStatus.EXECUTION_FAILED
        assert isinstance(result.vm_status, MoveAbort)
        assert result.vm_status.abort_code == 5

    def test_out_of_gas_is_execution_failed(self) -> None:
        result = interpret(TXN_HASH, _record(OutOfGas()))
        assert result.status == IterationStatus.EXECUTION_FAILED

    def test_execution_failure_is_execution_failed(self) -> None:
        status = ExecutionFailure(location="0x1::M", function_index=2, code_offset=7)
        result = interpret(TXN_HASH, _record(status))
        assert result.status == IterationStatus.EXECUTION_FAILED
        assert result.vm_status == status


class TestIsExpired:
    def test_exact_boundary_is_expired(self) -> None:
        assert is_expired(EXPIRATION_SECS, EXPIRATION_SECS * 1_000_000)

    def test_one_microsecond_before_is_not_expired(self) -> None:
        assert not is_expired(EXPIRATION_SECS, EXPIRATION_SECS * 1_000_000 - 1)

    def test_after_is_expired(self) -> None:
        assert is_expired(EXPIRATION_SECS, 1597722856123456)

    def test_far_future_expiration(self) -> None:
        assert not is_expired(100000000000, 1597722856123456)

    def test_zero_authority_time(self) -> None:
        assert not is_expired(1, 0)
        assert is_expired(0, 0)
