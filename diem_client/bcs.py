"""
Signed transaction decoding — the decode boundary.

Reads a hex-encoded BCS ``SignedTransaction`` far enough to extract what
the confirmation poller needs (sender, sequence number, expiration, chain
id) and computes the transaction hash. Nothing here builds or signs
transactions.

Layout (BCS, little-endian integers, ULEB128 lengths and variant tags):

    SignedTransaction
        RawTransaction
            sender                      [u8; 16]
            sequence_number             u64
            payload                     TransactionPayload
            max_gas_amount              u64
            gas_unit_price              u64
            gas_currency_code           String
            expiration_timestamp_secs   u64
            chain_id                    u8
        TransactionAuthenticator
            0 Ed25519       {public_key: bytes(32), signature: bytes(64)}
            1 MultiEd25519  {public_key: bytes, signature: bytes}

    TransactionPayload
        0 WriteSet         (not supported, genesis/admin only)
        1 Script           {code: bytes, ty_args: [TypeTag], args: [TransactionArgument]}
        2 Module           {code: bytes}
        3 ScriptFunction   {module: ModuleId, function: Identifier,
                            ty_args: [TypeTag], args: [bytes]}

Transaction hash:
    sha3_256(sha3_256(b"DIEM::Transaction") || 0x00 || signed_txn_bytes)

    0x00 is the ``Transaction::UserTransaction`` variant tag.
"""

from __future__ import annotations

import binascii
import hashlib
from dataclasses import dataclass

from diem_client.errors import InvalidHexError, InvalidTransactionBytesError

ADDRESS_LENGTH = 16
ED25519_PUBLIC_KEY_LENGTH = 32
ED25519_SIGNATURE_LENGTH = 64

_TRANSACTION_HASH_PREFIX = hashlib.sha3_256(b"DIEM::Transaction").digest()
_USER_TRANSACTION_TAG = b"\x00"

# Guards against malicious nesting of vector<vector<...>> type tags.
_MAX_TYPE_TAG_DEPTH = 64


@dataclass(frozen=True)
class DecodedTransaction:
    """Fields extracted from a signed transaction.

    Attributes:
        sender: Sender address (32 lowercase hex chars).
        sequence_number: Sender sequence number.
        expiration_time_secs: Declared expiration (unix seconds).
        chain_id: Chain id the transaction was signed for.
        hash: Transaction hash (64 lowercase hex chars).
    """

    sender: str
    sequence_number: int
    expiration_time_secs: int
    chain_id: int
    hash: str


class _Reader:
    """Cursor over a BCS byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def read(self, n: int) -> bytes:
        if n > self.remaining:
            raise InvalidTransactionBytesError(
                f"Deserialize given hex string as SignedTransaction BCS failed: EOF "
                f"(wanted {n} bytes at offset {self._pos}, {self.remaining} left)"
            )
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def u8(self) -> int:
        return self.read(1)[0]

    def u64(self) -> int:
        return int.from_bytes(self.read(8), "little")

    def u128(self) -> int:
        return int.from_bytes(self.read(16), "little")

    def uleb128(self) -> int:
        value = 0
        for shift in range(0, 32, 7):
            byte = self.u8()
            value |= (byte & 0x7F) << shift
            if not byte & 0x80:
                if value > 0xFFFFFFFF:
                    break
                return value
        raise InvalidTransactionBytesError("invalid ULEB128 length or variant tag")

    def bytes(self) -> bytes:
        return self.read(self.uleb128())

    def string(self) -> str:
        raw = self.bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidTransactionBytesError(f"invalid utf-8 string: {e}") from e

    def address(self) -> str:
        return self.read(ADDRESS_LENGTH).hex()


# =========================================================================
# Skipping nested payload structures
# =========================================================================


def _skip_type_tag(reader: _Reader, depth: int = 0) -> None:
    if depth > _MAX_TYPE_TAG_DEPTH:
        raise InvalidTransactionBytesError("type tag nesting too deep")
    tag = reader.uleb128()
    if tag in (0, 1, 2, 3, 4, 5):  # bool, u8, u64, u128, address, signer
        return
    if tag == 6:  # vector
        _skip_type_tag(reader, depth + 1)
        return
    if tag == 7:  # struct
        reader.address()
        reader.string()  # module
        reader.string()  # name
        for _ in range(reader.uleb128()):
            _skip_type_tag(reader, depth + 1)
        return
    raise InvalidTransactionBytesError(f"unknown type tag variant: {tag}")


def _skip_transaction_argument(reader: _Reader) -> None:
    tag = reader.uleb128()
    if tag == 0:
        reader.u8()
    elif tag == 1:
        reader.u64()
    elif tag == 2:
        reader.u128()
    elif tag == 3:
        reader.address()
    elif tag == 4:
        reader.bytes()
    elif tag == 5:
        reader.u8()
    else:
        raise InvalidTransactionBytesError(f"unknown transaction argument variant: {tag}")


def _skip_payload(reader: _Reader) -> None:
    tag = reader.uleb128()
    if tag == 0:
        raise InvalidTransactionBytesError("write set payloads are not supported")
    if tag == 1:
        reader.bytes()
        for _ in range(reader.uleb128()):
            _skip_type_tag(reader)
        for _ in range(reader.uleb128()):
            _skip_transaction_argument(reader)
        return
    if tag == 2:
        reader.bytes()
        return
    if tag == 3:
        reader.address()
        reader.string()  # module name
        reader.string()  # function
        for _ in range(reader.uleb128()):
            _skip_type_tag(reader)
        for _ in range(reader.uleb128()):
            reader.bytes()
        return
    raise InvalidTransactionBytesError(f"unknown transaction payload variant: {tag}")


def _skip_authenticator(reader: _Reader) -> None:
    tag = reader.uleb128()
    if tag == 0:
        if len(reader.bytes()) != ED25519_PUBLIC_KEY_LENGTH:
            raise InvalidTransactionBytesError("invalid ed25519 public key length")
        if len(reader.bytes()) != ED25519_SIGNATURE_LENGTH:
            raise InvalidTransactionBytesError("invalid ed25519 signature length")
        return
    if tag == 1:
        reader.bytes()
        reader.bytes()
        return
    raise InvalidTransactionBytesError(f"unknown authenticator variant: {tag}")


# =========================================================================
# Public API
# =========================================================================


def transaction_hash(signed_txn_bytes: bytes) -> str:
    """Hash of a user transaction, as reported by the ledger."""
    return hashlib.sha3_256(
        _TRANSACTION_HASH_PREFIX + _USER_TRANSACTION_TAG + signed_txn_bytes
    ).hexdigest()


def decode_signed_transaction(signed_txn_hex: str) -> DecodedTransaction:
    """Decode a hex-encoded BCS SignedTransaction.

    Args:
        signed_txn_hex: Hex string (no ``0x`` prefix).

    Returns:
        DecodedTransaction with the fields the poller needs.

    Raises:
        InvalidHexError: ``signed_txn_hex`` is not valid hex.
        InvalidTransactionBytesError: Valid hex, but not a complete
            SignedTransaction (truncated, unknown variant, trailing bytes).
    """
    try:
        data = binascii.unhexlify(signed_txn_hex)
    except (binascii.Error, ValueError) as e:
        raise InvalidHexError(f"invalid hex string: {e}") from e

    reader = _Reader(data)
    sender = reader.address()
    sequence_number = reader.u64()
    _skip_payload(reader)
    reader.u64()  # max_gas_amount
    reader.u64()  # gas_unit_price
    reader.string()  # gas_currency_code
    expiration_time_secs = reader.u64()
    chain_id = reader.u8()
    _skip_authenticator(reader)

    if reader.remaining:
        raise InvalidTransactionBytesError(
            f"{reader.remaining} trailing bytes after SignedTransaction"
        )

    return DecodedTransaction(
        sender=sender,
        sequence_number=sequence_number,
        expiration_time_secs=expiration_time_secs,
        chain_id=chain_id,
        hash=transaction_hash(data),
    )
