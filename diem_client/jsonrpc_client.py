"""
Diem JSON-RPC client — the RPC boundary.

Builds JSON-RPC 2.0 requests and turns raw responses into
``ResponseEnvelope``s. Uses an injectable transport (JsonRpcTransport) so
the HTTP layer can be swapped for test fakes without changing parsing
logic.

No retry loops. No validation. The envelope is returned as-is, error
object included; deciding what to do with it is the caller's job.

Response shape (Diem JSON-RPC conventions):
    {
        "jsonrpc": "2.0",
        "id": 1,
        "result": {...} | null,
        "error": {"code": -32600, "message": "...", "data": ...},
        "diem_chain_id": 2,
        "diem_ledger_version": 106548,
        "diem_ledger_timestampusec": 1597722856123456
    }
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

from diem_client.errors import InvalidResponseError
from diem_client.models import ResponseEnvelope, RpcErrorInfo
from diem_client.transport import HttpxTransport, JsonRpcTransport

log = logging.getLogger(__name__)


class JsonRpcClient:
    """Diem JSON-RPC client.

    Args:
        url: The JSON-RPC endpoint URL (e.g. "http://localhost:8080/v1").
        transport: Injectable transport for HTTP POST. Defaults to
            HttpxTransport. Pass a FakeTransport for testing.
    """

    def __init__(
        self,
        url: str,
        transport: JsonRpcTransport | None = None,
    ) -> None:
        self._url = url
        self._transport = transport or HttpxTransport()
        # itertools.count.__next__ is atomic under the GIL
        self._ids = itertools.count(1)

    @property
    def url(self) -> str:
        """The JSON-RPC endpoint URL."""
        return self._url

    async def call(self, method: str, params: list[Any]) -> ResponseEnvelope:
        """Send one JSON-RPC request and parse the response envelope.

        Raises:
            TransportError: From the transport.
            InvalidResponseError: The response is not a JSON-RPC envelope.
        """
        request_id = next(self._ids)
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": request_id,
        }
        log.debug("-> %s #%d %s", method, request_id, params)
        response = await self._transport.post_json(self._url, payload)
        envelope = parse_envelope(response)
        log.debug(
            "<- %s #%d ledger=(%s, %s)",
            method, request_id, envelope.ledger_version, envelope.ledger_timestamp_usec,
        )
        return envelope

    async def get_metadata(self, version: int | None = None) -> ResponseEnvelope:
        params: list[Any] = [] if version is None else [version]
        return await self.call("get_metadata", params)

    async def get_account(self, address: str) -> ResponseEnvelope:
        return await self.call("get_account", [address])

    async def get_account_transaction(
        self,
        address: str,
        sequence_number: int,
        include_events: bool = False,
    ) -> ResponseEnvelope:
        return await self.call(
            "get_account_transaction", [address, sequence_number, include_events]
        )

    async def submit(self, signed_txn_hex: str) -> ResponseEnvelope:
        return await self.call("submit", [signed_txn_hex])


# =====================================================================
# Envelope parsing (pure functions, no I/O)
# =====================================================================


def _optional_int(response: dict[str, Any], key: str) -> int | None:
    value = response.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidResponseError(f"{key} must be an integer, got {value!r}")
    return value


def parse_envelope(response: dict[str, Any]) -> ResponseEnvelope:
    """Parse a raw JSON-RPC response dict into a ResponseEnvelope.

    Handles:
        - result present, or null/missing (absent payload)
        - error object (kept on the envelope, not raised)
        - missing ledger metadata (fields stay None)
    """
    if not isinstance(response, dict):
        raise InvalidResponseError(
            f"response must be an object, got {type(response).__name__}"
        )

    error = None
    raw_error = response.get("error")
    if raw_error is not None:
        if not isinstance(raw_error, dict):
            raise InvalidResponseError(f"error must be an object, got {raw_error!r}")
        error = RpcErrorInfo(
            code=int(raw_error.get("code", 0)),
            message=str(raw_error.get("message", "unknown error")),
            data=raw_error.get("data"),
        )

    request_id = response.get("id")

    return ResponseEnvelope(
        chain_id=_optional_int(response, "diem_chain_id"),
        ledger_version=_optional_int(response, "diem_ledger_version"),
        ledger_timestamp_usec=_optional_int(response, "diem_ledger_timestampusec"),
        result=response.get("result"),
        error=error,
        request_id=request_id if isinstance(request_id, int) else None,
    )
