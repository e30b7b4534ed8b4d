"""
Tests for HttpxTransport, using pytest-httpx to intercept requests.

Test plan:
- Success: JSON body posted, parsed dict returned, custom headers sent
- Failures map to TransportError codes: TIMEOUT, CONNECTION_FAILED,
  HTTP_ERROR (status >= 400), INVALID_JSON (bad body, non-object body)
"""

import json

import httpx
import pytest
from pytest_httpx import HTTPXMock

from diem_client.errors import TransportError
from diem_client.transport import HttpxTransport, JsonRpcTransport

URL = "http://localhost:8080/v1"
PAYLOAD = {"jsonrpc": "2.0", "method": "get_metadata", "params": [], "id": 1}


class TestHttpxTransportSuccess:
    def test_implements_protocol(self) -> None:
        assert isinstance(HttpxTransport(), JsonRpcTransport)

    @pytest.mark.asyncio
    async def test_returns_parsed_json(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            method="POST", url=URL, json={"jsonrpc": "2.0", "id": 1, "result": None}
        )
        result = await HttpxTransport().post_json(URL, PAYLOAD)
        assert result == {"jsonrpc": "2.0", "id": 1, "result": None}

    @pytest.mark.asyncio
    async def test_sends_json_body(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=URL, json={})
        await HttpxTransport().post_json(URL, PAYLOAD)
        requests = httpx_mock.get_requests()
        assert len(requests) == 1
        assert json.loads(requests[0].content) == PAYLOAD
        assert requests[0].headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_sends_custom_headers(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=URL, json={})
        await HttpxTransport(headers={"X-Client": "diem-client"}).post_json(URL, PAYLOAD)
        assert httpx_mock.get_requests()[0].headers["X-Client"] == "diem-client"


class TestHttpxTransportFailure:
    @pytest.mark.asyncio
    async def test_timeout(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"))
        with pytest.raises(TransportError) as excinfo:
            await HttpxTransport(timeout=1.5).post_json(URL, PAYLOAD)
        assert excinfo.value.error_code == "TIMEOUT"
        assert excinfo.value.details["timeout_s"] == 1.5

    @pytest.mark.asyncio
    async def test_connect_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("refused"))
        with pytest.raises(TransportError) as excinfo:
            await HttpxTransport().post_json(URL, PAYLOAD)
        assert excinfo.value.error_code == "CONNECTION_FAILED"

    @pytest.mark.asyncio
    async def test_other_http_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.RemoteProtocolError("bad framing"))
        with pytest.raises(TransportError) as excinfo:
            await HttpxTransport().post_json(URL, PAYLOAD)
        assert excinfo.value.error_code == "HTTP_ERROR"

    @pytest.mark.asyncio
    async def test_http_status_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=URL, status_code=503)
        with pytest.raises(TransportError) as excinfo:
            await HttpxTransport().post_json(URL, PAYLOAD)
        assert excinfo.value.error_code == "HTTP_ERROR"
        assert excinfo.value.details["status_code"] == 503

    @pytest.mark.asyncio
    async def test_invalid_json(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=URL, text="not json")
        with pytest.raises(TransportError) as excinfo:
            await HttpxTransport().post_json(URL, PAYLOAD)
        assert excinfo.value.error_code == "INVALID_JSON"

    @pytest.mark.asyncio
    async def test_non_object_json(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=URL, json=[1, 2])
        with pytest.raises(TransportError) as excinfo:
            await HttpxTransport().post_json(URL, PAYLOAD)
        assert excinfo.value.error_code == "INVALID_JSON"
        assert excinfo.value.details["type"] == "list"
