"""Tests for HttpxChannel and TransportAdapter.

Verifies success/failure routing, JSON parsing, error message extraction
and POST serialization using httpx.MockTransport.
"""

from __future__ import annotations

import json

import httpx
import pytest

from charmstore_tools.errors import ParseError, TransportError
from charmstore_tools.transport import ChannelResponse, HttpxChannel, TransportAdapter

URL = "https://api.jujucharms.com/charmstore/v5/search"


class StaticChannel:
    def __init__(self, ok: bool, text: str) -> None:
        self.response = ChannelResponse(ok=ok, text=text)
        self.sent = []

    async def send(self, path, method, body):
        self.sent.append((path, method, body))
        return self.response


@pytest.mark.asyncio
async def test_channel_success(patch_httpx):
    """2xx responses are routed to success with the raw body."""

    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        return httpx.Response(200, json={"Results": []})

    with patch_httpx(handler):
        response = await HttpxChannel().send(URL, "GET", None)
    assert response.ok is True
    assert json.loads(response.text) == {"Results": []}


@pytest.mark.asyncio
async def test_channel_http_failure(patch_httpx):
    """Non-2xx responses are routed to failure, body preserved."""

    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"Message": "not found"})

    with patch_httpx(handler):
        response = await HttpxChannel().send(URL, "GET", None)
    assert response.ok is False
    assert "not found" in response.text


@pytest.mark.asyncio
async def test_channel_network_error_is_a_failure(patch_httpx):
    """Connection errors become failed responses instead of raising."""

    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with patch_httpx(handler):
        response = await HttpxChannel().send(URL, "GET", None)
    assert response.ok is False
    assert response.text == "connection refused"


@pytest.mark.asyncio
async def test_channel_sends_credentials_and_json_body(patch_httpx):
    """Configured headers travel with every request; POST bodies are JSON."""
    seen = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["macaroons"] = request.headers.get("Macaroons")
        seen["content_type"] = request.headers.get("Content-Type")
        seen["body"] = request.content
        return httpx.Response(200, json={})

    with patch_httpx(handler):
        channel = HttpxChannel(headers={"Macaroons": "abc123"})
        await channel.send(URL, "POST", '{"name": "env"}')

    assert seen["method"] == "POST"
    assert seen["macaroons"] == "abc123"
    assert seen["content_type"] == "application/json"
    assert seen["body"] == b'{"name": "env"}'


@pytest.mark.asyncio
async def test_adapter_parses_json():
    channel = StaticChannel(True, '{"Id": "cs:trusty/mysql-38"}')
    data = await TransportAdapter(channel).request(URL)
    assert data == {"Id": "cs:trusty/mysql-38"}
    assert channel.sent == [(URL, "GET", None)]


@pytest.mark.asyncio
async def test_adapter_get_ignores_body():
    channel = StaticChannel(True, "{}")
    await TransportAdapter(channel).request(URL, "GET", {"ignored": True})
    assert channel.sent == [(URL, "GET", None)]


@pytest.mark.asyncio
async def test_adapter_post_serializes_body():
    channel = StaticChannel(True, "{}")
    await TransportAdapter(channel).request(URL, "POST", {"name": "env", "templates": ["t"]})
    path, method, body = channel.sent[0]
    assert method == "POST"
    assert json.loads(body) == {"name": "env", "templates": ["t"]}


@pytest.mark.asyncio
async def test_adapter_rejects_other_methods():
    with pytest.raises(ValueError):
        await TransportAdapter(StaticChannel(True, "{}")).request(URL, "DELETE")


@pytest.mark.asyncio
async def test_failure_message_from_capitalized_field():
    adapter = TransportAdapter(StaticChannel(False, '{"Message": "not found", "Code": "not found"}'))
    with pytest.raises(TransportError) as exc_info:
        await adapter.request(URL)
    assert str(exc_info.value) == "not found"
    assert exc_info.value.message == "not found"
    assert exc_info.value.body == {"Message": "not found", "Code": "not found"}


@pytest.mark.asyncio
async def test_failure_message_from_lowercase_field():
    adapter = TransportAdapter(StaticChannel(False, '{"message": "unauthorized"}'))
    with pytest.raises(TransportError, match="unauthorized"):
        await adapter.request(URL)


@pytest.mark.asyncio
async def test_failure_without_message_uses_raw_body():
    adapter = TransportAdapter(StaticChannel(False, '{"error": "boom"}'))
    with pytest.raises(TransportError) as exc_info:
        await adapter.request(URL)
    assert exc_info.value.message == '{"error": "boom"}'
    assert exc_info.value.body == {"error": "boom"}


@pytest.mark.asyncio
async def test_failure_with_non_json_body():
    adapter = TransportAdapter(StaticChannel(False, "Internal Server Error"))
    with pytest.raises(TransportError) as exc_info:
        await adapter.request(URL)
    assert exc_info.value.message == "Internal Server Error"
    assert exc_info.value.body == "Internal Server Error"


@pytest.mark.asyncio
async def test_invalid_json_success_raises_parse_error():
    adapter = TransportAdapter(StaticChannel(True, "<html>"))
    with pytest.raises(ParseError) as exc_info:
        await adapter.request(URL)
    assert exc_info.value.text == "<html>"
    assert not isinstance(exc_info.value, TransportError)


@pytest.mark.asyncio
async def test_request_text_returns_raw_body():
    adapter = TransportAdapter(StaticChannel(True, "series: trusty\n"))
    assert await adapter.request_text(URL) == "series: trusty\n"
