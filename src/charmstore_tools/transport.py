"""Request dispatch through an authenticating channel.

The adapter never looks at status codes: the channel decides whether a
response succeeded, and the adapter only parses bodies and extracts error
messages. Self-contained (httpx only).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from .errors import ParseError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


@dataclass(frozen=True)
class ChannelResponse:
    """Raw outcome of a channel send."""

    ok: bool
    text: str


class Channel(Protocol):
    """Authenticating transport consumed by the adapter."""

    async def send(self, path: str, method: str, body: str | None) -> ChannelResponse:
        ...


class HttpxChannel:
    """Channel backed by httpx.

    Credentials (macaroon cookies, auth headers, an ``httpx.Auth``) are passed
    through to every request unchanged.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Mapping[str, str] | None = None,
        cookies: Mapping[str, str] | None = None,
        auth: httpx.Auth | None = None,
    ) -> None:
        self._timeout = timeout
        self._headers = dict(headers or {})
        self._cookies = dict(cookies or {})
        self._auth = auth

    async def send(self, path: str, method: str, body: str | None) -> ChannelResponse:
        headers = dict(self._headers)
        if body is not None:
            headers.setdefault("Content-Type", "application/json")
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, cookies=self._cookies, auth=self._auth
            ) as client:
                response = await client.request(method, path, content=body, headers=headers)
        except httpx.RequestError as exc:
            logger.warning("Request to %s failed: %s", path, exc)
            return ChannelResponse(ok=False, text=str(exc) or exc.__class__.__name__)
        return ChannelResponse(ok=response.is_success, text=response.text)


def _error_message(text: str) -> tuple[str, Any]:
    """Pull a readable message out of a failure body."""
    try:
        data = json.loads(text)
    except ValueError:
        return text, text
    if isinstance(data, dict):
        message = data.get("Message") or data.get("message")
        if message:
            return str(message), data
    return text, data


class TransportAdapter:
    """GET/POST JSON requests over a channel."""

    def __init__(self, channel: Channel) -> None:
        self._channel = channel

    async def _send(self, path: str, method: str, body: str | None) -> str:
        logger.debug("%s %s", method, path)
        response = await self._channel.send(path, method, body)
        if not response.ok:
            message, data = _error_message(response.text)
            logger.warning("%s %s failed: %s", method, path, message)
            raise TransportError(message, data)
        return response.text

    async def request(self, path: str, method: str = "GET", body: Any = None) -> Any:
        """Send a request and return the parsed JSON response."""
        if method == "GET":
            payload = None
        elif method == "POST":
            payload = json.dumps(body)
        else:
            raise ValueError(f"Unsupported method: {method}")

        text = await self._send(path, method, payload)
        try:
            return json.loads(text)
        except ValueError as exc:
            raise ParseError(f"Invalid JSON from {path}: {exc}", text) from exc

    async def request_text(self, path: str) -> str:
        """GET a path and return the raw response body."""
        return await self._send(path, "GET", None)
