"""Client for the Juju Environment Manager (JEM) API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .errors import ShapeError
from .transport import Channel, TransportAdapter

logger = logging.getLogger(__name__)


class EnvironmentClient:
    """Lists, fetches and creates environments on a JEM instance."""

    def __init__(self, url: str, channel: Channel) -> None:
        self._jem_url = url.rstrip("/") + "/v1"
        self._adapter = TransportAdapter(channel)

    def _path(self, *segments: str) -> str:
        return "/".join((self._jem_url, *segments))

    async def _listing(self, endpoint: str, key: str) -> list[dict[str, Any]]:
        path = self._path(endpoint)
        data = await self._adapter.request(path)
        if not isinstance(data, Mapping):
            raise ShapeError(f"{path} did not return an object")
        return data.get(key) or []

    async def list_environments(self) -> list[dict[str, Any]]:
        return await self._listing("env", "environments")

    async def list_servers(self) -> list[dict[str, Any]]:
        return await self._listing("server", "state-servers")

    async def get_environment(self, owner: str, name: str) -> dict[str, Any]:
        return await self._adapter.request(self._path("env", owner, name))

    async def new_environment(
        self,
        owner: str,
        name: str,
        base_template: str,
        state_server: str,
        password: str,
    ) -> Any:
        """Create an environment from a config template on a state server."""
        body = {
            "name": name,
            "password": password,
            "templates": [base_template],
            "state-server": state_server,
        }
        logger.info("Creating environment %s/%s on %s", owner, name, state_server)
        return await self._adapter.request(self._path("env", owner), "POST", body)
