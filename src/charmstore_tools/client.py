"""Async client for the juju charmstore API.

Looks up charms and bundles, searches the store, and fetches archive files
and revision lists. Responses are normalized into ``Charm``/``Bundle``
entities; nothing is cached, so every call is a fresh round trip.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote

from .entity import BUNDLE_FILENAME, Entity, EntityProcessor, transform_query_results
from .errors import ShapeError
from .paths import PathBuilder, strip_scheme
from .transport import Channel, HttpxChannel, TransportAdapter
from .versions import VersionResolver

logger = logging.getLogger(__name__)

DEFAULT_CHARMSTORE_URL = "https://api.jujucharms.com/charmstore/"
DEFAULT_API_VERSION = "v5"
DEFAULT_SEARCH_LIMIT = 30

ENTITY_INCLUDES = (
    "bundle-metadata",
    "charm-metadata",
    "charm-config",
    "manifest",
    "stats",
    "charm-related",
    "extra-info",
)
SEARCH_INCLUDES = (
    "charm-metadata",
    "charm-config",
    "bundle-metadata",
    "extra-info",
    "stats",
)


def _includes(names: tuple[str, ...]) -> str:
    return "&".join(f"include={name}" for name in names)


def build_search_query(filters: Mapping[str, Any], limit: int | None = None) -> str:
    """Compose the search query string.

    Filters come first in mapping order; a filter with a falsy value (``None``,
    ``""``, ``False``, ``0``, ``[]``) is sent as a bare flag (``promulgated``)
    and list values are comma-joined (``series=trusty,xenial``). The limit and
    include flags follow.
    """
    parts = []
    for key, value in filters.items():
        if not value:
            parts.append(key)
            continue
        if isinstance(value, (list, tuple)):
            value = ",".join(str(item) for item in value)
        parts.append(f"{key}={quote(str(value), safe=',')}")
    parts.append(f"limit={limit or DEFAULT_SEARCH_LIMIT}")
    parts.append(_includes(SEARCH_INCLUDES))
    return "&".join(parts)


class CharmstoreClient:
    """Async charmstore API client.

    Args:
        url: Charmstore base URL including the trailing slash.
        api_version: API version segment, e.g. ``v5``.
        channel: Authenticating channel requests are sent through.
        process_entity: Optional hook applied to every entity before it is
            returned (e.g. to build model objects).
    """

    def __init__(
        self,
        url: str = DEFAULT_CHARMSTORE_URL,
        api_version: str = DEFAULT_API_VERSION,
        channel: Channel | None = None,
        process_entity: Callable[[Entity], Any] | None = None,
    ) -> None:
        if channel is None:
            channel = HttpxChannel()
        self.paths = PathBuilder(url, api_version)
        self.process_entity = process_entity
        self._adapter = TransportAdapter(channel)
        self._processor = EntityProcessor(self.paths)
        self._versions = VersionResolver(self._adapter, self.paths)

    async def _entities(self, path: str) -> list[Any]:
        body = await self._adapter.request(path)
        return transform_query_results(body, self._processor, self.process_entity)

    async def get_entity(self, entity_id: str) -> list[Any]:
        """Fetch a charm or bundle; returns a one-element list."""
        path = self.paths.build(entity_id, _includes(ENTITY_INCLUDES), "/meta/any")
        return await self._entities(path)

    async def search(self, filters: Mapping[str, Any], limit: int = DEFAULT_SEARCH_LIMIT) -> list[Any]:
        """Search the store with filters such as ``{"text": "apache"}``."""
        path = self.paths.build("search", build_search_query(filters, limit))
        return await self._entities(path)

    async def get_file(self, entity_id: str, filename: str) -> str:
        """Fetch one file from a charm or bundle archive as text."""
        path = self.paths.build(strip_scheme(entity_id), extension=f"/archive/{filename}")
        return await self._adapter.request_text(path)

    def get_diagram_url(self, entity_id: str) -> str:
        return self.paths.build(strip_scheme(entity_id), extension="/diagram.svg")

    async def get_bundle_yaml(self, entity_id: str) -> str:
        """Fetch the bundle and then its deployer file contents."""
        entities = await self.get_entity(entity_id)
        url = _deployer_file_url(entities[0])
        if not url:
            raise ShapeError(f"{entity_id} has no {BUNDLE_FILENAME}; is it a bundle?")
        return await self._adapter.request_text(url)

    async def get_available_versions(self, charm_id: str) -> list[str]:
        """List revisions of ``charm_id`` in the same series, in store order."""
        return await self._versions.get_available_versions(charm_id)


def _deployer_file_url(entity: Any) -> str | None:
    # process_entity may hand back mappings or model objects.
    if isinstance(entity, Mapping):
        return entity.get("deployer_file_url")
    return getattr(entity, "deployer_file_url", None)
