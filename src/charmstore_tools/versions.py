"""Revision listing for charms."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .errors import ShapeError
from .paths import PathBuilder, strip_scheme
from .transport import TransportAdapter

logger = logging.getLogger(__name__)


def series_of(charm_id: str) -> str:
    """Return the series segment of a charm id.

    ``cs:trusty/mysql-5`` -> ``trusty``; a leading ``~user`` namespace is
    skipped, so ``cs:~alice/trusty/mysql-5`` -> ``trusty``.

    Skipping the namespace is deliberate: taking the first path component
    would make ``~alice`` the series, and every revision of a user's charm
    would match regardless of its actual series.
    """
    parts = strip_scheme(charm_id).split("/")
    if parts[0].startswith("~") and len(parts) > 1:
        return parts[1]
    return parts[0]


class VersionResolver:
    """Lists the revisions of a charm that share its series."""

    def __init__(self, adapter: TransportAdapter, paths: PathBuilder) -> None:
        self._adapter = adapter
        self._paths = paths

    async def get_available_versions(self, charm_id: str) -> list[str]:
        entity_id = strip_scheme(charm_id)
        series = series_of(entity_id)
        items = await self._adapter.request(self._paths.build(entity_id, extension="/expand-id"))
        if not isinstance(items, list):
            raise ShapeError(f"expand-id for {charm_id} did not return a list")

        versions = []
        for item in items:
            if not isinstance(item, Mapping) or not isinstance(item.get("Id"), str):
                raise ShapeError(f"expand-id for {charm_id} returned an entry without 'Id'")
            if series in item["Id"]:
                versions.append(item["Id"])
        logger.debug("%d of %d revisions of %s match series %s", len(versions), len(items), charm_id, series)
        return versions
