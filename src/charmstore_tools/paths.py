"""URL construction for the charmstore API."""

from __future__ import annotations

SCHEME_PREFIX = "cs:"


def strip_scheme(entity_id: str) -> str:
    """Remove the leading ``cs:`` from an entity id, if present."""
    return entity_id.removeprefix(SCHEME_PREFIX)


class PathBuilder:
    """Builds versioned charmstore URLs.

    ``base_url`` is used verbatim, so it normally ends with a slash
    (``https://api.jujucharms.com/charmstore/``) and ``api_version`` is the
    bare version segment (``v5``).
    """

    def __init__(self, base_url: str, api_version: str) -> None:
        self.base_url = base_url
        self.api_version = api_version

    def build(self, endpoint: str, query: str | None = None, extension: str | None = None) -> str:
        """Return ``<base><version>/<endpoint><extension>?<query>``."""
        if extension:
            endpoint = endpoint + extension
        query = f"?{query}" if query else ""
        return f"{self.base_url}{self.api_version}/{endpoint}{query}"
