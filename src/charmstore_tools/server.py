"""Charmstore Tools MCP Server.

Search the juju charmstore and inspect charms and bundles.

Environment variables:
    CHARMSTORE_URL: charmstore base URL (default: https://api.jujucharms.com/charmstore/).
    CHARMSTORE_API_VERSION: API version segment (default: v5).
    CHARMSTORE_TIMEOUT: request timeout in seconds (default: 15.0).
"""

import logging
import os
import sys
from importlib.resources import files
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from .client import DEFAULT_API_VERSION, DEFAULT_CHARMSTORE_URL, CharmstoreClient
from .transport import DEFAULT_TIMEOUT, HttpxChannel

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("charmstore_tools")

mcp = FastMCP(
    "charmstore-tools",
    instructions=(
        "Before searching the charmstore or fetching charms and bundles, read the "
        "skill://charmstore-tools/usage resource for workflow guidance."
    ),
)

# ---------------------------------------------------------------------------
# Lazy client initialization
# ---------------------------------------------------------------------------

_charmstore_client: CharmstoreClient | None = None


def _get_charmstore_client() -> CharmstoreClient:
    """Lazily initialize the charmstore client."""
    global _charmstore_client
    if _charmstore_client is None:
        url = os.environ.get("CHARMSTORE_URL", DEFAULT_CHARMSTORE_URL)
        version = os.environ.get("CHARMSTORE_API_VERSION", DEFAULT_API_VERSION)
        timeout = float(os.environ.get("CHARMSTORE_TIMEOUT", DEFAULT_TIMEOUT))
        _charmstore_client = CharmstoreClient(
            url=url,
            api_version=version,
            channel=HttpxChannel(timeout=timeout),
            process_entity=lambda entity: entity.as_dict(),
        )
        logger.info("Initialized CharmstoreClient at %s%s", url, version)
    return _charmstore_client


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"status": "healthy", "service": "charmstore-tools"})


# ---------------------------------------------------------------------------
# Charmstore tools
# ---------------------------------------------------------------------------


@mcp.tool()
async def charmstore_search(query: str, limit: int = 30) -> dict[str, Any]:
    """Search the charmstore for charms and bundles.

    Args:
        query: Search text (e.g., 'mysql', 'apache', 'kubernetes').
        limit: Maximum number of results.

    Returns:
        Search results with count and query.
    """
    client = _get_charmstore_client()
    results = await client.search({"text": query}, limit=limit)

    return {
        "results": results,
        "count": len(results),
        "query": query,
    }


@mcp.tool()
async def charmstore_get_entity(entity_id: str) -> dict[str, Any]:
    """Get the normalized metadata of a charm or bundle.

    Args:
        entity_id: Charmstore id (e.g., 'cs:trusty/mysql-38', 'cs:bundle/wiki-simple-4').

    Returns:
        Entity dict with options, relations and files for charms, or the
        deployer file URL for bundles.
    """
    client = _get_charmstore_client()
    entities = await client.get_entity(entity_id)
    return entities[0]


@mcp.tool()
async def charmstore_list_versions(charm_id: str) -> dict[str, Any]:
    """List the revisions of a charm in the same series.

    Args:
        charm_id: Charmstore id (e.g., 'cs:trusty/mysql-38').

    Returns:
        Charm id and the matching revision ids in store order.
    """
    client = _get_charmstore_client()
    versions = await client.get_available_versions(charm_id)
    return {"charm_id": charm_id, "versions": versions}


@mcp.tool()
async def charmstore_get_bundle_yaml(entity_id: str) -> str:
    """Fetch the bundle.yaml of a bundle.

    Args:
        entity_id: Bundle id (e.g., 'cs:bundle/wiki-simple-4').
    """
    client = _get_charmstore_client()
    return await client.get_bundle_yaml(entity_id)


@mcp.tool()
def charmstore_diagram_url(entity_id: str) -> str:
    """Return the URL of the SVG diagram for a charm or bundle."""
    return _get_charmstore_client().get_diagram_url(entity_id)


# ---------------------------------------------------------------------------
# SKILL.md resource
# ---------------------------------------------------------------------------

try:
    SKILL_CONTENT = files("charmstore_tools").joinpath("SKILL.md").read_text()
except FileNotFoundError:
    SKILL_CONTENT = "Charmstore tools for searching charms and bundles and inspecting their metadata."


@mcp.resource("skill://charmstore-tools/usage")
def charmstore_tools_skill() -> str:
    """How to effectively use charmstore tools."""
    return SKILL_CONTENT


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------

app = mcp.http_app()

if __name__ == "__main__":
    logger.info("Running in stdio mode")
    mcp.run()
