"""Shared fixtures: raw charmstore records and a recording fake channel."""

from __future__ import annotations

import copy
import json
from unittest.mock import patch

import httpx
import pytest

from charmstore_tools.transport import ChannelResponse

_OriginalAsyncClient = httpx.AsyncClient

CHARM_RECORD = {
    "Id": "cs:trusty/mysql-38",
    "Meta": {
        "charm-metadata": {
            "Name": "mysql",
            "Summary": "MySQL is a fast, stable and true multi-user database.",
            "Description": "MySQL server.",
            "Provides": {
                "db": {"Name": "db", "Role": "provider", "Interface": "mysql"},
            },
            "Subordinate": False,
            "Tags": ["databases", "applications"],
        },
        "charm-config": {
            "Options": {
                "dataset-size": {"Type": "string", "Description": "Memory", "Default": "80%"},
                "Max-Connections": {"Type": "int", "Description": "Max", "Default": -1},
            },
        },
        "extra-info": {
            "bzr-owner": "charmers",
            "bzr-revisions": 5,
            "bzr-url": "lp:~charmers/charms/trusty/mysql/trunk",
        },
        "stats": {"ArchiveDownloadCount": 1234},
        "manifest": [
            {"Name": "README.md", "Size": 10},
            {"Name": "config.yaml", "Size": 20},
        ],
        "charm-related": {
            "Provides": {"mysql": [{"Id": "cs:trusty/wordpress-1"}]},
        },
    },
}

BUNDLE_RECORD = {
    "Id": "cs:bundle/wiki-simple-4",
    "Meta": {
        "bundle-metadata": {
            "Services": {
                "wiki": {"Charm": "cs:trusty/mediawiki-3", "NumUnits": 1},
                "mysql": {"Charm": "cs:trusty/mysql-38", "NumUnits": 1},
            },
            "Relations": [["wiki:db", "mysql:db"]],
            "Series": "trusty",
        },
        "extra-info": {"bzr-owner": "charmers", "bzr-revisions": 2, "bzr-url": "lp:wiki"},
        "stats": {"ArchiveDownloadCount": 42},
    },
}


class FakeChannel:
    """Channel that answers from a table of path fragments and records requests."""

    def __init__(self, responses: dict[str, ChannelResponse] | None = None) -> None:
        self.responses = dict(responses or {})
        self.requests: list[tuple[str, str, str | None]] = []

    async def send(self, path: str, method: str, body: str | None) -> ChannelResponse:
        self.requests.append((path, method, body))
        for fragment, response in self.responses.items():
            if fragment in path:
                return response
        return ChannelResponse(ok=False, text='{"Message": "not found"}')

    @property
    def paths(self) -> list[str]:
        return [path for path, _, _ in self.requests]


def ok_json(data) -> ChannelResponse:
    return ChannelResponse(ok=True, text=json.dumps(data))


@pytest.fixture
def charm_record():
    return copy.deepcopy(CHARM_RECORD)


@pytest.fixture
def bundle_record():
    return copy.deepcopy(BUNDLE_RECORD)


@pytest.fixture
def make_channel():
    return FakeChannel


@pytest.fixture
def ok():
    return ok_json


@pytest.fixture
def patch_httpx():
    """Route ``httpx.AsyncClient`` in the transport module through a mock handler."""

    def _patch(handler):
        transport = httpx.MockTransport(handler)

        def factory(**kwargs):
            kwargs.pop("timeout", None)
            return _OriginalAsyncClient(transport=transport, **kwargs)

        return patch("charmstore_tools.transport.httpx.AsyncClient", factory)

    return _patch
