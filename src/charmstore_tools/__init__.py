"""Charmstore API client with entity normalization."""

from .client import CharmstoreClient
from .entity import Bundle, Charm, Entity, EntityProcessor, transform_query_results
from .environment import EnvironmentClient
from .errors import CharmstoreError, ParseError, ShapeError, TransportError
from .normalize import lower_case_keys
from .paths import PathBuilder, strip_scheme
from .transport import Channel, ChannelResponse, HttpxChannel, TransportAdapter
from .versions import VersionResolver

__all__ = [
    "Bundle",
    "Channel",
    "ChannelResponse",
    "Charm",
    "CharmstoreClient",
    "CharmstoreError",
    "Entity",
    "EntityProcessor",
    "EnvironmentClient",
    "HttpxChannel",
    "ParseError",
    "PathBuilder",
    "ShapeError",
    "TransportAdapter",
    "TransportError",
    "VersionResolver",
    "lower_case_keys",
    "strip_scheme",
    "transform_query_results",
]
