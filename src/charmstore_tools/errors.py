"""Exceptions raised by the charmstore and JEM clients."""

from __future__ import annotations

from typing import Any


class CharmstoreError(Exception):
    """Base exception for charmstore client errors."""


class TransportError(CharmstoreError):
    """The request failed at the network or HTTP level.

    ``body`` keeps the full error payload: the parsed JSON when the failure
    body was JSON, otherwise the raw text.
    """

    def __init__(self, message: str, body: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.body = body


class ParseError(CharmstoreError):
    """A successful response body was not valid JSON."""

    def __init__(self, message: str, text: str = "") -> None:
        super().__init__(message)
        self.text = text


class ShapeError(CharmstoreError):
    """A catalog record does not have the structure the processor expects."""
