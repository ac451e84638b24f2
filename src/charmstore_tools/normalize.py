"""Recursive key lower-casing for charmstore payloads.

Charmstore responses use Go-style keys (``Name``, ``Subordinate``,
``ArchiveDownloadCount``). Consumers expect lower-case keys throughout, and
they also expect list values to arrive as mappings keyed by index
(``{"0": ..., "1": ...}``), so lists never survive normalization.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def _normalize_value(value: Any, exclude: int | None) -> Any:
    if isinstance(value, list):
        value = {str(i): item for i, item in enumerate(value)}
    if isinstance(value, Mapping):
        return lower_case_keys(value, exclude)
    return value


def lower_case_keys(source: Mapping[str, Any] | None, exclude: int | None = None) -> dict[str, Any]:
    """Return a deep copy of ``source`` with every key lower-cased.

    Args:
        source: Mapping to normalize. It is never modified.
        exclude: 0-based recursion level whose keys keep their casing. With
            0 the keys of ``source`` itself are copied verbatim and everything
            below is lower-cased; with 2 only the grandchildren's keys are
            kept. ``None`` lower-cases every level.

    Returns:
        A new dict. When two keys lower-case to the same spelling, the later
        one wins.
    """
    if source is None:
        return {}
    child_exclude = None if exclude is None else exclude - 1
    result: dict[str, Any] = {}
    for key, value in source.items():
        new_key = key if exclude == 0 else key.lower()
        result[new_key] = _normalize_value(value, child_exclude)
    return result
