"""Charm and bundle entities built from charmstore ``meta/any`` records."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import ShapeError
from .normalize import lower_case_keys
from .paths import PathBuilder, strip_scheme

logger = logging.getLogger(__name__)

BUNDLE_FILENAME = "bundle.yaml"


@dataclass
class Entity:
    """Fields shared by charms and bundles.

    ``metadata`` holds the normalized charm or bundle metadata; ``as_dict``
    flattens it onto the top level, which is the shape UI consumers read.
    """

    id: str
    name: str
    owner: str | None = None
    revisions: Any = None
    downloads: int | None = None
    code_source: dict[str, Any] = field(default_factory=dict)
    is_approved: bool = True
    related_charms: dict[str, Any] | None = None
    files: list[str] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    entity_type = "entity"

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "entity_type": self.entity_type,
            "owner": self.owner,
            "revisions": self.revisions,
            "downloads": self.downloads,
            "code_source": self.code_source,
            "is_approved": self.is_approved,
        }
        if self.related_charms is not None:
            data["related_charms"] = self.related_charms
        data.update(self.metadata)
        data["name"] = self.name
        if self.files is not None:
            data["files"] = self.files
        return data


@dataclass
class Charm(Entity):
    options: dict[str, Any] | None = None
    relations: dict[str, Any] = field(
        default_factory=lambda: {"provides": {}, "requires": {}}
    )
    is_subordinate: bool = False

    entity_type = "charm"

    def as_dict(self) -> dict[str, Any]:
        data = super().as_dict()
        if self.options is not None:
            data["options"] = self.options
        data["relations"] = self.relations
        data["is_subordinate"] = self.is_subordinate
        return data


@dataclass
class Bundle(Entity):
    deployer_file_url: str = ""

    entity_type = "bundle"

    def as_dict(self) -> dict[str, Any]:
        data = super().as_dict()
        data["deployer_file_url"] = self.deployer_file_url
        return data


def _mapping(meta: Mapping[str, Any], key: str) -> Mapping[str, Any] | None:
    value = meta.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ShapeError(f"Meta[{key!r}] must be an object, got {type(value).__name__}")
    return value


def is_approved(entity_id: str) -> bool:
    """Ids with a ``~user`` namespace have not been promulgated."""
    return "~" not in strip_scheme(entity_id)


def name_from_id(entity_id: str) -> str:
    """Derive a name from the id: ``cs:bundle/myapp-django-12`` -> ``myapp-django``."""
    last = entity_id.split("/")[-1]
    return "-".join(last.split("-")[:-1])


class EntityProcessor:
    """Turns raw charmstore records into ``Charm`` or ``Bundle`` entities."""

    def __init__(self, paths: PathBuilder) -> None:
        self._paths = paths

    def process(self, record: Mapping[str, Any]) -> Charm | Bundle:
        if not isinstance(record, Mapping):
            raise ShapeError(f"Record must be an object, got {type(record).__name__}")
        entity_id = record.get("Id")
        if not isinstance(entity_id, str):
            raise ShapeError("Record has no string 'Id'")
        meta = record.get("Meta")
        if not isinstance(meta, Mapping):
            raise ShapeError(f"Record {entity_id} has no 'Meta' object")

        extra_info = _mapping(meta, "extra-info") or {}
        charm_meta = _mapping(meta, "charm-metadata")
        bundle_meta = _mapping(meta, "bundle-metadata")
        charm_config = _mapping(meta, "charm-config")
        related = _mapping(meta, "charm-related")
        stats = _mapping(meta, "stats") or {}

        if charm_meta is not None and bundle_meta is not None:
            raise ShapeError(f"Record {entity_id} has both charm and bundle metadata")
        if charm_meta is None and bundle_meta is None:
            raise ShapeError(f"Record {entity_id} has neither charm nor bundle metadata")

        metadata = lower_case_keys(charm_meta if charm_meta is not None else bundle_meta)
        common: dict[str, Any] = {
            "id": entity_id,
            "name": metadata.pop("name", None) or name_from_id(entity_id),
            "owner": extra_info.get("bzr-owner"),
            "revisions": extra_info.get("bzr-revisions"),
            "downloads": stats.get("ArchiveDownloadCount"),
            "code_source": {"location": extra_info.get("bzr-url")},
            "is_approved": is_approved(entity_id),
            "files": self._files(entity_id, meta.get("manifest")),
        }
        if related is not None:
            common["related_charms"] = lower_case_keys(related)

        if bundle_meta is not None:
            return Bundle(
                metadata=metadata,
                deployer_file_url=self._paths.build(
                    strip_scheme(entity_id), extension=f"/archive/{BUNDLE_FILENAME}"
                ),
                **common,
            )

        options = None
        if charm_config is not None and isinstance(charm_config.get("Options"), Mapping):
            # Option names are case-sensitive identifiers; keep them verbatim.
            options = lower_case_keys(charm_config["Options"], 0)
        relations = {
            "provides": metadata.pop("provides", None) or {},
            "requires": metadata.pop("requires", None) or {},
        }
        return Charm(
            metadata=metadata,
            options=options,
            relations=relations,
            is_subordinate=bool(metadata.get("subordinate")),
            **common,
        )

    def _files(self, entity_id: str, manifest: Any) -> list[str] | None:
        if manifest is None:
            return None
        if not isinstance(manifest, list):
            raise ShapeError(f"Record {entity_id} manifest must be a list")
        files = []
        for entry in manifest:
            if not isinstance(entry, Mapping):
                raise ShapeError(f"Record {entity_id} manifest entries must be objects")
            files.append(lower_case_keys(entry).get("name"))
        return files


def transform_query_results(
    body: Any,
    processor: EntityProcessor,
    post_process: Callable[[Entity], Any] | None = None,
) -> list[Any]:
    """Process a ``meta/any`` or search response into a list of entities.

    Search responses wrap records in ``Results``; a single-entity response is
    the record itself and is treated as a one-element list.
    """
    if isinstance(body, Mapping) and "Results" in body:
        records = body["Results"] or []
    else:
        records = [body]

    entities = []
    for record in records:
        entity = processor.process(record)
        if post_process is not None:
            entity = post_process(entity)
        entities.append(entity)
    logger.debug("Processed %d charmstore record(s)", len(entities))
    return entities
