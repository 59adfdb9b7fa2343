"""In-memory Veg-X document: keyed entity collections.

The document holds one insertion-ordered map per entity kind, from
string ID to record. IDs are sequential integers rendered as strings,
independent per kind. Nothing here knows about natural keys; identity
resolution lives in ``vegx.resolution.registry``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import Any

from vegx.models import RECORD_TYPES, Attribute, EntityKind, Stratum, VegXModel
from vegx.models.observation import Measurement

logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT = "vegx-document/1"

# Foreign references per kind: field name -> referenced kind
REFERENCES: dict[EntityKind, dict[str, EntityKind]] = {
    EntityKind.PLOT: {"parent_plot_id": EntityKind.PLOT},
    EntityKind.PLOT_OBSERVATION: {"plot_id": EntityKind.PLOT},
    EntityKind.ORGANISM_IDENTITY: {"original_organism_name_id": EntityKind.ORGANISM_NAME},
    EntityKind.METHOD: {"citation_id": EntityKind.LITERATURE_CITATION},
    EntityKind.ATTRIBUTE: {"method_id": EntityKind.METHOD},
    EntityKind.STRATUM: {"method_id": EntityKind.METHOD},
    EntityKind.STRATUM_OBSERVATION: {
        "plot_observation_id": EntityKind.PLOT_OBSERVATION,
        "stratum_id": EntityKind.STRATUM,
    },
    EntityKind.INDIVIDUAL_ORGANISM: {
        "plot_id": EntityKind.PLOT,
        "organism_identity_id": EntityKind.ORGANISM_IDENTITY,
    },
    EntityKind.AGGREGATE_OBSERVATION: {
        "plot_observation_id": EntityKind.PLOT_OBSERVATION,
        "organism_identity_id": EntityKind.ORGANISM_IDENTITY,
        "stratum_observation_id": EntityKind.STRATUM_OBSERVATION,
    },
    EntityKind.INDIVIDUAL_OBSERVATION: {
        "plot_observation_id": EntityKind.PLOT_OBSERVATION,
        "individual_organism_id": EntityKind.INDIVIDUAL_ORGANISM,
        "stratum_observation_id": EntityKind.STRATUM_OBSERVATION,
    },
}


class VegXDocument:
    """Mutable store of Veg-X entities, one ordered collection per kind.

    Usage:
        document = VegXDocument()
        plot_id = document.reserve_id(EntityKind.PLOT)
        document.put(EntityKind.PLOT, plot_id, Plot(plot_name="A"))
    """

    def __init__(self) -> None:
        self._collections: dict[EntityKind, dict[str, VegXModel]] = {
            kind: {} for kind in EntityKind
        }
        self._counters: dict[EntityKind, int] = {kind: 0 for kind in EntityKind}

    def __repr__(self) -> str:
        non_empty = ", ".join(
            f"{kind.value}={n}" for kind, n in self.counts().items() if n
        )
        return f"VegXDocument({non_empty})"

    # ── Collection access ────────────────────────────────────────────────

    def get(self, kind: EntityKind, entity_id: str) -> Any:
        """Return the record stored under ``entity_id``.

        Raises:
            KeyError: If no such entity exists.
        """
        try:
            return self._collections[kind][entity_id]
        except KeyError:
            raise KeyError(f"No {kind.value} with ID '{entity_id}'") from None

    def has(self, kind: EntityKind, entity_id: str) -> bool:
        return entity_id in self._collections[kind]

    def put(self, kind: EntityKind, entity_id: str, record: VegXModel) -> None:
        """Insert or replace a record.

        Raises:
            TypeError: If ``record`` is not the record class for ``kind``.
        """
        expected = RECORD_TYPES[kind]
        if not isinstance(record, expected):
            raise TypeError(
                f"Cannot store {type(record).__name__} as {kind.value}; "
                f"expected {expected.__name__}"
            )
        self._collections[kind][entity_id] = record
        if entity_id.isdigit():
            self._counters[kind] = max(self._counters[kind], int(entity_id))

    def size(self, kind: EntityKind) -> int:
        return len(self._collections[kind])

    def ids(self, kind: EntityKind) -> list[str]:
        return list(self._collections[kind])

    def items(self, kind: EntityKind) -> Iterator[tuple[str, Any]]:
        """Iterate ``(id, record)`` pairs in insertion order."""
        return iter(list(self._collections[kind].items()))

    def counts(self) -> dict[EntityKind, int]:
        return {kind: len(records) for kind, records in self._collections.items()}

    def reserve_id(self, kind: EntityKind) -> str:
        """Mint the next sequential ID for ``kind``.

        The counter advances immediately, so an ID is never handed out
        twice even if the caller does not store a record under it.
        """
        self._counters[kind] += 1
        return str(self._counters[kind])

    # ── Queries ──────────────────────────────────────────────────────────

    def attributes_for_method(self, method_id: str) -> list[tuple[str, Attribute]]:
        """Attributes owned by a method, in registration order."""
        return [
            (attribute_id, attribute)
            for attribute_id, attribute in self.items(EntityKind.ATTRIBUTE)
            if attribute.method_id == method_id
        ]

    def strata_for_method(self, method_id: str) -> list[tuple[str, Stratum]]:
        """Strata of a classification method, in registration order."""
        return [
            (stratum_id, stratum)
            for stratum_id, stratum in self.items(EntityKind.STRATUM)
            if stratum.method_id == method_id
        ]

    def reference_check(self) -> list[str]:
        """List every foreign reference that does not resolve.

        Returns:
            Human-readable descriptions of dangling references; empty when
            the document is referentially consistent.
        """
        dangling: list[str] = []
        for kind, fields in REFERENCES.items():
            for entity_id, record in self.items(kind):
                for field_name, target in fields.items():
                    ref = getattr(record, field_name)
                    if ref is not None and not self.has(target, ref):
                        dangling.append(
                            f"{kind.value} '{entity_id}'.{field_name} -> "
                            f"missing {target.value} '{ref}'"
                        )
                for label, measurement in _measurements(record):
                    if not self.has(EntityKind.ATTRIBUTE, measurement.attribute_id):
                        dangling.append(
                            f"{kind.value} '{entity_id}'.{label} -> "
                            f"missing attribute '{measurement.attribute_id}'"
                        )
        return dangling

    # ── Snapshots ────────────────────────────────────────────────────────

    def copy(self) -> VegXDocument:
        """Return an independent deep copy of this document."""
        clone = VegXDocument()
        for kind, records in self._collections.items():
            clone._collections[kind] = {
                entity_id: record.model_copy(deep=True) for entity_id, record in records.items()
            }
        clone._counters = dict(self._counters)
        return clone

    def to_json(self, *, indent: int | None = 2) -> str:
        """Serialize the document to a JSON snapshot."""
        payload = {
            "format": SNAPSHOT_FORMAT,
            "counters": {kind.value: n for kind, n in self._counters.items()},
            "collections": {
                kind.value: {
                    entity_id: record.model_dump(mode="json", exclude_none=True)
                    for entity_id, record in records.items()
                }
                for kind, records in self._collections.items()
                if records
            },
        }
        return json.dumps(payload, indent=indent)

    @classmethod
    def from_json(cls, text: str) -> VegXDocument:
        """Rebuild a document from a snapshot produced by :meth:`to_json`.

        Raises:
            ValueError: If the snapshot is malformed or holds invalid records.
        """
        payload = json.loads(text)
        if not isinstance(payload, dict) or payload.get("format") != SNAPSHOT_FORMAT:
            raise ValueError(f"Not a {SNAPSHOT_FORMAT} snapshot")

        document = cls()
        for kind_value, records in payload.get("collections", {}).items():
            kind = EntityKind(kind_value)
            record_type = RECORD_TYPES[kind]
            for entity_id, data in records.items():
                document.put(kind, entity_id, record_type.model_validate(data))
        for kind_value, counter in payload.get("counters", {}).items():
            kind = EntityKind(kind_value)
            document._counters[kind] = max(document._counters[kind], int(counter))

        logger.debug("Loaded document snapshot: %r", document)
        return document


def _measurements(record: VegXModel) -> Iterator[tuple[str, Measurement]]:
    """Yield ``(label, measurement)`` for every measurement held by a record."""
    for field_name in ("height_measurement", "diameter_measurement"):
        measurement = getattr(record, field_name, None)
        if measurement is not None:
            yield field_name, measurement
    for field_name in ("aggregate_organism_measurements", "individual_organism_measurements"):
        for key, measurement in getattr(record, field_name, {}).items():
            yield f"{field_name}[{key}]", measurement
