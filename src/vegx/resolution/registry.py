"""Identity registry: natural key -> stable entity ID.

The registry answers one question per row and entity kind: has an entity
with this natural key already been registered in the document? If so its
ID is reused; otherwise the next sequential ID for the kind is minted.
The registry never stores records itself. Callers follow the pattern::

    plot_id, created = registry.resolve(EntityKind.PLOT, (plot_name,))
    if created:
        document.put(EntityKind.PLOT, plot_id, Plot(plot_name=plot_name))

Existing entities are indexed lazily, once per kind, the first time a
kind is resolved. After that every lookup is a dict hit.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable
from typing import Any

from vegx.document import VegXDocument
from vegx.models.enums import EntityKind

logger = logging.getLogger(__name__)

NaturalKey = tuple[Hashable, ...]
"""Composite natural key; each component is compared exactly."""

KeyFunction = Callable[[VegXDocument, Any], NaturalKey]


def _organism_identity_key(document: VegXDocument, record: Any) -> NaturalKey:
    name = document.get(EntityKind.ORGANISM_NAME, record.original_organism_name_id)
    # The concept citation is never populated, so it is always ""
    return (name.name, "")


KEY_FUNCTIONS: dict[EntityKind, KeyFunction] = {
    EntityKind.PLOT: lambda _, r: (r.plot_name,),
    EntityKind.PLOT_OBSERVATION: lambda _, r: (r.plot_id, r.obs_start_date.isoformat()),
    EntityKind.ORGANISM_NAME: lambda _, r: (r.name, r.taxon),
    EntityKind.ORGANISM_IDENTITY: _organism_identity_key,
    EntityKind.METHOD: lambda _, r: (r.name,),
    EntityKind.LITERATURE_CITATION: lambda _, r: (r.citation_string,),
    EntityKind.STRATUM_OBSERVATION: lambda _, r: (r.plot_observation_id, r.stratum_id),
    EntityKind.INDIVIDUAL_ORGANISM: lambda _, r: (r.plot_id, r.individual_organism_label),
    EntityKind.AGGREGATE_OBSERVATION: lambda _, r: (
        r.plot_observation_id,
        r.stratum_observation_id or "",
        r.organism_identity_id,
    ),
    EntityKind.INDIVIDUAL_OBSERVATION: lambda _, r: (
        r.plot_observation_id,
        r.individual_organism_id,
    ),
}
"""How to recover the natural key of a stored record, per kind.

Attributes and strata have no natural key of their own; they are always
registered in bulk under their method.
"""


class IdentityRegistry:
    """Assign-or-reuse surrogate IDs for one integration call.

    Besides the key -> ID cache, the registry remembers which keys were
    touched during the call and how many of them were new, which feeds
    the end-of-call summary.

    Usage:
        registry = IdentityRegistry(document)
        plot_id, created = registry.resolve(EntityKind.PLOT, ("PlotA",))
    """

    def __init__(self, document: VegXDocument) -> None:
        self.document = document
        self._index: dict[EntityKind, dict[NaturalKey, str]] = {}
        self._parsed: dict[EntityKind, dict[NaturalKey, None]] = {}
        self._added: dict[EntityKind, int] = {}

    def _ensure_index(self, kind: EntityKind) -> dict[NaturalKey, str]:
        index = self._index.get(kind)
        if index is not None:
            return index

        key_function = KEY_FUNCTIONS.get(kind)
        if key_function is None:
            raise ValueError(f"Entities of kind '{kind.value}' have no natural key")

        index = {}
        for entity_id, record in self.document.items(kind):
            # First registration wins if a loaded document carries duplicates
            index.setdefault(key_function(self.document, record), entity_id)
        self._index[kind] = index
        logger.debug("Indexed %d existing %s", len(index), kind.label)
        return index

    def resolve(self, kind: EntityKind, key: NaturalKey) -> tuple[str, bool]:
        """Return the ID registered for ``key``, minting one if needed.

        Args:
            kind: Entity collection the key belongs to.
            key: Natural key, compared by exact equality.

        Returns:
            Tuple of (entity ID, created). When ``created`` is True the
            caller must construct and store the record under that ID.
        """
        index = self._ensure_index(kind)
        self._parsed.setdefault(kind, {})[key] = None

        entity_id = index.get(key)
        if entity_id is not None:
            return entity_id, False

        entity_id = self.document.reserve_id(kind)
        index[key] = entity_id
        self._added[kind] = self._added.get(kind, 0) + 1
        logger.debug("New %s ID %s for key %r", kind.value, entity_id, key)
        return entity_id, True

    def lookup(self, kind: EntityKind, key: NaturalKey) -> str | None:
        """Return the ID registered for ``key`` without minting one."""
        return self._ensure_index(kind).get(key)

    def parsed(self, kind: EntityKind) -> int:
        """Number of distinct keys resolved for ``kind`` in this call."""
        return len(self._parsed.get(kind, {}))

    def added(self, kind: EntityKind) -> int:
        """Number of IDs minted for ``kind`` in this call."""
        return self._added.get(kind, 0)
