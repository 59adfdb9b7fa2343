"""Stratum classification registration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from vegx.document import VegXDocument
from vegx.models import EntityKind, Stratum
from vegx.models.definitions import StrataDefinition
from vegx.resolution.methods import MethodResolver, ResolvedMethod

logger = logging.getLogger(__name__)


@dataclass
class ResolvedStrata:
    """A registered stratum classification."""

    method: ResolvedMethod
    stratum_ids: dict[str, str] = field(default_factory=dict)
    """Stratum name -> stratum ID."""

    def get(self, stratum_name: str) -> str | None:
        return self.stratum_ids.get(stratum_name)

    @property
    def names(self) -> list[str]:
        return list(self.stratum_ids)


class StratumResolver:
    """Registers a stratum classification and its strata once per method name."""

    def __init__(self, document: VegXDocument, methods: MethodResolver) -> None:
        self.document = document
        self.methods = methods

    def resolve(self, definition: StrataDefinition) -> ResolvedStrata:
        """Register ``definition`` or rebuild its name table from the document."""
        method = self.methods.resolve(definition.method, label="Stratum definition method")
        resolved = ResolvedStrata(method=method)
        log_level = self.methods.log_level

        if not method.created:
            for stratum_id, stratum in self.document.strata_for_method(method.method_id):
                resolved.stratum_ids[stratum.stratum_name] = stratum_id
            logger.log(log_level, "Stratum definition '%s' already included.", method.name)
            return resolved

        for spec in definition.strata:
            stratum_id = self.document.reserve_id(EntityKind.STRATUM)
            stratum = Stratum(**spec.model_dump(), method_id=method.method_id)
            self.document.put(EntityKind.STRATUM, stratum_id, stratum)
            resolved.stratum_ids[stratum.stratum_name] = stratum_id

        logger.log(log_level, "%d new stratum definitions added.", len(definition.strata))
        return resolved
