"""Enumerations for the Veg-X data model."""

from enum import Enum


class EntityKind(str, Enum):
    """Entity collections held by a Veg-X document.

    Each kind has its own independent sequence of integer-as-string IDs.
    """

    PLOT = "plot"
    PLOT_OBSERVATION = "plot_observation"
    ORGANISM_NAME = "organism_name"
    ORGANISM_IDENTITY = "organism_identity"
    METHOD = "method"
    ATTRIBUTE = "attribute"
    STRATUM = "stratum"
    STRATUM_OBSERVATION = "stratum_observation"
    INDIVIDUAL_ORGANISM = "individual_organism"
    AGGREGATE_OBSERVATION = "aggregate_observation"
    INDIVIDUAL_OBSERVATION = "individual_observation"
    LITERATURE_CITATION = "literature_citation"

    @property
    def label(self) -> str:
        """Human-readable plural label used in summaries."""
        return _LABELS[self]


_LABELS: dict[EntityKind, str] = {
    EntityKind.PLOT: "plots",
    EntityKind.PLOT_OBSERVATION: "plot observations",
    EntityKind.ORGANISM_NAME: "organism names",
    EntityKind.ORGANISM_IDENTITY: "organism identities",
    EntityKind.METHOD: "methods",
    EntityKind.ATTRIBUTE: "attributes",
    EntityKind.STRATUM: "strata",
    EntityKind.STRATUM_OBSERVATION: "stratum observations",
    EntityKind.INDIVIDUAL_ORGANISM: "individual organisms",
    EntityKind.AGGREGATE_OBSERVATION: "aggregate organism observations",
    EntityKind.INDIVIDUAL_OBSERVATION: "individual organism observations",
    EntityKind.LITERATURE_CITATION: "literature citations",
}


class AttributeType(str, Enum):
    """Value domain of a measurement method.

    Quantitative methods have exactly one attribute holding the numeric
    range. Ordinal and qualitative methods are categorical: one attribute
    per code.
    """

    QUANTITATIVE = "quantitative"
    ORDINAL = "ordinal"
    QUALITATIVE = "qualitative"

    @property
    def is_categorical(self) -> bool:
        return self is not AttributeType.QUANTITATIVE
