"""Data model for Veg-X documents."""

from vegx.models.base import VegXModel
from vegx.models.definitions import (
    AttributeDefinition,
    MethodDefinition,
    StrataDefinition,
    StratumSpec,
)
from vegx.models.enums import AttributeType, EntityKind
from vegx.models.method import Attribute, LiteratureCitation, Method
from vegx.models.observation import AggregateObservation, IndividualObservation, Measurement
from vegx.models.organism import IndividualOrganism, OrganismIdentity, OrganismName
from vegx.models.plot import Plot, PlotObservation
from vegx.models.stratum import Stratum, StratumObservation

RECORD_TYPES: dict[EntityKind, type[VegXModel]] = {
    EntityKind.PLOT: Plot,
    EntityKind.PLOT_OBSERVATION: PlotObservation,
    EntityKind.ORGANISM_NAME: OrganismName,
    EntityKind.ORGANISM_IDENTITY: OrganismIdentity,
    EntityKind.METHOD: Method,
    EntityKind.ATTRIBUTE: Attribute,
    EntityKind.STRATUM: Stratum,
    EntityKind.STRATUM_OBSERVATION: StratumObservation,
    EntityKind.INDIVIDUAL_ORGANISM: IndividualOrganism,
    EntityKind.AGGREGATE_OBSERVATION: AggregateObservation,
    EntityKind.INDIVIDUAL_OBSERVATION: IndividualObservation,
    EntityKind.LITERATURE_CITATION: LiteratureCitation,
}
"""Record class stored under each entity kind."""

__all__ = [
    "RECORD_TYPES",
    "AggregateObservation",
    "Attribute",
    "AttributeDefinition",
    "AttributeType",
    "EntityKind",
    "IndividualObservation",
    "IndividualOrganism",
    "LiteratureCitation",
    "Measurement",
    "Method",
    "MethodDefinition",
    "OrganismIdentity",
    "OrganismName",
    "Plot",
    "PlotObservation",
    "StrataDefinition",
    "Stratum",
    "StratumObservation",
    "StratumSpec",
    "VegXModel",
]
