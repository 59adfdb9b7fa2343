"""Individual organism observations: measurements on tagged organisms."""

from __future__ import annotations

from collections.abc import Callable, Collection, Mapping
from typing import Any

from vegx.document import VegXDocument
from vegx.integration.mapping import (
    DIAMETER_MEASUREMENT,
    HEIGHT_MEASUREMENT,
    IDENTITY_ROLES,
    INDIVIDUAL_LABEL,
    STRATUM_NAME,
    ColumnMapping,
)
from vegx.integration.pipeline import RecordIntegrator, RowState, identity_roles_for_duplicates
from vegx.integration.records import CarryForward
from vegx.models import (
    EntityKind,
    IndividualObservation,
    IndividualOrganism,
    MethodDefinition,
    StrataDefinition,
)
from vegx.resolution.methods import MethodSpec
from vegx.resolution.registry import IdentityRegistry, NaturalKey

AUTO_LABEL_PREFIX = "ind"


class IndividualStrategy:
    """One observation per (plot observation, individual organism).

    With a label column, individuals are found by (plot, label) and a
    missing label reuses the previous record's. Without one, every record
    creates a new individual labelled ``ind1``, ``ind2``... within its plot.
    Records without an organism name are kept, unidentified.
    """

    observation_kind = EntityKind.INDIVIDUAL_OBSERVATION
    identity_roles = IDENTITY_ROLES
    single_slot_roles = {
        HEIGHT_MEASUREMENT: "height_measurement",
        DIAMETER_MEASUREMENT: "diameter_measurement",
    }

    def __init__(self) -> None:
        self._labelled = False
        self._stratified = False
        self._labels = CarryForward(INDIVIDUAL_LABEL)
        self._next_label: dict[str, int] = {}

    def start(self, columns: ColumnMapping) -> None:
        self._labelled = columns.has(INDIVIDUAL_LABEL)
        self._stratified = columns.has(STRATUM_NAME)
        self._labels = CarryForward(INDIVIDUAL_LABEL)
        self._next_label = {}

    def duplicate_roles(self, columns: ColumnMapping) -> list[str]:
        # Without labels every record is a distinct individual
        if not columns.has(INDIVIDUAL_LABEL):
            return []
        return [*identity_roles_for_duplicates(columns), INDIVIDUAL_LABEL]

    def missing_identity(self, state: RowState) -> None:
        return None

    def _auto_label(self, registry: IdentityRegistry, plot_id: str) -> str:
        n = self._next_label.get(plot_id, 0)
        while True:
            n += 1
            label = f"{AUTO_LABEL_PREFIX}{n}"
            if registry.lookup(EntityKind.INDIVIDUAL_ORGANISM, (plot_id, label)) is None:
                break
        self._next_label[plot_id] = n
        return label

    def resolve_subject(
        self, document: VegXDocument, registry: IdentityRegistry, state: RowState
    ) -> None:
        if self._labelled:
            label = self._labels.update(state.cells[INDIVIDUAL_LABEL], row=state.row)
        else:
            label = self._auto_label(registry, state.plot_id)

        individual_id, created = registry.resolve(
            EntityKind.INDIVIDUAL_ORGANISM, (state.plot_id, label)
        )
        if created:
            document.put(
                EntityKind.INDIVIDUAL_ORGANISM,
                individual_id,
                IndividualOrganism(
                    plot_id=state.plot_id,
                    individual_organism_label=label,
                    organism_identity_id=state.organism_identity_id,
                ),
            )
        elif state.organism_identity_id is not None:
            individual = document.get(EntityKind.INDIVIDUAL_ORGANISM, individual_id)
            individual.organism_identity_id = state.organism_identity_id
        state.individual_organism_id = individual_id

    def observation_key(self, state: RowState) -> NaturalKey:
        return (state.plot_observation_id, state.individual_organism_id)

    def new_observation(self, state: RowState) -> IndividualObservation:
        if state.individual_organism_id is None:
            raise ValueError(f"Record #{state.row}: individual organism was not resolved.")
        return IndividualObservation(
            plot_observation_id=state.plot_observation_id,
            individual_organism_id=state.individual_organism_id,
        )

    def update_observation(self, observation: IndividualObservation, state: RowState) -> None:
        # Calls without a stratum mapping keep the stored stratum
        if self._stratified:
            observation.stratum_observation_id = state.stratum_observation_id


def add_individual_organism_observations(
    document: VegXDocument,
    records: Any,
    mapping: Mapping[str, str],
    methods: Mapping[str, MethodSpec] | None = None,
    stratum_definition: StrataDefinition | Mapping[str, Any] | None = None,
    date_format: str | None = None,
    missing_values: Collection[str] | None = None,
    verbose: bool | None = None,
    method_lookup: Callable[[str], MethodDefinition] | None = None,
) -> VegXDocument:
    """Integrate individual organism observations (e.g. tree diameters).

    Args:
        document: Target document, mutated in place.
        records: Record table (DataFrame, list of dicts, dict of lists).
        mapping: Role -> column name. ``plotName`` and ``obsStartDate``
            are required. Optional identity roles: ``subPlotName``,
            ``stratumName``, ``organismName``, ``taxonName``,
            ``individualOrganismLabel``. ``diameterMeasurement``,
            ``heightMeasurement`` and any other key are measurement roles.
        methods: Measurement role -> method definition or predefined name.
        stratum_definition: Stratum classification for ``stratumName``.
        date_format: ``strptime`` format of ``obsStartDate`` cells.
        missing_values: Cell strings treated as missing.
        verbose: Log registration and summary messages at INFO.
        method_lookup: Resolves predefined method names.

    Returns:
        The same document, so calls can be chained.

    Raises:
        ConfigurationError: Unusable mapping, methods or stratum definition.
        DomainValidationError: A record the document cannot accept.
    """
    integrator = RecordIntegrator(
        document,
        IndividualStrategy(),
        mapping,
        methods,
        stratum_definition,
        date_format=date_format,
        missing_values=missing_values,
        verbose=verbose,
        method_lookup=method_lookup,
    )
    return integrator.run(records).document
