"""Aggregate organism observations: group-level measurements per organism."""

from __future__ import annotations

from collections.abc import Callable, Collection, Mapping
from typing import Any, NoReturn

from vegx.document import VegXDocument
from vegx.errors import ConfigurationError, MissingIdentityError
from vegx.integration.mapping import (
    HEIGHT_MEASUREMENT,
    IDENTITY_ROLES,
    INDIVIDUAL_LABEL,
    ORGANISM_NAME,
    TAXON_NAME,
    ColumnMapping,
)
from vegx.integration.pipeline import RecordIntegrator, RowState, identity_roles_for_duplicates
from vegx.models import AggregateObservation, EntityKind, MethodDefinition, StrataDefinition
from vegx.resolution.methods import MethodSpec
from vegx.resolution.registry import IdentityRegistry, NaturalKey


class AggregateStrategy:
    """One observation per (plot observation, stratum observation, organism identity).

    Every record must name an organism, through either the organism name
    or the taxon name column.
    """

    observation_kind = EntityKind.AGGREGATE_OBSERVATION
    identity_roles = IDENTITY_ROLES - {INDIVIDUAL_LABEL}
    single_slot_roles = {HEIGHT_MEASUREMENT: "height_measurement"}

    def start(self, columns: ColumnMapping) -> None:
        if not (columns.has(ORGANISM_NAME) or columns.has(TAXON_NAME)):
            raise ConfigurationError(
                f"Aggregate observations need a mapping for '{ORGANISM_NAME}' or '{TAXON_NAME}'."
            )

    def duplicate_roles(self, columns: ColumnMapping) -> list[str]:
        return identity_roles_for_duplicates(columns)

    def missing_identity(self, state: RowState) -> NoReturn:
        raise MissingIdentityError(
            "Missing organism identity: both organism name and taxon name are missing.",
            row=state.row,
        )

    def resolve_subject(
        self, document: VegXDocument, registry: IdentityRegistry, state: RowState
    ) -> None:
        return None

    def observation_key(self, state: RowState) -> NaturalKey:
        return (
            state.plot_observation_id,
            state.stratum_observation_id or "",
            state.organism_identity_id,
        )

    def new_observation(self, state: RowState) -> AggregateObservation:
        if state.organism_identity_id is None:
            self.missing_identity(state)
        return AggregateObservation(
            plot_observation_id=state.plot_observation_id,
            organism_identity_id=state.organism_identity_id,
            stratum_observation_id=state.stratum_observation_id,
        )

    def update_observation(self, observation: AggregateObservation, state: RowState) -> None:
        return None


def add_aggregate_organism_observations(
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
    """Integrate aggregate organism observations (e.g. cover per species).

    Args:
        document: Target document, mutated in place.
        records: Record table (DataFrame, list of dicts, dict of lists).
        mapping: Role -> column name. ``plotName`` and ``obsStartDate``
            are required, plus ``organismName`` or ``taxonName``.
            Optional identity roles: ``subPlotName``, ``stratumName``.
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
        AggregateStrategy(),
        mapping,
        methods,
        stratum_definition,
        date_format=date_format,
        missing_values=missing_values,
        verbose=verbose,
        method_lookup=method_lookup,
    )
    return integrator.run(records).document
