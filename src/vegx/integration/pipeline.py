"""Shared record integration pipeline.

Both integrators fold a record table into a document with the same
per-record algorithm:

1. Plot (with carry-forward) and optional subplot
2. Plot observation (with carry-forward on the date)
3. Organism name and identity
4. Stratum observation, if a stratum classification is mapped
5. Variant-specific subject (individual organisms)
6. Observation record, created or extended
7. Measurements, validated against their methods

Duplicate identity columns are detected before the loop. What differs
between the aggregate and individual variants (step 5, the observation
key and record, missing identities, supported roles) is supplied by an
``ObservationStrategy``.

Configuration problems raise before the document is touched. Domain
errors raise mid-loop and leave earlier records in the document; use
``VegXDocument.copy()`` when all-or-nothing behavior is needed.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import ValidationError

from vegx.config import settings
from vegx.document import VegXDocument
from vegx.errors import ConfigurationError, DomainValidationError, DuplicateRecordsWarning
from vegx.integration.mapping import (
    OBS_START_DATE,
    ORGANISM_NAME,
    PLOT_NAME,
    STRATUM_NAME,
    SUBPLOT_NAME,
    TAXON_NAME,
    ColumnMapping,
    classify_mapping,
)
from vegx.integration.measurements import validate_measurement
from vegx.integration.records import (
    CarryForward,
    CellReader,
    CellValue,
    count_duplicates,
    parse_date,
    to_frame,
)
from vegx.models import (
    EntityKind,
    Measurement,
    OrganismIdentity,
    OrganismName,
    Plot,
    PlotObservation,
    StrataDefinition,
    StratumObservation,
    VegXModel,
)
from vegx.models.definitions import MethodDefinition
from vegx.predefined import predefined_measurement_method
from vegx.resolution.methods import MethodResolver, MethodSpec, ResolvedMethod
from vegx.resolution.registry import IdentityRegistry, NaturalKey
from vegx.resolution.strata import ResolvedStrata, StratumResolver

logger = logging.getLogger(__name__)

# Kinds reported in the end-of-call summary, in order
SUMMARY_KINDS = (
    EntityKind.PLOT,
    EntityKind.PLOT_OBSERVATION,
    EntityKind.ORGANISM_NAME,
    EntityKind.ORGANISM_IDENTITY,
    EntityKind.STRATUM_OBSERVATION,
    EntityKind.INDIVIDUAL_ORGANISM,
)


@dataclass
class RowState:
    """IDs resolved so far for one record."""

    row: int
    """1-based record number."""

    cells: dict[str, CellValue | None]
    """Normalized cell text per mapped role; None for missing cells.

    Date and timestamp cells of the observation date stay dates.
    """

    plot_id: str = ""
    plot_observation_id: str = ""
    organism_identity_id: str | None = None
    stratum_observation_id: str | None = None
    individual_organism_id: str | None = None


class ObservationStrategy(Protocol):
    """Variant-specific parts of the pipeline."""

    observation_kind: EntityKind
    identity_roles: frozenset[str]
    single_slot_roles: Mapping[str, str]
    """Single-slot measurement role -> observation field name."""

    def start(self, columns: ColumnMapping) -> None:
        """Validate the mapping for this variant and reset per-call state.

        Raises:
            ConfigurationError: If the mapping cannot be used.
        """
        ...

    def duplicate_roles(self, columns: ColumnMapping) -> list[str]:
        """Mapped roles whose joined values identify one observation."""
        ...

    def missing_identity(self, state: RowState) -> None:
        """Handle a record with neither an organism nor a taxon name."""
        ...

    def resolve_subject(
        self, document: VegXDocument, registry: IdentityRegistry, state: RowState
    ) -> None:
        """Resolve variant-specific entities between strata and observations."""
        ...

    def observation_key(self, state: RowState) -> NaturalKey: ...

    def new_observation(self, state: RowState) -> VegXModel: ...

    def update_observation(self, observation: Any, state: RowState) -> None:
        """Refresh references on an existing or new observation."""
        ...


def identity_roles_for_duplicates(columns: ColumnMapping) -> list[str]:
    """Mapped identity roles shared by both variants, in canonical order."""
    roles = (PLOT_NAME, OBS_START_DATE, SUBPLOT_NAME, STRATUM_NAME, ORGANISM_NAME, TAXON_NAME)
    return [role for role in roles if columns.has(role)]


@dataclass
class IntegrationReport:
    """Counts gathered during one integration call."""

    observation_kind: EntityKind
    parsed: dict[EntityKind, int] = field(default_factory=dict)
    """Distinct entities touched per kind."""

    added: dict[EntityKind, int] = field(default_factory=dict)
    """Entities newly created per kind."""

    records_parsed: int = 0
    missing_measurements: int = 0
    duplicate_records: int = 0

    def summary_lines(self) -> list[str]:
        """Human-readable summary, one line per entity kind."""
        lines = [
            f"{self.parsed[kind]} {kind.label} parsed, {self.added.get(kind, 0)} new added."
            for kind in SUMMARY_KINDS
            if self.parsed.get(kind)
        ]
        lines.append(
            f"{self.records_parsed} record(s) parsed, "
            f"{self.added.get(self.observation_kind, 0)} new {self.observation_kind.label} added."
        )
        if self.missing_measurements:
            lines.append(f"{self.missing_measurements} missing measurement value(s) not added.")
        return lines


@dataclass
class IntegrationResult:
    document: VegXDocument
    report: IntegrationReport


class RecordIntegrator:
    """Folds a record table into a document, one record at a time.

    Usage:
        integrator = RecordIntegrator(
            document,
            AggregateStrategy(),
            {"plotName": "plot", "obsStartDate": "date", "taxonName": "species", "cover": "cover"},
            methods={"cover": "Plant cover/%"},
        )
        result = integrator.run(frame)
        result.report.summary_lines()
    """

    def __init__(
        self,
        document: VegXDocument,
        strategy: ObservationStrategy,
        mapping: Mapping[str, str],
        methods: Mapping[str, MethodSpec] | None = None,
        stratum_definition: StrataDefinition | Mapping[str, Any] | None = None,
        *,
        date_format: str | None = None,
        missing_values: Collection[str] | None = None,
        verbose: bool | None = None,
        method_lookup: Callable[[str], MethodDefinition] | None = None,
    ) -> None:
        self.document = document
        self.strategy = strategy
        self.mapping = dict(mapping)
        self.methods = dict(methods or {})
        self.stratum_definition = stratum_definition
        self.date_format = date_format if date_format is not None else settings.date_format
        self.reader = CellReader(
            missing_values if missing_values is not None else settings.missing_values
        )
        self.verbose = verbose if verbose is not None else settings.verbose
        self.method_lookup = method_lookup or predefined_measurement_method
        self.log_level = logging.INFO if self.verbose else logging.DEBUG

    # ── Configuration ────────────────────────────────────────────────────

    def _check_configuration(
        self, columns: ColumnMapping, definitions: Mapping[str, MethodDefinition]
    ) -> StrataDefinition | None:
        for role in columns.measurement_roles:
            if role not in definitions:
                raise ConfigurationError(f"Method definition must be provided for '{role}'.")
            if not definitions[role].attributes:
                raise ConfigurationError(
                    f"Method '{definitions[role].name}' for '{role}' has no attributes."
                )

        stratum_definition = self.stratum_definition
        if columns.has(STRATUM_NAME) and stratum_definition is None:
            raise ConfigurationError(
                "Stratum definition must be supplied to map stratum observations. "
                "Revise mapping or provide a stratum definition."
            )
        if stratum_definition is not None and not columns.has(STRATUM_NAME):
            raise ConfigurationError(
                "You need to include a mapping for 'stratumName' in order to map stratum observations."
            )
        if stratum_definition is None or isinstance(stratum_definition, StrataDefinition):
            return stratum_definition
        if not isinstance(stratum_definition, Mapping):
            raise ConfigurationError(
                f"Wrong type for stratum definition: {type(stratum_definition).__name__}."
            )
        try:
            return StrataDefinition.model_validate(stratum_definition)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid stratum definition: {e}") from e

    def _warn_duplicates(self, frame: Any, columns: ColumnMapping) -> int:
        roles = self.strategy.duplicate_roles(columns)
        if not roles:
            return 0
        duplicates = count_duplicates(frame, [columns.column(role) or "" for role in roles])
        if duplicates:
            message = (
                f"{duplicates} duplicate record(s) found for columns "
                f"{', '.join(repr(columns.column(role)) for role in roles)}. "
                "Their measurements are merged into the same observation."
            )
            logger.warning(message)
            warnings.warn(message, DuplicateRecordsWarning, stacklevel=3)
        return duplicates

    # ── Run ──────────────────────────────────────────────────────────────

    def run(self, records: Any) -> IntegrationResult:
        """Integrate ``records`` into the document.

        Args:
            records: A DataFrame, or anything the DataFrame constructor accepts.

        Returns:
            The mutated document and the call's report.

        Raises:
            ConfigurationError: Before any mutation, for unusable mapping,
                methods or stratum definition.
            DomainValidationError: For the first record the document cannot
                accept. Earlier records stay integrated.
        """
        frame = to_frame(records)
        columns = classify_mapping(
            self.mapping,
            list(frame.columns),
            identity_roles=self.strategy.identity_roles,
            single_slot_roles=self.strategy.single_slot_roles.keys(),
        )
        self.strategy.start(columns)

        registry = IdentityRegistry(self.document)
        method_resolver = MethodResolver(
            self.document, registry, lookup=self.method_lookup, verbose=self.verbose
        )
        definitions = method_resolver.prepare(self.methods)
        stratum_definition = self._check_configuration(columns, definitions)

        report = IntegrationReport(observation_kind=self.strategy.observation_kind)
        report.duplicate_records = self._warn_duplicates(frame, columns)

        methods = {
            role: method_resolver.resolve(definition, role=role)
            for role, definition in definitions.items()
        }
        strata = None
        if stratum_definition is not None:
            strata = StratumResolver(self.document, method_resolver).resolve(stratum_definition)

        plot_names = CarryForward(PLOT_NAME)
        dates = CarryForward(OBS_START_DATE)
        roles = {**columns.identity, **columns.single_slot, **columns.additional}

        for row, record in enumerate(frame.to_dict("records"), start=1):
            state = RowState(
                row=row,
                cells={role: self.reader.text(record[column]) for role, column in roles.items()},
            )
            state.cells[OBS_START_DATE] = self.reader.value(record[roles[OBS_START_DATE]])
            self._resolve_plot(registry, state, plot_names)
            self._resolve_plot_observation(registry, state, dates)
            self._resolve_organism(registry, state)
            if strata is not None:
                self._resolve_stratum_observation(registry, state, strata)
            self.strategy.resolve_subject(self.document, registry, state)
            report.missing_measurements += self._resolve_observation(
                registry, state, columns, methods
            )
            report.records_parsed += 1

        for kind in (*SUMMARY_KINDS, self.strategy.observation_kind):
            report.parsed[kind] = registry.parsed(kind)
            report.added[kind] = registry.added(kind)
        for line in report.summary_lines():
            logger.log(self.log_level, line)

        return IntegrationResult(document=self.document, report=report)

    # ── Per-record steps ─────────────────────────────────────────────────

    def _plot_id(self, registry: IdentityRegistry, name: str, parent_id: str | None = None) -> str:
        plot_id, created = registry.resolve(EntityKind.PLOT, (name,))
        if created:
            self.document.put(EntityKind.PLOT, plot_id, Plot(plot_name=name, parent_plot_id=parent_id))
        return plot_id

    def _resolve_plot(
        self, registry: IdentityRegistry, state: RowState, plot_names: CarryForward
    ) -> None:
        plot_name = plot_names.update(state.cells[PLOT_NAME], row=state.row)
        state.plot_id = self._plot_id(registry, plot_name)

        subplot_name = state.cells.get(SUBPLOT_NAME)
        if subplot_name is not None:
            state.plot_id = self._plot_id(
                registry, f"{plot_name}_{subplot_name}", parent_id=state.plot_id
            )

    def _resolve_plot_observation(
        self, registry: IdentityRegistry, state: RowState, dates: CarryForward
    ) -> None:
        cell = dates.update(state.cells[OBS_START_DATE], row=state.row)
        obs_date = parse_date(cell, self.date_format, row=state.row, role=OBS_START_DATE)

        plot_obs_id, created = registry.resolve(
            EntityKind.PLOT_OBSERVATION, (state.plot_id, obs_date.isoformat())
        )
        if created:
            self.document.put(
                EntityKind.PLOT_OBSERVATION,
                plot_obs_id,
                PlotObservation(plot_id=state.plot_id, obs_start_date=obs_date),
            )
        state.plot_observation_id = plot_obs_id

    def _resolve_organism(self, registry: IdentityRegistry, state: RowState) -> None:
        taxon_name = state.cells.get(TAXON_NAME)
        organism_name = state.cells.get(ORGANISM_NAME)
        if taxon_name is not None:
            name, is_taxon = taxon_name, True
        elif organism_name is not None:
            name, is_taxon = organism_name, False
        else:
            self.strategy.missing_identity(state)
            return

        name_id, created = registry.resolve(EntityKind.ORGANISM_NAME, (name, is_taxon))
        if created:
            self.document.put(
                EntityKind.ORGANISM_NAME, name_id, OrganismName(name=name, taxon=is_taxon)
            )

        identity_id, created = registry.resolve(EntityKind.ORGANISM_IDENTITY, (name, ""))
        if created:
            self.document.put(
                EntityKind.ORGANISM_IDENTITY,
                identity_id,
                OrganismIdentity(original_organism_name_id=name_id),
            )
        state.organism_identity_id = identity_id

    def _resolve_stratum_observation(
        self, registry: IdentityRegistry, state: RowState, strata: ResolvedStrata
    ) -> None:
        stratum_name = state.cells.get(STRATUM_NAME)
        if stratum_name is None:
            return

        stratum_id = strata.get(stratum_name)
        if stratum_id is None:
            raise DomainValidationError(
                f"'{stratum_name}' not found within stratum names. "
                "Revise stratum definition or data.",
                row=state.row,
                role=STRATUM_NAME,
                value=stratum_name,
            )

        stratum_obs_id, created = registry.resolve(
            EntityKind.STRATUM_OBSERVATION, (state.plot_observation_id, stratum_id)
        )
        if created:
            self.document.put(
                EntityKind.STRATUM_OBSERVATION,
                stratum_obs_id,
                StratumObservation(
                    plot_observation_id=state.plot_observation_id, stratum_id=stratum_id
                ),
            )
        state.stratum_observation_id = stratum_obs_id

    def _resolve_observation(
        self,
        registry: IdentityRegistry,
        state: RowState,
        columns: ColumnMapping,
        methods: Mapping[str, ResolvedMethod],
    ) -> int:
        """Create or extend the observation and attach measurements.

        Returns:
            Number of measurement cells that were missing.
        """
        # Validate every value first so a rejected record stores nothing
        missing = 0
        single_slot: dict[str, Measurement] = {}
        additional: list[Measurement] = []
        for role in columns.measurement_roles:
            value = state.cells[role]
            if value is None:
                missing += 1
                continue
            measurement = validate_measurement(methods[role], value, role=role, row=state.row)
            if role in columns.single_slot:
                single_slot[self.strategy.single_slot_roles[role]] = measurement
            else:
                additional.append(measurement)

        kind = self.strategy.observation_kind
        observation_id, created = registry.resolve(kind, self.strategy.observation_key(state))
        if created:
            observation = self.strategy.new_observation(state)
        else:
            observation = self.document.get(kind, observation_id)
        self.strategy.update_observation(observation, state)

        for field_name, measurement in single_slot.items():
            setattr(observation, field_name, measurement)
        for measurement in additional:
            observation.add_measurement(measurement)

        self.document.put(kind, observation_id, observation)
        logger.debug(
            "Record #%d: %s %s (%s)",
            state.row,
            kind.value,
            observation_id,
            "new" if created else "extended",
        )
        return missing
