"""Tests for aggregate organism observation integration."""

from __future__ import annotations

import logging
import warnings
from datetime import date
from typing import TYPE_CHECKING

import pandas as pd
import pytest

from vegx.document import VegXDocument
from vegx.errors import (
    ConfigurationError,
    DomainValidationError,
    DuplicateRecordsWarning,
    MissingIdentityError,
)
from vegx.integration import AggregateStrategy, RecordIntegrator, add_aggregate_organism_observations
from vegx.integration.pipeline import RowState
from vegx.models import EntityKind, MethodDefinition, StrataDefinition

if TYPE_CHECKING:
    from conftest import MakeRecords

COLUMNS = ["plot", "date", "species", "cover"]
MISSING = ["", "0"]


def _integrate(document: VegXDocument, frame, mapping, **kwargs) -> VegXDocument:
    kwargs.setdefault("missing_values", MISSING)
    kwargs.setdefault("verbose", False)
    return add_aggregate_organism_observations(document, frame, mapping, **kwargs)


class TestEndToEnd:
    """The three-record cover example."""

    @pytest.fixture
    def frame(self, make_records: MakeRecords):
        return make_records(
            COLUMNS,
            ("PlotA", "2020-01-01", "SpeciesX", "50"),
            ("PlotA", "2020-01-01", "SpeciesY", "10"),
            ("PlotA", "", "SpeciesX", "60"),
        )

    def test_entity_counts(
        self,
        document: VegXDocument,
        frame,
        cover_mapping: dict[str, str],
        cover_scale: MethodDefinition,
    ) -> None:
        result = _integrate(document, frame, cover_mapping, methods={"cover": cover_scale})

        assert result is document
        assert document.size(EntityKind.PLOT) == 1
        assert document.size(EntityKind.PLOT_OBSERVATION) == 1
        assert document.size(EntityKind.ORGANISM_NAME) == 2
        assert document.size(EntityKind.ORGANISM_IDENTITY) == 2
        assert document.size(EntityKind.METHOD) == 1
        assert document.size(EntityKind.ATTRIBUTE) == 3
        assert document.size(EntityKind.LITERATURE_CITATION) == 1
        # Records 1 and 3 share plot observation and identity
        assert document.size(EntityKind.AGGREGATE_OBSERVATION) == 2
        assert document.reference_check() == []

    def test_date_carried_forward(
        self,
        document: VegXDocument,
        frame,
        cover_mapping: dict[str, str],
        cover_scale: MethodDefinition,
    ) -> None:
        _integrate(document, frame, cover_mapping, methods={"cover": cover_scale})

        plot_observation = document.get(EntityKind.PLOT_OBSERVATION, "1")
        assert plot_observation.plot_id == "1"
        assert plot_observation.obs_start_date == date(2020, 1, 1)

    def test_measurements_linked_to_codes(
        self,
        document: VegXDocument,
        frame,
        cover_mapping: dict[str, str],
        cover_scale: MethodDefinition,
    ) -> None:
        _integrate(document, frame, cover_mapping, methods={"cover": cover_scale})

        species_x = document.get(EntityKind.AGGREGATE_OBSERVATION, "1")
        assert species_x.organism_identity_id == "1"
        assert species_x.stratum_observation_id is None
        assert [(m.attribute_id, m.value) for m in species_x.aggregate_organism_measurements.values()] == [
            ("2", "50"),
            ("3", "60"),
        ]
        assert list(species_x.aggregate_organism_measurements) == ["1", "2"]

        species_y = document.get(EntityKind.AGGREGATE_OBSERVATION, "2")
        assert species_y.aggregate_organism_measurements["1"].attribute_id == "1"

    def test_taxon_names_flagged(
        self,
        document: VegXDocument,
        frame,
        cover_mapping: dict[str, str],
        cover_scale: MethodDefinition,
    ) -> None:
        _integrate(document, frame, cover_mapping, methods={"cover": cover_scale})

        names = [n for _, n in document.items(EntityKind.ORGANISM_NAME)]
        assert [(n.name, n.taxon) for n in names] == [("SpeciesX", True), ("SpeciesY", True)]
        identity = document.get(EntityKind.ORGANISM_IDENTITY, "2")
        assert identity.original_organism_name_id == "2"
        assert identity.original_concept_identification is None

    def test_reintegration_reuses_ids(
        self,
        document: VegXDocument,
        frame,
        cover_mapping: dict[str, str],
        cover_scale: MethodDefinition,
    ) -> None:
        _integrate(document, frame, cover_mapping, methods={"cover": cover_scale})
        before = document.counts()
        _integrate(document, frame, cover_mapping, methods={"cover": cover_scale})

        assert document.counts() == before
        extended = document.get(EntityKind.AGGREGATE_OBSERVATION, "1")
        assert len(extended.aggregate_organism_measurements) == 4

    def test_report(
        self,
        document: VegXDocument,
        frame,
        cover_mapping: dict[str, str],
        cover_scale: MethodDefinition,
    ) -> None:
        integrator = RecordIntegrator(
            document,
            AggregateStrategy(),
            cover_mapping,
            {"cover": cover_scale},
            missing_values=MISSING,
            verbose=False,
        )
        report = integrator.run(frame).report

        assert report.records_parsed == 3
        assert report.parsed[EntityKind.PLOT] == 1
        assert report.added[EntityKind.ORGANISM_IDENTITY] == 2
        assert report.added[EntityKind.AGGREGATE_OBSERVATION] == 2
        assert report.missing_measurements == 0
        assert report.duplicate_records == 0
        assert report.summary_lines()[0] == "1 plots parsed, 1 new added."
        assert report.summary_lines()[-1] == (
            "3 record(s) parsed, 2 new aggregate organism observations added."
        )

    def test_verbose_summary_logged(
        self,
        document: VegXDocument,
        frame,
        cover_mapping: dict[str, str],
        cover_scale: MethodDefinition,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO, logger="vegx"):
            _integrate(document, frame, cover_mapping, methods={"cover": cover_scale}, verbose=True)

        assert "Measurement method 'Cover classes' added for 'cover'." in caplog.messages
        assert "2 organism identities parsed, 2 new added." in caplog.messages


class TestCarryForwardAndSubplots:
    """Tests for plot and date resolution."""

    def test_missing_plot_on_first_record(
        self, document: VegXDocument, make_records: MakeRecords, cover_mapping: dict[str, str]
    ) -> None:
        frame = make_records(COLUMNS, ("", "2020-01-01", "SpeciesX", "55"))
        with pytest.raises(DomainValidationError, match="Record #1") as exc:
            _integrate(document, frame, cover_mapping, methods={"cover": "Plant cover/%"})
        assert exc.value.role == "plotName"

    def test_missing_date_on_first_record(
        self, document: VegXDocument, make_records: MakeRecords, cover_mapping: dict[str, str]
    ) -> None:
        frame = make_records(COLUMNS, ("PlotA", "", "SpeciesX", "55"))
        with pytest.raises(DomainValidationError, match="obsStartDate"):
            _integrate(document, frame, cover_mapping, methods={"cover": "Plant cover/%"})

    def test_plot_carried_forward(
        self, document: VegXDocument, make_records: MakeRecords, cover_mapping: dict[str, str]
    ) -> None:
        frame = make_records(
            COLUMNS,
            ("PlotA", "2020-01-01", "SpeciesX", "5"),
            ("", "2020-01-01", "SpeciesY", "5"),
            ("PlotB", "2020-01-02", "SpeciesX", "5"),
            ("", "", "SpeciesY", "5"),
        )
        _integrate(document, frame, cover_mapping, methods={"cover": "Plant cover/%"})

        assert [p.plot_name for _, p in document.items(EntityKind.PLOT)] == ["PlotA", "PlotB"]
        observations = [o for _, o in document.items(EntityKind.PLOT_OBSERVATION)]
        assert [(o.plot_id, o.obs_start_date) for o in observations] == [
            ("1", date(2020, 1, 1)),
            ("2", date(2020, 1, 2)),
        ]
        assert document.size(EntityKind.AGGREGATE_OBSERVATION) == 4

    def test_subplots(self, document: VegXDocument, make_records: MakeRecords) -> None:
        frame = make_records(
            ["plot", "sub", "date", "species", "cover"],
            ("PlotA", "1", "2020-01-01", "SpeciesX", "5"),
            ("", "2", "2020-01-01", "SpeciesX", "5"),
            ("PlotA", "", "2020-01-01", "SpeciesX", "5"),
        )
        mapping = {
            "plotName": "plot",
            "subPlotName": "sub",
            "obsStartDate": "date",
            "organismName": "species",
            "cover": "cover",
        }
        _integrate(document, frame, mapping, methods={"cover": "Plant cover/%"}, missing_values=[""])

        plots = {p.plot_name: (plot_id, p.parent_plot_id) for plot_id, p in document.items(EntityKind.PLOT)}
        assert plots == {"PlotA": ("1", None), "PlotA_1": ("2", "1"), "PlotA_2": ("3", "1")}
        # One plot observation per effective plot
        assert document.size(EntityKind.PLOT_OBSERVATION) == 3

    def test_custom_date_format(
        self, document: VegXDocument, make_records: MakeRecords, cover_mapping: dict[str, str]
    ) -> None:
        frame = make_records(COLUMNS, ("PlotA", "15/06/2019", "SpeciesX", "5"))
        _integrate(
            document, frame, cover_mapping, methods={"cover": "Plant cover/%"}, date_format="%d/%m/%Y"
        )
        assert document.get(EntityKind.PLOT_OBSERVATION, "1").obs_start_date == date(2019, 6, 15)

    def test_unparseable_date(
        self, document: VegXDocument, make_records: MakeRecords, cover_mapping: dict[str, str]
    ) -> None:
        frame = make_records(COLUMNS, ("PlotA", "June 2019", "SpeciesX", "5"))
        with pytest.raises(DomainValidationError, match="Cannot parse date"):
            _integrate(document, frame, cover_mapping, methods={"cover": "Plant cover/%"})


class TestOrganismIdentity:
    """Tests for organism name choice."""

    MAPPING = {
        "plotName": "plot",
        "obsStartDate": "date",
        "taxonName": "taxon",
        "organismName": "name",
        "cover": "cover",
    }

    def test_taxon_preferred_then_organism_name(
        self, document: VegXDocument, make_records: MakeRecords
    ) -> None:
        frame = make_records(
            ["plot", "date", "taxon", "name", "cover"],
            ("PlotA", "2020-01-01", "Fagus sylvatica", "beech", "5"),
            ("PlotA", "2020-01-01", "", "moss sp.", "5"),
        )
        _integrate(document, frame, self.MAPPING, methods={"cover": "Plant cover/%"})

        names = [(n.name, n.taxon) for _, n in document.items(EntityKind.ORGANISM_NAME)]
        assert names == [("Fagus sylvatica", True), ("moss sp.", False)]

    def test_missing_identity_fails(self, document: VegXDocument, make_records: MakeRecords) -> None:
        frame = make_records(
            ["plot", "date", "taxon", "name", "cover"],
            ("PlotA", "2020-01-01", "Fagus sylvatica", "", "5"),
            ("PlotA", "2020-01-01", "", "", "5"),
        )
        with pytest.raises(MissingIdentityError, match="Record #2") as exc:
            _integrate(document, frame, self.MAPPING, methods={"cover": "Plant cover/%"})
        assert exc.value.row == 2

    def test_no_rollback_after_domain_error(
        self, document: VegXDocument, make_records: MakeRecords
    ) -> None:
        frame = make_records(
            ["plot", "date", "taxon", "name", "cover"],
            ("PlotA", "2020-01-01", "Fagus sylvatica", "", "5"),
            ("PlotB", "2020-01-01", "", "", "5"),
        )
        with pytest.raises(MissingIdentityError):
            _integrate(document, frame, self.MAPPING, methods={"cover": "Plant cover/%"})

        assert document.size(EntityKind.AGGREGATE_OBSERVATION) == 1
        assert document.size(EntityKind.PLOT) == 2
        assert document.reference_check() == []

    def test_copy_gives_all_or_nothing(self, document: VegXDocument, make_records: MakeRecords) -> None:
        frame = make_records(
            ["plot", "date", "taxon", "name", "cover"],
            ("PlotA", "2020-01-01", "Fagus sylvatica", "", "5"),
            ("PlotB", "2020-01-01", "", "", "5"),
        )
        working = document.copy()
        with pytest.raises(MissingIdentityError):
            _integrate(working, frame, self.MAPPING, methods={"cover": "Plant cover/%"})
        assert document.size(EntityKind.PLOT) == 0

    def test_observation_requires_identity(self) -> None:
        state = RowState(row=4, cells={}, plot_id="1", plot_observation_id="1")
        with pytest.raises(MissingIdentityError, match="Record #4"):
            AggregateStrategy().new_observation(state)


class TestMeasurements:
    """Tests for measurement validation during integration."""

    def test_quantitative_bounds(
        self, document: VegXDocument, make_records: MakeRecords, cover_mapping: dict[str, str]
    ) -> None:
        frame = make_records(
            COLUMNS,
            ("PlotA", "2020-01-01", "SpeciesX", "100"),
            ("PlotA", "2020-01-01", "SpeciesY", "100.5"),
        )
        with pytest.raises(DomainValidationError, match="larger than upper limit") as exc:
            _integrate(document, frame, cover_mapping, methods={"cover": "Plant cover/%"})
        assert exc.value.row == 2
        assert document.get(EntityKind.AGGREGATE_OBSERVATION, "1").aggregate_organism_measurements[
            "1"
        ].value == 100.0

    def test_rejected_record_stores_no_observation(
        self, document: VegXDocument, make_records: MakeRecords, cover_mapping: dict[str, str]
    ) -> None:
        frame = make_records(COLUMNS, ("PlotA", "2020-01-01", "SpeciesX", "-1"))
        with pytest.raises(DomainValidationError, match="smaller than lower limit"):
            _integrate(document, frame, cover_mapping, methods={"cover": "Plant cover/%"})
        assert document.size(EntityKind.AGGREGATE_OBSERVATION) == 0

    def test_unknown_code(
        self,
        document: VegXDocument,
        make_records: MakeRecords,
        cover_mapping: dict[str, str],
        cover_scale: MethodDefinition,
    ) -> None:
        frame = make_records(COLUMNS, ("PlotA", "2020-01-01", "SpeciesX", "55"))
        with pytest.raises(DomainValidationError, match="Value '55' not found"):
            _integrate(document, frame, cover_mapping, methods={"cover": cover_scale})

    def test_missing_measurements_counted(
        self,
        document: VegXDocument,
        make_records: MakeRecords,
        cover_mapping: dict[str, str],
        cover_scale: MethodDefinition,
    ) -> None:
        frame = make_records(
            COLUMNS,
            ("PlotA", "2020-01-01", "SpeciesX", "0"),
            ("PlotA", "2020-01-01", "SpeciesY", "10"),
        )
        integrator = RecordIntegrator(
            document,
            AggregateStrategy(),
            cover_mapping,
            {"cover": cover_scale},
            missing_values=MISSING,
            verbose=False,
        )
        report = integrator.run(frame).report

        assert report.missing_measurements == 1
        # The observation is kept even without a value
        assert document.get(EntityKind.AGGREGATE_OBSERVATION, "1").aggregate_organism_measurements == {}

    def test_height_single_slot(
        self, document: VegXDocument, make_records: MakeRecords, cover_mapping: dict[str, str]
    ) -> None:
        frame = make_records(
            [*COLUMNS, "height"],
            ("PlotA", "2020-01-01", "SpeciesX", "5", "1.5"),
            ("PlotA", "2020-01-01", "SpeciesX", "", "2.5"),
        )
        mapping = {**cover_mapping, "heightMeasurement": "height"}
        methods = {"cover": "Plant cover/%", "heightMeasurement": "Plant height/m"}
        _integrate(document, frame, mapping, methods=methods)

        observation = document.get(EntityKind.AGGREGATE_OBSERVATION, "1")
        assert observation.height_measurement.value == 2.5
        assert len(observation.aggregate_organism_measurements) == 1

    def test_unmapped_methods_are_registered(
        self,
        document: VegXDocument,
        make_records: MakeRecords,
        cover_mapping: dict[str, str],
        cover_scale: MethodDefinition,
    ) -> None:
        frame = make_records(COLUMNS, ("PlotA", "2020-01-01", "SpeciesX", "10"))
        _integrate(document, frame, cover_mapping, methods={"cover": cover_scale, "unused": "DBH/cm"})
        assert [m.name for _, m in document.items(EntityKind.METHOD)] == ["Cover classes", "DBH/cm"]


class TestStrata:
    """Tests for stratum observations."""

    MAPPING = {
        "plotName": "plot",
        "obsStartDate": "date",
        "stratumName": "stratum",
        "taxonName": "species",
        "cover": "cover",
    }

    def test_stratum_observations(
        self, document: VegXDocument, make_records: MakeRecords, height_strata: StrataDefinition
    ) -> None:
        frame = make_records(
            ["plot", "date", "stratum", "species", "cover"],
            ("PlotA", "2020-01-01", "Tree", "SpeciesX", "30"),
            ("PlotA", "2020-01-01", "Shrub", "SpeciesX", "10"),
            ("PlotA", "2020-01-01", "Tree", "SpeciesY", "5"),
            ("PlotA", "2020-01-01", "", "SpeciesY", "5"),
        )
        _integrate(
            document,
            frame,
            self.MAPPING,
            methods={"cover": "Plant cover/%"},
            stratum_definition=height_strata,
        )

        assert document.size(EntityKind.STRATUM) == 3
        assert document.size(EntityKind.STRATUM_OBSERVATION) == 2
        # Same species in two strata gives two observations
        assert document.size(EntityKind.AGGREGATE_OBSERVATION) == 4
        unstratified = document.get(EntityKind.AGGREGATE_OBSERVATION, "4")
        assert unstratified.stratum_observation_id is None
        tree = document.get(EntityKind.STRATUM_OBSERVATION, "1")
        assert document.get(EntityKind.STRATUM, tree.stratum_id).stratum_name == "Tree"
        assert document.reference_check() == []

    def test_unknown_stratum(
        self, document: VegXDocument, make_records: MakeRecords, height_strata: StrataDefinition
    ) -> None:
        frame = make_records(
            ["plot", "date", "stratum", "species", "cover"],
            ("PlotA", "2020-01-01", "Canopy", "SpeciesX", "30"),
        )
        with pytest.raises(DomainValidationError, match="'Canopy' not found within stratum names"):
            _integrate(
                document,
                frame,
                self.MAPPING,
                methods={"cover": "Plant cover/%"},
                stratum_definition=height_strata,
            )

    def test_stratum_definition_from_json_object(
        self, document: VegXDocument, make_records: MakeRecords, height_strata: StrataDefinition
    ) -> None:
        frame = make_records(
            ["plot", "date", "stratum", "species", "cover"],
            ("PlotA", "2020-01-01", "Herb", "SpeciesX", "30"),
        )
        _integrate(
            document,
            frame,
            self.MAPPING,
            methods={"cover": "Plant cover/%"},
            stratum_definition=height_strata.model_dump(mode="json"),
        )
        assert document.size(EntityKind.STRATUM_OBSERVATION) == 1


class TestConfigurationErrors:
    """Configuration problems abort before the document is touched."""

    def _assert_untouched(self, document: VegXDocument) -> None:
        assert not any(document.counts().values())

    def test_method_missing_for_role(
        self, document: VegXDocument, make_records: MakeRecords, cover_mapping: dict[str, str]
    ) -> None:
        frame = make_records(COLUMNS, ("PlotA", "2020-01-01", "SpeciesX", "10"))
        with pytest.raises(ConfigurationError, match="Method definition must be provided for 'cover'"):
            _integrate(document, frame, cover_mapping, methods={"height": "Plant height/m"})
        self._assert_untouched(document)

    def test_wrong_method_type(
        self, document: VegXDocument, make_records: MakeRecords, cover_mapping: dict[str, str]
    ) -> None:
        frame = make_records(COLUMNS, ("PlotA", "2020-01-01", "SpeciesX", "10"))
        with pytest.raises(ConfigurationError, match="Wrong type"):
            _integrate(document, frame, cover_mapping, methods={"cover": 3})
        self._assert_untouched(document)

    def test_no_organism_mapping(self, document: VegXDocument, make_records: MakeRecords) -> None:
        frame = make_records(COLUMNS, ("PlotA", "2020-01-01", "SpeciesX", "10"))
        mapping = {"plotName": "plot", "obsStartDate": "date", "cover": "cover"}
        with pytest.raises(ConfigurationError, match="organismName"):
            _integrate(document, frame, mapping, methods={"cover": "Plant cover/%"})

    def test_individual_roles_rejected(
        self, document: VegXDocument, make_records: MakeRecords, cover_mapping: dict[str, str]
    ) -> None:
        frame = make_records(COLUMNS, ("PlotA", "2020-01-01", "SpeciesX", "10"))
        mapping = {**cover_mapping, "individualOrganismLabel": "species"}
        with pytest.raises(ConfigurationError, match="individualOrganismLabel"):
            _integrate(document, frame, mapping, methods={"cover": "Plant cover/%"})

    def test_stratum_mapping_without_definition(
        self, document: VegXDocument, make_records: MakeRecords, cover_mapping: dict[str, str]
    ) -> None:
        frame = make_records([*COLUMNS, "stratum"], ("PlotA", "2020-01-01", "SpeciesX", "10", "Tree"))
        mapping = {**cover_mapping, "stratumName": "stratum"}
        with pytest.raises(ConfigurationError, match="Stratum definition must be supplied"):
            _integrate(document, frame, mapping, methods={"cover": "Plant cover/%"})
        self._assert_untouched(document)

    def test_stratum_definition_without_mapping(
        self,
        document: VegXDocument,
        make_records: MakeRecords,
        cover_mapping: dict[str, str],
        height_strata: StrataDefinition,
    ) -> None:
        frame = make_records(COLUMNS, ("PlotA", "2020-01-01", "SpeciesX", "10"))
        with pytest.raises(ConfigurationError, match="mapping for 'stratumName'"):
            _integrate(
                document,
                frame,
                cover_mapping,
                methods={"cover": "Plant cover/%"},
                stratum_definition=height_strata,
            )
        self._assert_untouched(document)


class TestDuplicates:
    """Tests for duplicate record warnings."""

    def test_duplicate_records_warn_and_merge(
        self,
        document: VegXDocument,
        make_records: MakeRecords,
        cover_mapping: dict[str, str],
        cover_scale: MethodDefinition,
    ) -> None:
        frame = make_records(
            COLUMNS,
            ("PlotA", "2020-01-01", "SpeciesX", "50"),
            ("PlotA", "2020-01-01", "SpeciesX", "60"),
        )
        with pytest.warns(DuplicateRecordsWarning, match="1 duplicate record"):
            _integrate(document, frame, cover_mapping, methods={"cover": cover_scale})

        assert document.size(EntityKind.AGGREGATE_OBSERVATION) == 1
        observation = document.get(EntityKind.AGGREGATE_OBSERVATION, "1")
        assert len(observation.aggregate_organism_measurements) == 2

    def test_distinct_records_do_not_warn(
        self,
        document: VegXDocument,
        make_records: MakeRecords,
        cover_mapping: dict[str, str],
        cover_scale: MethodDefinition,
    ) -> None:
        frame = make_records(
            COLUMNS,
            ("PlotA", "2020-01-01", "SpeciesX", "50"),
            ("PlotA", "2020-01-01", "SpeciesY", "60"),
        )
        with warnings.catch_warnings():
            warnings.simplefilter("error", DuplicateRecordsWarning)
            _integrate(document, frame, cover_mapping, methods={"cover": cover_scale})


class TestRecordInputs:
    """Tests for the accepted record table shapes."""

    def test_list_of_dicts(self, document: VegXDocument, cover_mapping: dict[str, str]) -> None:
        records = [
            {"plot": "PlotA", "date": "2020-01-01", "species": "SpeciesX", "cover": 12.5},
            {"plot": "PlotA", "date": "2020-01-01", "species": "SpeciesY", "cover": None},
        ]
        _integrate(document, records, cover_mapping, methods={"cover": "Plant cover/%"})

        assert document.size(EntityKind.AGGREGATE_OBSERVATION) == 2
        first = document.get(EntityKind.AGGREGATE_OBSERVATION, "1")
        assert first.aggregate_organism_measurements["1"].value == 12.5

    def test_null_plot_cell_carried_forward(
        self, document: VegXDocument, cover_mapping: dict[str, str]
    ) -> None:
        records = [
            {"plot": "PlotA", "date": "2020-01-01", "species": "SpeciesX", "cover": "50"},
            {"plot": None, "date": "2020-01-01", "species": "SpeciesY", "cover": "10"},
        ]
        _integrate(document, records, cover_mapping, methods={"cover": "Plant cover/%"})

        assert document.size(EntityKind.PLOT) == 1
        observations = [o for _, o in document.items(EntityKind.AGGREGATE_OBSERVATION)]
        assert [o.plot_observation_id for o in observations] == ["1", "1"]

    def test_integer_codes_with_gaps(
        self, document: VegXDocument, cover_mapping: dict[str, str], cover_scale: MethodDefinition
    ) -> None:
        frame = pd.DataFrame(
            {
                "plot": [1, 2],
                "date": ["2020-01-01", "2020-01-01"],
                "species": ["SpeciesX", "SpeciesY"],
                "cover": [50, None],
            }
        )
        _integrate(document, frame, cover_mapping, methods={"cover": cover_scale})

        assert [p.plot_name for _, p in document.items(EntityKind.PLOT)] == ["1", "2"]
        first = document.get(EntityKind.AGGREGATE_OBSERVATION, "1")
        assert first.aggregate_organism_measurements["1"].value == "50"
        second = document.get(EntityKind.AGGREGATE_OBSERVATION, "2")
        assert second.aggregate_organism_measurements == {}

    def test_timestamp_date_column(
        self, document: VegXDocument, cover_mapping: dict[str, str]
    ) -> None:
        frame = pd.DataFrame(
            {
                "plot": ["PlotA", "PlotA"],
                "date": pd.to_datetime(["2020-01-01", None]),
                "species": ["SpeciesX", "SpeciesY"],
                "cover": ["50", "10"],
            }
        )
        _integrate(
            document,
            frame,
            cover_mapping,
            methods={"cover": "Plant cover/%"},
            date_format="%d.%m.%Y",
        )

        assert document.size(EntityKind.PLOT_OBSERVATION) == 1
        assert document.get(EntityKind.PLOT_OBSERVATION, "1").obs_start_date == date(2020, 1, 1)
