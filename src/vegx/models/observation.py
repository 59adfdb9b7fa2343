"""Aggregate and individual organism observation records."""

from __future__ import annotations

from pydantic import Field

from vegx.models.base import VegXModel


class Measurement(VegXModel):
    """A validated value linked to the attribute it was checked against.

    Quantitative values are stored as floats, categorical values as the
    exact code string.
    """

    attribute_id: str
    value: float | str


def _append(measurements: dict[str, Measurement], measurement: Measurement) -> str:
    key = str(len(measurements) + 1)
    measurements[key] = measurement
    return key


class AggregateObservation(VegXModel):
    """One organism identity's presence/abundance in a plot(-stratum) observation.

    Keyed by (plot observation, stratum observation, organism identity).
    """

    plot_observation_id: str
    organism_identity_id: str
    stratum_observation_id: str | None = None
    height_measurement: Measurement | None = None
    aggregate_organism_measurements: dict[str, Measurement] = Field(default_factory=dict)

    def add_measurement(self, measurement: Measurement) -> str:
        """Append an additional measurement and return its sequential key."""
        return _append(self.aggregate_organism_measurements, measurement)


class IndividualObservation(VegXModel):
    """A measurement event on one individual organism.

    Keyed by (plot observation, individual organism).
    """

    plot_observation_id: str
    individual_organism_id: str
    stratum_observation_id: str | None = None
    diameter_measurement: Measurement | None = None
    height_measurement: Measurement | None = None
    individual_organism_measurements: dict[str, Measurement] = Field(default_factory=dict)

    def add_measurement(self, measurement: Measurement) -> str:
        """Append an additional measurement and return its sequential key."""
        return _append(self.individual_organism_measurements, measurement)
