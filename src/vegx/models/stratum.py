"""Stratum and stratum observation records."""

from __future__ import annotations

from vegx.models.base import VegXModel
from vegx.models.definitions import StratumSpec


class Stratum(StratumSpec):
    """A registered stratum, tied to its classification method."""

    method_id: str


class StratumObservation(VegXModel):
    """A stratum as observed in one plot observation."""

    plot_observation_id: str
    stratum_id: str
