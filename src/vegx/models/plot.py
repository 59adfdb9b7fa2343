"""Plot and plot observation records."""

from __future__ import annotations

from datetime import date

from vegx.models.base import VegXModel


class Plot(VegXModel):
    """A spatially delimited survey unit.

    Subplots are plots whose ``parent_plot_id`` points at another plot in
    the same document. The parent is a reference, not a container.
    """

    plot_name: str
    parent_plot_id: str | None = None


class PlotObservation(VegXModel):
    """One survey visit to a plot. Keyed by (plot, start date)."""

    plot_id: str
    obs_start_date: date
