"""Organism name, identity and individual organism records."""

from __future__ import annotations

from vegx.models.base import VegXModel


class OrganismName(VegXModel):
    """A literal name string.

    ``taxon`` marks names that follow a nomenclatural code, as opposed to
    free-text labels chosen by the dataset author.
    """

    name: str
    taxon: bool = False


class OrganismIdentity(VegXModel):
    """A resolved identification used by observations."""

    original_organism_name_id: str
    original_concept_identification: str | None = None
    """Taxon concept ID. Never populated while citation strings are unused."""


class IndividualOrganism(VegXModel):
    """A tagged organism (e.g. a tree) within a plot."""

    plot_id: str
    individual_organism_label: str
    organism_identity_id: str | None = None
