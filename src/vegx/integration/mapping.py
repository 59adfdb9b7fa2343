"""Column mapping: canonical roles -> record table columns.

Identity roles are reserved names that locate the plot, date, stratum and
organism of a record. Any other mapping key is a measurement role, either
one of the single-slot roles (height, diameter) or an additional role
stored in the observation's open-ended measurement list.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field

from vegx.errors import ConfigurationError

PLOT_NAME = "plotName"
OBS_START_DATE = "obsStartDate"
SUBPLOT_NAME = "subPlotName"
STRATUM_NAME = "stratumName"
ORGANISM_NAME = "organismName"
TAXON_NAME = "taxonName"
INDIVIDUAL_LABEL = "individualOrganismLabel"

HEIGHT_MEASUREMENT = "heightMeasurement"
DIAMETER_MEASUREMENT = "diameterMeasurement"

IDENTITY_ROLES = frozenset(
    {PLOT_NAME, OBS_START_DATE, SUBPLOT_NAME, STRATUM_NAME, ORGANISM_NAME, TAXON_NAME, INDIVIDUAL_LABEL}
)
SINGLE_SLOT_ROLES = frozenset({HEIGHT_MEASUREMENT, DIAMETER_MEASUREMENT})
RESERVED_ROLES = IDENTITY_ROLES | SINGLE_SLOT_ROLES
REQUIRED_ROLES = (PLOT_NAME, OBS_START_DATE)


@dataclass(frozen=True)
class ColumnMapping:
    """A validated mapping, split by role category.

    Every dict preserves the caller's mapping order.
    """

    identity: dict[str, str] = field(default_factory=dict)
    single_slot: dict[str, str] = field(default_factory=dict)
    additional: dict[str, str] = field(default_factory=dict)

    def column(self, role: str) -> str | None:
        """Column mapped to ``role``, or None if the role is not mapped."""
        for roles in (self.identity, self.single_slot, self.additional):
            if role in roles:
                return roles[role]
        return None

    def has(self, role: str) -> bool:
        return self.column(role) is not None

    @property
    def measurement_roles(self) -> list[str]:
        """Single-slot roles first, then additional roles."""
        return [*self.single_slot, *self.additional]


def classify_mapping(
    mapping: Mapping[str, str],
    columns: Collection[str],
    *,
    identity_roles: Collection[str],
    single_slot_roles: Collection[str],
) -> ColumnMapping:
    """Validate a role -> column mapping against a record table.

    Args:
        mapping: Role name to column name, in caller order.
        columns: Column names present in the record table.
        identity_roles: Reserved identity roles the integrator supports.
        single_slot_roles: Reserved measurement roles the integrator supports.

    Returns:
        The mapping split into identity, single-slot and additional roles.

    Raises:
        ConfigurationError: If a required role is missing, a mapped column
            is absent from the table, or a reserved role is not supported.
    """
    for role in REQUIRED_ROLES:
        if role not in mapping:
            raise ConfigurationError(f"Mapping for '{role}' is required.")

    result = ColumnMapping()
    for role, column in mapping.items():
        if column not in columns:
            raise ConfigurationError(
                f"Variable '{column}' not found in column names. Revise mapping or data."
            )
        if role in identity_roles:
            result.identity[role] = column
        elif role in single_slot_roles:
            result.single_slot[role] = column
        elif role in RESERVED_ROLES:
            raise ConfigurationError(f"Role '{role}' is not supported by this integrator.")
        else:
            result.additional[role] = column
    return result
