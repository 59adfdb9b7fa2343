"""Measurement validation against a registered method."""

from __future__ import annotations

import math

from vegx.errors import DomainValidationError
from vegx.models import AttributeType, Measurement
from vegx.resolution.methods import ResolvedMethod


def validate_measurement(
    method: ResolvedMethod,
    value: str,
    *,
    role: str,
    row: int | None = None,
) -> Measurement:
    """Check ``value`` against the method's value domain.

    Quantitative methods parse the value as a number and check it against
    the inclusive [lower_limit, upper_limit] range of the method's single
    attribute; a limit of None is unbounded. Ordinal and qualitative
    methods require the value to match exactly one declared code.

    Args:
        method: The method registered for ``role``.
        value: Non-missing cell text.
        role: Mapping role, used in error messages.
        row: 1-based record number, used in error messages.

    Returns:
        The measurement linked to the matching attribute.

    Raises:
        DomainValidationError: If the value is not in the method's domain.
    """
    if not method.attribute_ids:
        raise DomainValidationError(
            f"Measurement method '{method.name}' for '{role}' has no attributes.",
            row=row,
            role=role,
            value=value,
        )

    if method.attribute_type is AttributeType.QUANTITATIVE:
        return _quantitative(method, value, role=role, row=row)

    matches = [i for i, code in enumerate(method.codes) if code == value]
    if len(matches) != 1:
        raise DomainValidationError(
            f"Value '{value}' not found in measurement definition for '{role}'. "
            "Please revise classes or data.",
            row=row,
            role=role,
            value=value,
        )
    return Measurement(attribute_id=method.attribute_ids[matches[0]], value=value)


def _quantitative(method: ResolvedMethod, value: str, *, role: str, row: int | None) -> Measurement:
    try:
        number = float(value)
    except ValueError:
        number = math.nan
    if math.isnan(number):
        raise DomainValidationError(
            f"Value '{value}' for '{role}' is not a number.", row=row, role=role, value=value
        )

    attribute = method.attributes[0]
    if attribute.upper_limit is not None and number > attribute.upper_limit:
        raise DomainValidationError(
            f"Value '{value}' larger than upper limit of measurement definition for '{role}'. "
            "Please revise scale or data.",
            row=row,
            role=role,
            value=value,
        )
    if attribute.lower_limit is not None and number < attribute.lower_limit:
        raise DomainValidationError(
            f"Value '{value}' smaller than lower limit of measurement definition for '{role}'. "
            "Please revise scale or data.",
            row=row,
            role=role,
            value=value,
        )
    return Measurement(attribute_id=method.attribute_ids[0], value=number)
