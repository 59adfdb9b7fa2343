"""Built-in measurement methods.

String method specifications (``{"cover": "Plant cover/%"}``) are turned
into full definitions through this table. Each call returns a fresh
``MethodDefinition``, so callers may modify the result freely.
"""

from __future__ import annotations

from collections.abc import Callable

from vegx.errors import ConfigurationError
from vegx.models.definitions import AttributeDefinition, MethodDefinition
from vegx.models.enums import AttributeType


def _quantitative(
    name: str,
    description: str,
    subject: str,
    unit: str,
    lower_limit: float | None = 0.0,
    upper_limit: float | None = None,
) -> MethodDefinition:
    return MethodDefinition(
        name=name,
        description=description,
        subject=subject,
        attribute_type=AttributeType.QUANTITATIVE,
        attributes=[
            AttributeDefinition(
                type=AttributeType.QUANTITATIVE,
                unit=unit,
                lower_limit=lower_limit,
                upper_limit=upper_limit,
            )
        ],
    )


_PREDEFINED: dict[str, Callable[[], MethodDefinition]] = {
    "Plant cover/%": lambda: _quantitative(
        "Plant cover/%",
        "Plant cover as percentage of plot area",
        "plant cover",
        "%",
        upper_limit=100.0,
    ),
    "Plant frequency/%": lambda: _quantitative(
        "Plant frequency/%",
        "Percentage of sampling units where the organism is present",
        "frequency",
        "%",
        upper_limit=100.0,
    ),
    "Individual plant counts": lambda: _quantitative(
        "Individual plant counts",
        "Number of individuals counted in the plot",
        "plant counts",
        "individuals",
    ),
    "DBH/cm": lambda: _quantitative(
        "DBH/cm",
        "Stem diameter at breast height (1.3 m) in cm",
        "diameter",
        "cm",
    ),
    "Plant height/m": lambda: _quantitative(
        "Plant height/m",
        "Plant height in meters",
        "plant height",
        "m",
    ),
    "Stratum height/m": lambda: _quantitative(
        "Stratum height/m",
        "Height of the stratum top in meters",
        "stratum height",
        "m",
    ),
}


def available_methods() -> list[str]:
    """Names accepted by :func:`predefined_measurement_method`."""
    return list(_PREDEFINED)


def predefined_measurement_method(name: str) -> MethodDefinition:
    """Return the built-in method definition called ``name``.

    Raises:
        ConfigurationError: If no built-in method has that name.
    """
    try:
        factory = _PREDEFINED[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown predefined method '{name}'. "
            f"Available: {', '.join(available_methods())}"
        ) from None
    return factory()
