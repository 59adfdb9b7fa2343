"""Shared pytest fixtures for Veg-X tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pandas as pd
import pytest

from vegx.document import VegXDocument
from vegx.models import (
    AttributeDefinition,
    AttributeType,
    MethodDefinition,
    StrataDefinition,
    StratumSpec,
)

# Type alias for the record frame factory
MakeRecords = Callable[..., pd.DataFrame]


@pytest.fixture
def document() -> VegXDocument:
    return VegXDocument()


@pytest.fixture
def cover_scale() -> MethodDefinition:
    """Ordinal cover scale with codes "10", "50" and "60"."""
    return MethodDefinition(
        name="Cover classes",
        description="Cover classes in percent",
        subject="plant cover",
        attribute_type=AttributeType.ORDINAL,
        citation_string="Braun-Blanquet (1932)",
        doi="10.0000/bb1932",
        attributes=[
            AttributeDefinition(type=AttributeType.ORDINAL, code="10", lower_bound=0, upper_bound=20),
            AttributeDefinition(type=AttributeType.ORDINAL, code="50", lower_bound=40, upper_bound=55),
            AttributeDefinition(type=AttributeType.ORDINAL, code="60", lower_bound=55, upper_bound=70),
        ],
    )


@pytest.fixture
def dbh_method() -> MethodDefinition:
    """Quantitative diameter method bounded to [1, 200] cm."""
    return MethodDefinition(
        name="Tree DBH",
        description="Diameter at breast height",
        subject="diameter",
        attribute_type=AttributeType.QUANTITATIVE,
        attributes=[
            AttributeDefinition(
                type=AttributeType.QUANTITATIVE, unit="cm", lower_limit=1, upper_limit=200
            )
        ],
    )


@pytest.fixture
def height_strata() -> StrataDefinition:
    return StrataDefinition(
        method=MethodDefinition(
            name="Height strata",
            description="Vegetation layers by height",
            subject="stratum definition",
            attribute_type=AttributeType.QUANTITATIVE,
            attributes=[
                AttributeDefinition(type=AttributeType.QUANTITATIVE, unit="m", lower_limit=0)
            ],
        ),
        strata=[
            StratumSpec(stratum_name="Herb", order=1, lower_limit=0, upper_limit=1),
            StratumSpec(stratum_name="Shrub", order=2, lower_limit=1, upper_limit=5),
            StratumSpec(stratum_name="Tree", order=3, lower_limit=5),
        ],
    )


@pytest.fixture
def make_records() -> MakeRecords:
    """Factory fixture for record frames.

    Rows are tuples matching ``columns``; values are kept as strings,
    the way the CLI reads CSV files.
    """

    def _make(columns: list[str], *rows: tuple[Any, ...]) -> pd.DataFrame:
        return pd.DataFrame([list(row) for row in rows], columns=columns, dtype=object)

    return _make


@pytest.fixture
def cover_mapping() -> dict[str, str]:
    return {
        "plotName": "plot",
        "obsStartDate": "date",
        "taxonName": "species",
        "cover": "cover",
    }
