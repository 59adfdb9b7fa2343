"""Record table helpers: cell normalization, carry-forward, duplicates."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from datetime import date, datetime
from typing import Any

import pandas as pd

from vegx.errors import DomainValidationError

CellValue = str | date


def to_frame(records: Any) -> pd.DataFrame:
    """Accept a DataFrame or anything the DataFrame constructor accepts."""
    if isinstance(records, pd.DataFrame):
        frame = records.reset_index(drop=True)
    else:
        frame = pd.DataFrame(records)
    frame.columns = [str(c) for c in frame.columns]
    return frame


def is_null(value: Any) -> bool:
    """True for None, NaN, NA and NaT cells."""
    return value is None or (not isinstance(value, str) and bool(pd.isna(value)))


def cell_text(value: Any) -> str:
    """Render a cell the way it reads in the source table.

    Integral floats lose their ``.0`` (pandas upcasts integer columns with
    gaps to float) and midnight timestamps render as plain ISO dates.
    Null cells render as the empty string.
    """
    if is_null(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class CellReader:
    """Normalizes raw cells to text, mapping declared missing values to None.

    Cells are compared as text, so ``0`` and ``"0"`` are both missing
    when ``"0"`` is declared missing. Null cells (None, NaN, NA, NaT) are
    always missing.
    """

    def __init__(self, missing_values: Collection[str]) -> None:
        self.missing_values = frozenset(str(v) for v in missing_values)

    def is_missing(self, value: Any) -> bool:
        return is_null(value) or cell_text(value) in self.missing_values

    def text(self, value: Any) -> str | None:
        """Return the cell text, or None if the cell is missing."""
        if self.is_missing(value):
            return None
        return cell_text(value)

    def value(self, value: Any) -> CellValue | None:
        """Like :meth:`text`, but date and timestamp cells are kept as dates."""
        if self.is_missing(value):
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return cell_text(value)


class CarryForward:
    """Remembers the last non-missing value of a key column.

    A missing cell reuses the nearest preceding value. A missing cell
    with nothing before it is a domain error.
    """

    def __init__(self, role: str) -> None:
        self.role = role
        self.current: Any = None

    def update(self, value: Any, *, row: int) -> Any:
        if value is not None:
            self.current = value
        elif self.current is None:
            raise DomainValidationError(
                f"Missing value for '{self.role}' and no previous record to carry it from.",
                row=row,
                role=self.role,
            )
        return self.current


def parse_date(value: CellValue, date_format: str, *, row: int, role: str) -> date:
    """Parse a date cell with a ``strptime`` format.

    Cells that already hold a date or timestamp are used as they are.

    Raises:
        DomainValidationError: If the text does not match the format.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, date_format).date()
    except ValueError as e:
        raise DomainValidationError(
            f"Cannot parse date '{value}' with format '{date_format}'.",
            row=row,
            role=role,
            value=value,
        ) from e


def count_duplicates(frame: pd.DataFrame, columns: Sequence[str]) -> int:
    """Number of records whose identity columns repeat an earlier record.

    The identity columns of each record are joined into one string; the
    result is the number of records minus the number of distinct strings.
    Null cells join as empty strings.
    """
    if frame.empty or not columns:
        return 0
    keys = frame[list(columns)].map(cell_text).agg(" ".join, axis=1)
    return len(keys) - keys.nunique()
