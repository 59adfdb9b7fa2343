"""Error taxonomy for Veg-X data integration.

- ConfigurationError: bad mapping, missing or malformed method definitions,
  inconsistent stratum mapping. Raised before the document is touched.
- DomainValidationError: a record value that the document cannot accept
  (out-of-range measurement, unknown code or stratum, missing identity).
  Raised mid-loop; rows already processed stay in the document.
- DuplicateRecordsWarning: non-fatal, issued through ``warnings``.
"""

from __future__ import annotations


class VegXError(ValueError):
    """Base class for integration failures."""


class ConfigurationError(VegXError):
    """The mapping, methods or stratum definition cannot be used."""


class DomainValidationError(VegXError):
    """A record value falls outside what the document accepts.

    Attributes:
        row: 1-based record number within the integrated table, if known.
        role: Mapping role of the offending column, if known.
        value: The offending cell value, if known.
    """

    def __init__(
        self,
        message: str,
        *,
        row: int | None = None,
        role: str | None = None,
        value: object = None,
    ) -> None:
        if row is not None:
            message = f"Record #{row}: {message}"
        super().__init__(message)
        self.row = row
        self.role = role
        self.value = value


class MissingIdentityError(DomainValidationError):
    """An aggregate record has neither an organism name nor a taxon name."""


class DuplicateRecordsWarning(UserWarning):
    """Several records share the same identity columns."""
