"""Shared base for Veg-X entity records."""

from pydantic import BaseModel, ConfigDict


class VegXModel(BaseModel):
    """Base class for every record stored in a Veg-X document.

    Records are mutable (observations are extended row by row) but
    assignments are validated, and unknown fields are rejected.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)
