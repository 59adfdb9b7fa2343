"""Caller-authored method and stratum definitions.

These describe measurement procedures and stratum classifications before
they are registered in a document. The integrators copy them into
Method/Attribute/Stratum records exactly once per distinct method name.
"""

from __future__ import annotations

from pydantic import Field, model_validator

from vegx.models.base import VegXModel
from vegx.models.enums import AttributeType


class AttributeDefinition(VegXModel):
    """One element of a method's value domain.

    Quantitative attributes bound a numeric range; ordinal and qualitative
    attributes each describe a single code.
    """

    type: AttributeType
    unit: str | None = None
    lower_limit: float | None = None
    upper_limit: float | None = None
    code: str | None = None
    definition: str | None = None
    lower_bound: float | None = None
    upper_bound: float | None = None
    midpoint: float | None = None

    @model_validator(mode="after")
    def _check_domain(self) -> AttributeDefinition:
        if self.type is AttributeType.QUANTITATIVE:
            if (
                self.lower_limit is not None
                and self.upper_limit is not None
                and self.lower_limit > self.upper_limit
            ):
                raise ValueError(
                    f"lower_limit {self.lower_limit} is larger than upper_limit {self.upper_limit}"
                )
        elif not self.code:
            raise ValueError(f"{self.type.value} attribute requires a code")
        return self


class MethodDefinition(VegXModel):
    """A measurement method and its attribute domain."""

    name: str = Field(min_length=1)
    description: str = ""
    subject: str = ""
    attribute_type: AttributeType
    citation_string: str = ""
    doi: str = ""
    attributes: list[AttributeDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_attributes(self) -> MethodDefinition:
        if self.attribute_type is AttributeType.QUANTITATIVE:
            if len(self.attributes) > 1:
                raise ValueError(
                    f"Quantitative method '{self.name}' must have a single attribute, "
                    f"got {len(self.attributes)}"
                )
            if self.attributes and self.attributes[0].type is not AttributeType.QUANTITATIVE:
                raise ValueError(
                    f"Quantitative method '{self.name}' needs a quantitative attribute"
                )
        else:
            for attribute in self.attributes:
                if attribute.type is AttributeType.QUANTITATIVE:
                    raise ValueError(
                        f"Categorical method '{self.name}' cannot hold quantitative attributes"
                    )
        return self

    @property
    def codes(self) -> list[str]:
        """Codes of the categorical attributes, in declaration order."""
        return [a.code or "" for a in self.attributes]


class StratumSpec(VegXModel):
    """One stratum of a classification (height band or category)."""

    stratum_name: str = Field(min_length=1)
    order: int | None = None
    lower_limit: float | None = None
    upper_limit: float | None = None
    definition: str | None = None


class StrataDefinition(VegXModel):
    """A stratum classification: its method plus the ordered strata."""

    method: MethodDefinition
    strata: list[StratumSpec] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_unique_names(self) -> StrataDefinition:
        names = [s.stratum_name for s in self.strata]
        duplicated = sorted({n for n in names if names.count(n) > 1})
        if duplicated:
            raise ValueError(f"Duplicated stratum names: {', '.join(duplicated)}")
        return self

    @property
    def stratum_names(self) -> list[str]:
        return [s.stratum_name for s in self.strata]
