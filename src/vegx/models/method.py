"""Method, attribute and literature citation records."""

from __future__ import annotations

from vegx.models.base import VegXModel
from vegx.models.definitions import AttributeDefinition
from vegx.models.enums import AttributeType


class LiteratureCitation(VegXModel):
    citation_string: str
    doi: str | None = None


class Method(VegXModel):
    """A registered measurement procedure. Keyed by name."""

    name: str
    description: str = ""
    subject: str = ""
    attribute_type: AttributeType
    citation_id: str | None = None


class Attribute(AttributeDefinition):
    """A registered element of a method's value domain."""

    method_id: str
