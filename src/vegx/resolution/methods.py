"""Method and attribute registration.

A measurement role (``cover``, ``heightMeasurement``...) is tied to a
method. The first call that meets a method name registers the method, its
literature citation and its attributes. Later calls find the method by
name and rebuild the attribute tables from the document instead, so the
same method is never registered twice.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from vegx.document import VegXDocument
from vegx.errors import ConfigurationError
from vegx.models import Attribute, AttributeType, EntityKind, LiteratureCitation, Method
from vegx.models.definitions import MethodDefinition
from vegx.predefined import predefined_measurement_method
from vegx.resolution.registry import IdentityRegistry

logger = logging.getLogger(__name__)

MethodSpec = MethodDefinition | str | Mapping[str, Any]
"""A full definition, a predefined method name, or a definition as parsed JSON."""

MethodLookup = Callable[[str], MethodDefinition]


@dataclass
class ResolvedMethod:
    """A method registered in the document plus its attribute lookup tables."""

    method_id: str
    method: Method
    created: bool
    attribute_ids: list[str] = field(default_factory=list)
    """Attribute IDs in registration order."""

    attributes: list[Attribute] = field(default_factory=list)
    """Attribute records, parallel to ``attribute_ids``."""

    codes: list[str] = field(default_factory=list)
    """Codes of categorical attributes, parallel to ``attribute_ids``."""

    @property
    def attribute_type(self) -> AttributeType:
        return self.method.attribute_type

    @property
    def name(self) -> str:
        return self.method.name


def to_method_definition(
    role: str,
    spec: MethodSpec,
    lookup: MethodLookup = predefined_measurement_method,
) -> MethodDefinition:
    """Turn a method specification into a ``MethodDefinition``.

    Raises:
        ConfigurationError: If the specification has an unsupported type,
            names an unknown predefined method, or fails validation.
    """
    if isinstance(spec, MethodDefinition):
        return spec
    if isinstance(spec, str):
        return lookup(spec)
    if isinstance(spec, Mapping):
        try:
            return MethodDefinition.model_validate(spec)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid method definition for '{role}': {e}") from e
    raise ConfigurationError(
        f"Wrong type for method '{role}': {type(spec).__name__}. "
        "Expected a MethodDefinition or a predefined method name."
    )


class MethodResolver:
    """Registers methods in a document, or finds them if already there.

    Usage:
        resolver = MethodResolver(document, registry)
        resolved = resolver.resolve_all({"cover": "Plant cover/%"})
        resolved["cover"].attribute_ids
    """

    def __init__(
        self,
        document: VegXDocument,
        registry: IdentityRegistry,
        *,
        lookup: MethodLookup = predefined_measurement_method,
        verbose: bool = False,
    ) -> None:
        self.document = document
        self.registry = registry
        self.lookup = lookup
        self.log_level = logging.INFO if verbose else logging.DEBUG

    def prepare(self, specs: Mapping[str, MethodSpec]) -> dict[str, MethodDefinition]:
        """Convert every specification before anything is registered.

        Raises:
            ConfigurationError: On the first unusable specification.
        """
        return {role: to_method_definition(role, spec, self.lookup) for role, spec in specs.items()}

    def resolve_all(self, specs: Mapping[str, MethodSpec]) -> dict[str, ResolvedMethod]:
        """Register (or find) the method of every role in ``specs``."""
        definitions = self.prepare(specs)
        return {role: self.resolve(definition, role=role) for role, definition in definitions.items()}

    def resolve(
        self,
        definition: MethodDefinition,
        *,
        role: str | None = None,
        label: str = "Measurement method",
    ) -> ResolvedMethod:
        """Register ``definition`` unless a method with its name exists.

        Args:
            definition: The method to register.
            role: Mapping role using the method; only used in log messages.
            label: What the method is, as named in log messages.

        Returns:
            The registered method with its attribute tables.
        """
        method_id, created = self.registry.resolve(EntityKind.METHOD, (definition.name,))
        target = f" for '{role}'" if role else ""

        if not created:
            method = self.document.get(EntityKind.METHOD, method_id)
            resolved = ResolvedMethod(method_id=method_id, method=method, created=False)
            for attribute_id, attribute in self.document.attributes_for_method(method_id):
                self._add_attribute(resolved, attribute_id, attribute)
            logger.log(
                self.log_level,
                "%s '%s'%s already included.",
                label,
                definition.name,
                target,
            )
            return resolved

        method = Method(
            name=definition.name,
            description=definition.description,
            subject=definition.subject,
            attribute_type=definition.attribute_type,
            citation_id=self._resolve_citation(definition),
        )
        self.document.put(EntityKind.METHOD, method_id, method)

        resolved = ResolvedMethod(method_id=method_id, method=method, created=True)
        for attribute_definition in definition.attributes:
            attribute_id = self.document.reserve_id(EntityKind.ATTRIBUTE)
            attribute = Attribute(**attribute_definition.model_dump(), method_id=method_id)
            self.document.put(EntityKind.ATTRIBUTE, attribute_id, attribute)
            self._add_attribute(resolved, attribute_id, attribute)

        logger.log(
            self.log_level,
            "%s '%s' added%s.",
            label,
            definition.name,
            target,
        )
        return resolved

    def _resolve_citation(self, definition: MethodDefinition) -> str | None:
        if not definition.citation_string:
            return None
        citation_id, created = self.registry.resolve(
            EntityKind.LITERATURE_CITATION, (definition.citation_string,)
        )
        if created:
            self.document.put(
                EntityKind.LITERATURE_CITATION,
                citation_id,
                LiteratureCitation(
                    citation_string=definition.citation_string,
                    doi=definition.doi or None,
                ),
            )
        return citation_id

    @staticmethod
    def _add_attribute(resolved: ResolvedMethod, attribute_id: str, attribute: Attribute) -> None:
        resolved.attribute_ids.append(attribute_id)
        resolved.attributes.append(attribute)
        resolved.codes.append(attribute.code or "")
