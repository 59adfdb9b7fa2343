"""Identity resolution for Veg-X documents.

Submodules:
- registry: natural key -> stable ID, assign-or-reuse
- methods: method, attribute and citation registration
- strata: stratum classification registration
"""

from vegx.resolution.methods import MethodResolver, ResolvedMethod, to_method_definition
from vegx.resolution.registry import IdentityRegistry, NaturalKey
from vegx.resolution.strata import ResolvedStrata, StratumResolver

__all__ = [
    "IdentityRegistry",
    "MethodResolver",
    "NaturalKey",
    "ResolvedMethod",
    "ResolvedStrata",
    "StratumResolver",
    "to_method_definition",
]
