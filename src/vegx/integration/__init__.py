"""Record table integration into Veg-X documents.

Submodules:
- mapping: role -> column mapping validation
- records: cell normalization, carry-forward, duplicate detection
- measurements: value validation against registered methods
- pipeline: the shared per-record algorithm
- aggregate / individual: the two observation variants
"""

from vegx.integration.aggregate import AggregateStrategy, add_aggregate_organism_observations
from vegx.integration.individual import IndividualStrategy, add_individual_organism_observations
from vegx.integration.pipeline import IntegrationReport, IntegrationResult, RecordIntegrator

__all__ = [
    "AggregateStrategy",
    "IndividualStrategy",
    "IntegrationReport",
    "IntegrationResult",
    "RecordIntegrator",
    "add_aggregate_organism_observations",
    "add_individual_organism_observations",
]
