"""
Knowledge graph inputs: data models and collaborator providers.

The snapshot loader lives in cognitive_aura.graph.snapshot_loader and is
imported directly by its users.
"""

from cognitive_aura.graph.models import (
    ConceptCategory,
    ConceptCluster,
    ConceptEdge,
    ConceptNode,
    EdgeType,
    GraphSnapshot,
    ReviewRecord,
)
from cognitive_aura.graph.providers import (
    GraphProvider,
    HealthAdjustmentProvider,
    ReviewRecordProvider,
    StaticGraphProvider,
    StaticHealthProvider,
    StaticReviewProvider,
    WellnessHealthProvider,
    WellnessSignals,
)

__all__ = [
    "ConceptCategory",
    "ConceptCluster",
    "ConceptEdge",
    "ConceptNode",
    "EdgeType",
    "GraphSnapshot",
    "ReviewRecord",
    "GraphProvider",
    "HealthAdjustmentProvider",
    "ReviewRecordProvider",
    "StaticGraphProvider",
    "StaticHealthProvider",
    "StaticReviewProvider",
    "WellnessHealthProvider",
    "WellnessSignals",
]
