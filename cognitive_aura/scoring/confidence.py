"""
Recommendation confidence.

Confidence reflects data quality rather than the score itself: richer
graphs, known node health and a feedback history all make the decision
more trustworthy.
"""

from __future__ import annotations

from cognitive_aura.core.models import AuraContext
from cognitive_aura.graph.models import ConceptNode, GraphSnapshot

BASE_CONFIDENCE = 0.5
MIN_CONFIDENCE = 0.3
MAX_CONFIDENCE = 1.0


def calculate_confidence(
    graph: GraphSnapshot,
    target: ConceptNode | None,
    context: AuraContext,
    performance_records: int,
) -> float:
    """
    Calculate algorithm confidence for a recommendation.

    Starts at 0.5 and adds 0.1 for each of: more than 10 nodes, more than
    20 edges, a target with a known health score, more than 5 feedback
    records, a FOCUS context (the most reliable band), and having a target
    at all. Clamped to [0.3, 1.0].
    """
    confidence = BASE_CONFIDENCE

    # Data quality
    if len(graph.nodes) > 10:
        confidence += 0.1
    if len(graph.edges) > 20:
        confidence += 0.1
    if target is not None and target.health_score is not None:
        confidence += 0.1
    if performance_records > 5:
        confidence += 0.1

    # Algorithm certainty
    if context == AuraContext.FOCUS:
        confidence += 0.1
    if target is not None:
        confidence += 0.1

    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence))
