"""
Target Concept Selector.

Picks the single concept the learner should act on next using a strict
three-tier priority cascade. The first tier with any candidate wins;
lower tiers are never consulted.

Tiers:
    P1 URGENT_PREREQUISITE: weak prerequisite of an active concept
        (source of a prerequisite edge into an active node,
         mastery < 0.7, health < 0.5)
    P2 FORGETTING_RISK: active concept whose retention estimate < 0.6
    P3 COGNITIVE_LOAD: the three heaviest active concepts with load > 0.6

When every tier is empty a random active concept is returned (tagged P3);
with no active concepts at all the result is empty.

Within a tier, candidates are ranked by a multi-criteria score:
    0.30 × (1 - health)          prefer unhealthy nodes
    0.25 × cognitive load        prefer heavy nodes
    0.20 × (1 - mastery)         prefer learning opportunities
    0.15 × (1 - access/max)      prefer neglected nodes
    0.10 × activation level      prefer currently active nodes
Ties go to the earliest candidate.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from loguru import logger

from config import Settings, get_settings
from cognitive_aura.core.models import NodePriority
from cognitive_aura.core.retention import estimate_retention
from cognitive_aura.graph.models import ConceptNode, EdgeType, GraphSnapshot


@dataclass
class TargetSelection:
    """Selected target concept and the tier it came from."""

    node: ConceptNode | None = None
    priority: NodePriority | None = None
    candidate_count: int = 0
    is_fallback: bool = False

    @property
    def is_empty(self) -> bool:
        return self.node is None


class TargetSelector:
    """
    Three-tier target concept selection.

    Usage:
        selector = TargetSelector()
        selection = selector.select(graph)
        if selection.node:
            print(selection.node.label, selection.priority)
    """

    def __init__(self, settings: Settings | None = None, rng: random.Random | None = None):
        self._settings = settings or get_settings()
        self._rng = rng or random.Random()

    # =========================================================================
    # TIERS
    # =========================================================================

    def find_urgent_prerequisites(self, graph: GraphSnapshot) -> list[ConceptNode]:
        """
        Tier 1: unmastered, unhealthy prerequisites blocking active learning.
        """
        active_ids = {node.id for node in graph.active_nodes}
        blocking_sources = {
            edge.source_id
            for edge in graph.edges
            if edge.edge_type == EdgeType.PREREQUISITE and edge.target_id in active_ids
        }

        return [
            node for node in graph.nodes
            if node.id in blocking_sources
            and node.mastery_level < self._settings.prerequisite_mastery_threshold
            and node.health_score is not None
            and node.health_score < self._settings.prerequisite_health_threshold
        ]

    def find_forgetting_risk(self, graph: GraphSnapshot) -> list[ConceptNode]:
        """
        Tier 2: active concepts whose memory is decaying.

        Nodes without stability or legacy ease/interval data never qualify.
        """
        at_risk = []
        for node in graph.active_nodes:
            retention = estimate_retention(node.stability, node.ease_factor, node.interval_days)
            if retention is not None and retention < self._settings.forgetting_risk_threshold:
                at_risk.append(node)
        return at_risk

    def find_high_cognitive_load(self, graph: GraphSnapshot) -> list[ConceptNode]:
        """
        Tier 3: the heaviest active concepts, highest load first.
        """
        heavy = [
            node for node in graph.active_nodes
            if node.cognitive_load > self._settings.cognitive_load_threshold
        ]
        heavy.sort(key=lambda node: node.cognitive_load, reverse=True)
        return heavy[: self._settings.cognitive_load_top_n]

    # =========================================================================
    # RANKING
    # =========================================================================

    @staticmethod
    def score_candidate(node: ConceptNode, max_access: int) -> float:
        """Multi-criteria tie-break score for one candidate."""
        score = 0.0

        if node.health_score is not None:
            score += (1 - node.health_score) * 0.3

        score += node.cognitive_load * 0.25
        score += (1 - node.mastery_level) * 0.2

        if max_access > 0:
            score += (1 - node.access_count / max_access) * 0.15

        score += node.activation_level * 0.1
        return score

    @classmethod
    def select_best(cls, candidates: list[ConceptNode]) -> ConceptNode:
        """Return the highest-scoring candidate (first one wins ties)."""
        if len(candidates) == 1:
            return candidates[0]

        max_access = max(node.access_count for node in candidates)
        best = candidates[0]
        best_score = cls.score_candidate(best, max_access)
        for node in candidates[1:]:
            score = cls.score_candidate(node, max_access)
            if score > best_score:
                best, best_score = node, score
        return best

    # =========================================================================
    # CASCADE
    # =========================================================================

    def select(self, graph: GraphSnapshot) -> TargetSelection:
        """
        Run the priority cascade over a graph.

        Args:
            graph: Current knowledge graph snapshot

        Returns:
            TargetSelection (empty when no active concept exists or on error)
        """
        try:
            tiers = (
                (NodePriority.URGENT_PREREQUISITE, self.find_urgent_prerequisites),
                (NodePriority.FORGETTING_RISK, self.find_forgetting_risk),
                (NodePriority.COGNITIVE_LOAD, self.find_high_cognitive_load),
            )
            for priority, find_candidates in tiers:
                candidates = find_candidates(graph)
                if candidates:
                    return TargetSelection(
                        node=self.select_best(candidates),
                        priority=priority,
                        candidate_count=len(candidates),
                    )

            active = graph.active_nodes
            if active:
                return TargetSelection(
                    node=self._rng.choice(active),
                    priority=NodePriority.COGNITIVE_LOAD,
                    candidate_count=len(active),
                    is_fallback=True,
                )

            return TargetSelection()

        except Exception as e:
            logger.error(f"Target node selection failed: {e}")
            return TargetSelection()
