"""
Unit tests for the three-tier target concept cascade.
"""

import random

from cognitive_aura.adaptive.target_selector import TargetSelector
from cognitive_aura.core.models import NodePriority
from cognitive_aura.graph.models import ConceptEdge, ConceptNode, EdgeType, GraphSnapshot


def _graph(nodes, edges=None):
    return GraphSnapshot(nodes=nodes, edges=edges or [])


class TestUrgentPrerequisites:
    def test_weak_prerequisite_of_active_concept(self, settings):
        """A weak, unhealthy prerequisite of an active concept is tier 1."""
        graph = _graph(
            [
                ConceptNode(id="subnet", label="Subnetting", mastery_level=0.4, health_score=0.3),
                ConceptNode(id="vlsm", label="VLSM", is_active=True),
            ],
            [ConceptEdge("subnet", "vlsm", EdgeType.PREREQUISITE)],
        )

        selection = TargetSelector(settings).select(graph)

        assert selection.node.id == "subnet"
        assert selection.priority == NodePriority.URGENT_PREREQUISITE
        assert selection.is_fallback is False

    def test_prerequisite_without_health_does_not_qualify(self, settings):
        graph = _graph(
            [
                ConceptNode(id="subnet", label="Subnetting", mastery_level=0.4),
                ConceptNode(id="vlsm", label="VLSM", is_active=True),
            ],
            [ConceptEdge("subnet", "vlsm", EdgeType.PREREQUISITE)],
        )

        assert TargetSelector(settings).find_urgent_prerequisites(graph) == []

    def test_prerequisite_of_inactive_concept_does_not_qualify(self, settings):
        graph = _graph(
            [
                ConceptNode(id="subnet", label="Subnetting", mastery_level=0.4, health_score=0.3),
                ConceptNode(id="vlsm", label="VLSM"),
            ],
            [ConceptEdge("subnet", "vlsm", EdgeType.PREREQUISITE)],
        )

        assert TargetSelector(settings).find_urgent_prerequisites(graph) == []

    def test_mastered_prerequisite_does_not_qualify(self, settings):
        graph = _graph(
            [
                ConceptNode(id="subnet", label="Subnetting", mastery_level=0.8, health_score=0.3),
                ConceptNode(id="vlsm", label="VLSM", is_active=True),
            ],
            [ConceptEdge("subnet", "vlsm", EdgeType.PREREQUISITE)],
        )

        assert TargetSelector(settings).find_urgent_prerequisites(graph) == []


class TestCascadeOrder:
    def test_tier_one_wins_over_lower_tiers(self, settings, sample_graph):
        selection = TargetSelector(settings).select(sample_graph)

        assert selection.node.id == "ip"
        assert selection.priority == NodePriority.URGENT_PREREQUISITE

    def test_forgetting_risk_when_no_urgent_prerequisite(self, settings, sample_graph):
        sample_graph.get_node("ip").health_score = None

        selection = TargetSelector(settings).select(sample_graph)

        # dns: legacy ease 1.5 / interval 3 days -> retention ~0.08
        assert selection.node.id == "dns"
        assert selection.priority == NodePriority.FORGETTING_RISK

    def test_nodes_without_memory_data_are_not_at_risk(self, settings):
        graph = _graph([ConceptNode(id="a", label="A", is_active=True)])
        assert TargetSelector(settings).find_forgetting_risk(graph) == []

    def test_cognitive_load_tier_takes_top_three(self, settings):
        loads = {"a": 0.9, "b": 0.7, "c": 0.65, "d": 0.8, "e": 0.5}
        graph = _graph([
            ConceptNode(id=node_id, label=node_id.upper(), is_active=True, cognitive_load=load)
            for node_id, load in loads.items()
        ])

        heavy = TargetSelector(settings).find_high_cognitive_load(graph)
        selection = TargetSelector(settings).select(graph)

        assert [node.id for node in heavy] == ["a", "d", "b"]
        assert selection.priority == NodePriority.COGNITIVE_LOAD
        assert selection.node.id in {"a", "d", "b"}
        assert selection.candidate_count == 3


class TestRanking:
    def test_unhealthy_candidate_ranks_higher(self):
        healthy = ConceptNode(id="h", label="H", health_score=0.9)
        unhealthy = ConceptNode(id="u", label="U", health_score=0.1)

        assert TargetSelector.select_best([healthy, unhealthy]).id == "u"

    def test_first_candidate_wins_ties(self):
        first = ConceptNode(id="first", label="First", cognitive_load=0.7)
        second = ConceptNode(id="second", label="Second", cognitive_load=0.7)

        assert TargetSelector.select_best([first, second]).id == "first"

    def test_neglected_candidate_ranks_higher(self):
        busy = ConceptNode(id="busy", label="Busy", access_count=20)
        neglected = ConceptNode(id="neglected", label="Neglected", access_count=0)

        assert TargetSelector.select_best([busy, neglected]).id == "neglected"

    def test_score_candidate_weights(self):
        node = ConceptNode(
            id="n", label="N", health_score=0.5, cognitive_load=0.4,
            mastery_level=0.5, access_count=5, activation_level=1.0,
        )
        expected = 0.5 * 0.3 + 0.4 * 0.25 + 0.5 * 0.2 + 0.5 * 0.15 + 1.0 * 0.1
        assert abs(TargetSelector.score_candidate(node, max_access=10) - expected) < 1e-9


class TestFallback:
    def _quiet_graph(self):
        return _graph([
            ConceptNode(id="a", label="A", is_active=True, cognitive_load=0.2),
            ConceptNode(id="b", label="B", is_active=True, cognitive_load=0.4),
            ConceptNode(id="c", label="C", cognitive_load=0.9),
        ])

    def test_random_active_node_when_all_tiers_empty(self, settings, rng):
        selection = TargetSelector(settings, rng).select(self._quiet_graph())

        assert selection.is_fallback is True
        assert selection.priority == NodePriority.COGNITIVE_LOAD
        assert selection.node.id in {"a", "b"}

    def test_fallback_is_deterministic_with_seeded_rng(self, settings):
        first = TargetSelector(settings, random.Random(3)).select(self._quiet_graph())
        second = TargetSelector(settings, random.Random(3)).select(self._quiet_graph())

        assert first.node.id == second.node.id

    def test_no_active_nodes_gives_empty_selection(self, settings):
        graph = _graph([ConceptNode(id="a", label="A", cognitive_load=0.9)])

        selection = TargetSelector(settings).select(graph)

        assert selection.is_empty
        assert selection.priority is None

    def test_selection_errors_give_empty_selection(self, settings):
        graph = GraphSnapshot(nodes=[ConceptNode(id="a", label="A", is_active=True)], edges=None)

        selection = TargetSelector(settings).select(graph)

        assert selection.is_empty
