"""
Unit tests for the composite cognitive score.

Covers the four factor functions, the health multiplier, caching and the
neutral-substitution failure model.
"""

import random
from datetime import UTC, datetime, timedelta

import pytest

from cognitive_aura.core.models import FactorWeights
from cognitive_aura.graph.models import (
    ConceptCluster,
    ConceptEdge,
    ConceptNode,
    GraphSnapshot,
    ReviewRecord,
)
from cognitive_aura.graph.providers import StaticHealthProvider
from cognitive_aura.scoring.score_engine import NEUTRAL_SCORE, ScoreCalculator

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def _three_node_graph(**kwargs):
    nodes = [
        ConceptNode(id="a", label="A", is_active=True),
        ConceptNode(id="b", label="B", is_active=True),
        ConceptNode(id="c", label="C"),
    ]
    edges = [
        ConceptEdge("a", "b", strength=0.8),
        ConceptEdge("a", "c"),
    ]
    return GraphSnapshot(nodes=nodes, edges=edges, last_updated=FIXED_NOW, **kwargs)


class FailingHealthProvider:
    async def get_health_adjustment(self) -> float:
        raise RuntimeError("wearable offline")


class TestDepthFactor:
    def test_no_active_nodes_uses_default(self, settings):
        graph = GraphSnapshot(nodes=[ConceptNode(id="x", label="X")])
        assert ScoreCalculator(settings).compute_depth(graph) == pytest.approx(0.2)

    def test_blends_connectedness_with_default_cluster_complexity(self, settings):
        # degrees a=2, b=1 -> (0.2 + 0.1) / 2 = 0.15
        depth = ScoreCalculator(settings).compute_depth(_three_node_graph())
        assert depth == pytest.approx(0.15 * 0.7 + 0.5 * 0.3)

    def test_cluster_sizes_contribute(self, settings):
        graph = _three_node_graph(clusters=[ConceptCluster("c1", ["a", "b", "c", "d"])])
        depth = ScoreCalculator(settings).compute_depth(graph)
        assert depth == pytest.approx(0.15 * 0.7 + 0.4 * 0.3)


class TestStrengthFactor:
    def test_no_edges_uses_default(self, settings):
        graph = GraphSnapshot(nodes=[ConceptNode(id="x", label="X")])
        assert ScoreCalculator(settings).compute_strength(graph) == pytest.approx(0.3)

    def test_unlabeled_edges_count_as_half(self, settings):
        # mean(0.8, 0.5) = 0.65; density 2/3 saturates the density term
        strength = ScoreCalculator(settings).compute_strength(_three_node_graph())
        assert strength == pytest.approx(0.65 * 0.7 + 1.0 * 0.3)


class TestRetentionFactor:
    def test_no_records_uses_default(self, settings):
        assert ScoreCalculator(settings).compute_retention([], FIXED_NOW) == pytest.approx(0.5)

    def test_records_without_memory_data_use_default(self, settings):
        records = [ReviewRecord(item_id="x", next_review=FIXED_NOW + timedelta(days=1))]
        assert ScoreCalculator(settings).compute_retention(records, FIXED_NOW) == pytest.approx(0.5)

    def test_due_records_are_penalized(self, settings):
        records = [
            # ln(365) / ln(365) = 1.0, not due
            ReviewRecord(item_id="a", stability=364.0, next_review=FIXED_NOW + timedelta(days=10)),
            # no estimate, never scheduled -> due
            ReviewRecord(item_id="b", ease_factor=2.5),
        ]
        retention = ScoreCalculator(settings).compute_retention(records, FIXED_NOW)
        assert retention == pytest.approx(1.0 - 0.25)

    def test_penalty_is_capped(self, settings):
        records = [
            ReviewRecord(item_id=str(i), stability=364.0, next_review=FIXED_NOW - timedelta(days=1))
            for i in range(4)
        ]
        retention = ScoreCalculator(settings).compute_retention(records, FIXED_NOW)
        assert retention == pytest.approx(0.7)


class TestUrgencyFactor:
    def test_nothing_overdue_or_critical(self, settings):
        graph = GraphSnapshot(nodes=[ConceptNode(id="a", label="A", health_score=0.9)])
        records = [ReviewRecord(item_id="a", next_review=FIXED_NOW + timedelta(days=3))]
        assert ScoreCalculator(settings).compute_urgency(graph, records, FIXED_NOW) == 0.0

    def test_overdue_and_critical_health(self, settings):
        graph = GraphSnapshot(nodes=[
            ConceptNode(id="a", label="A", health_score=0.1),
            ConceptNode(id="b", label="B", health_score=0.9),
        ])
        records = [ReviewRecord(item_id="a", next_review=FIXED_NOW - timedelta(days=2))]
        urgency = ScoreCalculator(settings).compute_urgency(graph, records, FIXED_NOW)
        assert urgency == pytest.approx(0.2 + 0.4)

    def test_overdue_contribution_is_capped(self, settings):
        graph = GraphSnapshot(nodes=[ConceptNode(id="a", label="A")])
        records = [ReviewRecord(item_id="a", next_review=FIXED_NOW - timedelta(days=30))]
        urgency = ScoreCalculator(settings).compute_urgency(graph, records, FIXED_NOW)
        assert urgency == pytest.approx(0.6)


class TestCompositeScore:
    @pytest.mark.asyncio
    async def test_weighted_sum_without_health_provider(self, settings, clock):
        calculator = ScoreCalculator(settings, clock)
        graph = _three_node_graph()
        weights = FactorWeights()

        breakdown = await calculator.compute_breakdown(graph, [], weights)

        expected = breakdown.components.weighted(weights)
        assert breakdown.health_adjustment == 1.0
        assert breakdown.composite_score == pytest.approx(expected)
        assert breakdown.failed_factors == []

    @pytest.mark.asyncio
    async def test_health_adjustment_is_clamped(self, settings, clock):
        calculator = ScoreCalculator(settings, clock)
        breakdown = await calculator.compute_breakdown(
            _three_node_graph(), [], FactorWeights(), StaticHealthProvider(3.0)
        )

        assert breakdown.health_adjustment == 1.5
        assert breakdown.composite_score == pytest.approx(min(1.0, breakdown.weighted_score * 1.5))

    @pytest.mark.asyncio
    async def test_health_provider_failure_means_no_adjustment(self, settings, clock):
        calculator = ScoreCalculator(settings, clock)
        breakdown = await calculator.compute_breakdown(
            _three_node_graph(), [], FactorWeights(), FailingHealthProvider()
        )

        assert breakdown.health_adjustment == 1.0
        assert breakdown.composite_score == pytest.approx(breakdown.weighted_score)

    @pytest.mark.asyncio
    async def test_score_always_within_bounds(self, settings, clock):
        rand = random.Random(7)
        calculator = ScoreCalculator(settings, clock)

        for i in range(200):
            node_count = rand.randint(1, 12)
            nodes = [
                ConceptNode(
                    id=f"n{j}",
                    label=f"N{j}",
                    is_active=rand.random() < 0.5,
                    health_score=rand.choice([None, rand.random()]),
                )
                for j in range(node_count)
            ]
            edges = [
                ConceptEdge(
                    f"n{rand.randrange(node_count)}",
                    f"n{rand.randrange(node_count)}",
                    strength=rand.choice([None, rand.random()]),
                )
                for _ in range(rand.randint(0, 30))
            ]
            records = [
                ReviewRecord(
                    item_id=f"r{k}",
                    stability=rand.choice([None, rand.uniform(0, 1000)]),
                    ease_factor=rand.choice([None, rand.uniform(1.3, 4.0)]),
                    interval_days=rand.choice([None, rand.uniform(0, 400)]),
                    next_review=FIXED_NOW + timedelta(days=rand.uniform(-60, 60)),
                )
                for k in range(rand.randint(0, 10))
            ]
            graph = GraphSnapshot(nodes=nodes, edges=edges, last_updated=FIXED_NOW + timedelta(seconds=i))
            weights = FactorWeights(rand.random(), rand.random(), rand.random(), rand.random()).normalized()
            health = StaticHealthProvider(rand.uniform(0.0, 2.0))

            score = await calculator.compute(graph, records, weights, health)

            assert 0.0 <= score <= 1.0


class TestScoreCache:
    @pytest.mark.asyncio
    async def test_cache_hit_within_ttl(self, settings, clock):
        calculator = ScoreCalculator(settings, clock)
        graph = _three_node_graph()

        first = await calculator.compute_breakdown(graph, [], FactorWeights())
        clock.advance(10)
        second = await calculator.compute_breakdown(graph, [], FactorWeights())

        assert first.from_cache is False
        assert second.from_cache is True
        assert second.composite_score == first.composite_score

    @pytest.mark.asyncio
    async def test_cache_expires_after_ttl(self, settings, clock):
        calculator = ScoreCalculator(settings, clock)
        graph = _three_node_graph()

        await calculator.compute_breakdown(graph, [], FactorWeights())
        clock.advance(31)
        again = await calculator.compute_breakdown(graph, [], FactorWeights())

        assert again.from_cache is False

    @pytest.mark.asyncio
    async def test_cache_keyed_on_review_count(self, settings, clock):
        calculator = ScoreCalculator(settings, clock)
        graph = _three_node_graph()

        await calculator.compute_breakdown(graph, [], FactorWeights())
        other = await calculator.compute_breakdown(
            graph, [ReviewRecord(item_id="a", stability=10.0)], FactorWeights()
        )

        assert other.from_cache is False
        assert calculator.cache_size == 2

    @pytest.mark.asyncio
    async def test_clear_cache(self, settings, clock):
        calculator = ScoreCalculator(settings, clock)
        graph = _three_node_graph()

        await calculator.compute_breakdown(graph, [], FactorWeights())
        calculator.clear_cache()
        again = await calculator.compute_breakdown(graph, [], FactorWeights())

        assert again.from_cache is False


class TestFactorFailures:
    @pytest.mark.asyncio
    async def test_failed_factor_is_replaced_by_neutral(self, settings, clock):
        class BrokenDepth(ScoreCalculator):
            def compute_depth(self, graph):
                raise ZeroDivisionError("bad cluster data")

        breakdown = await BrokenDepth(settings, clock).compute_breakdown(
            _three_node_graph(), [], FactorWeights()
        )

        assert breakdown.failed_factors == ["depth"]
        assert breakdown.components.depth == NEUTRAL_SCORE
        assert breakdown.is_neutral_fallback is False

    @pytest.mark.asyncio
    async def test_all_factors_failing_gives_neutral_score(self, settings, clock):
        class BrokenEverything(ScoreCalculator):
            def compute_depth(self, graph):
                raise ValueError("depth")

            def compute_strength(self, graph):
                raise ValueError("strength")

            def compute_retention(self, records, now):
                raise ValueError("retention")

            def compute_urgency(self, graph, records, now):
                raise ValueError("urgency")

        calculator = BrokenEverything(settings, clock)
        breakdown = await calculator.compute_breakdown(_three_node_graph(), [], FactorWeights())

        assert breakdown.composite_score == NEUTRAL_SCORE
        assert breakdown.is_neutral_fallback is True
        assert calculator.cache_size == 0
