"""
Composite Cognitive Score (CCS) Engine.

The composite score summarizes the learner's current cognitive state by
combining four orthogonal factors into a single value in [0, 1].

Formula:
    CCS = clamp(w_d·D + w_s·S + w_r·R + w_u·U) × H

Where:
    D = Depth factor (structural complexity around active concepts)
    S = Strength factor (edge strength and network density)
    R = Retention factor (memory stability, penalized by due reviews)
    U = Urgency factor (overdue reviews and at-risk concepts)
    H = Health adjustment from wellness signals, clamped to [0.5, 1.5]

The weights come from the adaptive learner, so the same graph can score
differently as feedback accumulates.

Caching:
    Scores are cached per (graph version, review count) for 30 seconds.
    A cache hit returns the health-adjusted value without recomputation.

Failure model:
    A factor that raises is replaced by the neutral 0.5; if nothing can be
    computed the whole score falls back to 0.5. Nothing propagates.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from loguru import logger

from config import Settings, get_settings
from cognitive_aura.core.models import FactorWeights
from cognitive_aura.core.retention import clamp01, days_between, estimate_retention
from cognitive_aura.graph.models import GraphSnapshot, ReviewRecord
from cognitive_aura.graph.providers import HealthAdjustmentProvider, clamp_health_adjustment

NEUTRAL_SCORE = 0.5

# Factor defaults when there is nothing to measure
DEFAULT_DEPTH = 0.2
DEFAULT_STRENGTH = 0.3
DEFAULT_RETENTION = 0.5
DEFAULT_CLUSTER_COMPLEXITY = 0.5
DEFAULT_EDGE_STRENGTH = 0.5

# Normalization constants
MAX_CONNECTIONS = 10
CRITICAL_HEALTH = 0.3


# =============================================================================
# DATA MODELS
# =============================================================================


@dataclass
class ScoreComponents:
    """The four normalized factors of a composite score."""

    depth: float = NEUTRAL_SCORE
    strength: float = NEUTRAL_SCORE
    retention: float = NEUTRAL_SCORE
    urgency: float = NEUTRAL_SCORE

    def weighted(self, weights: FactorWeights) -> float:
        return (
            self.depth * weights.depth
            + self.strength * weights.strength
            + self.retention * weights.retention
            + self.urgency * weights.urgency
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "depth": round(self.depth, 3),
            "strength": round(self.strength, 3),
            "retention": round(self.retention, 3),
            "urgency": round(self.urgency, 3),
        }


@dataclass
class ScoreBreakdown:
    """Full result of a composite score calculation."""

    components: ScoreComponents
    weighted_score: float
    health_adjustment: float
    composite_score: float
    failed_factors: list[str] = field(default_factory=list)
    from_cache: bool = False

    @property
    def is_neutral_fallback(self) -> bool:
        return len(self.failed_factors) == 4

    def to_dict(self) -> dict[str, Any]:
        return {
            "factors": self.components.to_dict(),
            "weighted_score": round(self.weighted_score, 4),
            "health_adjustment": round(self.health_adjustment, 3),
            "composite_score": round(self.composite_score, 4),
            "failed_factors": list(self.failed_factors),
            "from_cache": self.from_cache,
        }


@dataclass
class _CacheEntry:
    breakdown: ScoreBreakdown
    computed_at: datetime


def neutral_breakdown(failed: list[str] | None = None) -> ScoreBreakdown:
    return ScoreBreakdown(
        components=ScoreComponents(),
        weighted_score=NEUTRAL_SCORE,
        health_adjustment=1.0,
        composite_score=NEUTRAL_SCORE,
        failed_factors=failed if failed is not None else ["depth", "strength", "retention", "urgency"],
    )


# =============================================================================
# SCORE CALCULATOR
# =============================================================================


class ScoreCalculator:
    """
    Computes composite cognitive scores from graph and review data.

    Usage:
        calculator = ScoreCalculator()
        score = await calculator.compute(graph, records, weights, health_provider)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._settings = settings or get_settings()
        self._clock = clock or (lambda: datetime.now(UTC))
        self._cache: dict[tuple[Any, int], _CacheEntry] = {}

    # =========================================================================
    # FACTOR FUNCTIONS
    # =========================================================================

    def compute_depth(self, graph: GraphSnapshot) -> float:
        """
        Compute depth factor D.

        Active concepts with many connections sit deeper in the knowledge
        structure. Blends average connectedness (70%) with cluster
        interconnectedness (30%).

        Returns:
            Depth factor in [0, 1] (0.2 when nothing is active)
        """
        active = graph.active_nodes
        if not active:
            return DEFAULT_DEPTH

        total_complexity = sum(
            min(1.0, graph.degree(node.id) / MAX_CONNECTIONS) for node in active
        )
        average_complexity = total_complexity / len(active)

        if graph.clusters:
            cluster_complexity = sum(c.size * 0.1 for c in graph.clusters) / len(graph.clusters)
        else:
            cluster_complexity = DEFAULT_CLUSTER_COMPLEXITY

        return min(1.0, average_complexity * 0.7 + cluster_complexity * 0.3)

    def compute_strength(self, graph: GraphSnapshot) -> float:
        """
        Compute strength factor S.

        Formula: S = 0.7 × mean(edge strength) + 0.3 × min(1, 5 × density)

        Unlabeled edges count as 0.5; density is edges over possible pairs.

        Returns:
            Strength factor in [0, 1] (0.3 when there are no edges)
        """
        if not graph.edges:
            return DEFAULT_STRENGTH

        strengths = [
            edge.strength if edge.strength is not None else DEFAULT_EDGE_STRENGTH
            for edge in graph.edges
        ]
        average_strength = sum(strengths) / len(strengths)

        node_count = len(graph.nodes)
        max_possible_edges = node_count * (node_count - 1) / 2
        density = len(graph.edges) / max(1, max_possible_edges)

        return clamp01(average_strength * 0.7 + min(1.0, density * 5) * 0.3)

    def compute_retention(self, records: list[ReviewRecord], now: datetime) -> float:
        """
        Compute retention factor R.

        Averages per-record retention (FSRS stability first, legacy
        ease/interval second), then subtracts up to 0.3 for the share of
        records currently due.

        Returns:
            Retention factor in [0, 1] (0.5 when nothing is measurable)
        """
        if not records:
            return DEFAULT_RETENTION

        estimates = []
        for record in records:
            estimate = estimate_retention(record.stability, record.ease_factor, record.interval_days)
            if estimate is not None:
                estimates.append(estimate)
        if not estimates:
            return DEFAULT_RETENTION

        average_retention = sum(estimates) / len(estimates)

        due_count = sum(1 for record in records if days_between(record.next_review, now) >= 0)
        due_ratio = due_count / len(records)
        penalty = min(0.3, due_ratio * 0.5)

        return clamp01(average_retention - penalty)

    def compute_urgency(
        self,
        graph: GraphSnapshot,
        records: list[ReviewRecord],
        now: datetime,
    ) -> float:
        """
        Compute urgency factor U.

        - Up to 0.6 from the average days overdue (0.1 per day)
        - Up to 0.4 from the share of concepts with health below 0.3

        Returns:
            Urgency factor in [0, 1]
        """
        urgency = 0.0

        overdue_days = [
            days for record in records
            if (days := days_between(record.next_review, now)) > 0
        ]
        if overdue_days:
            average_overdue = sum(overdue_days) / len(overdue_days)
            urgency += min(0.6, average_overdue * 0.1)

        critical = [
            node for node in graph.nodes
            if node.health_score is not None and node.health_score < CRITICAL_HEALTH
        ]
        if critical and graph.nodes:
            critical_ratio = len(critical) / len(graph.nodes)
            urgency += min(0.4, critical_ratio * 0.8)

        return clamp01(urgency)

    # =========================================================================
    # COMPOSITE SCORE
    # =========================================================================

    async def compute(
        self,
        graph: GraphSnapshot,
        records: list[ReviewRecord],
        weights: FactorWeights,
        health_provider: HealthAdjustmentProvider | None = None,
    ) -> float:
        """Compute the composite score; see compute_breakdown()."""
        breakdown = await self.compute_breakdown(graph, records, weights, health_provider)
        return breakdown.composite_score

    async def compute_breakdown(
        self,
        graph: GraphSnapshot,
        records: list[ReviewRecord],
        weights: FactorWeights,
        health_provider: HealthAdjustmentProvider | None = None,
    ) -> ScoreBreakdown:
        """
        Compute the composite score with its factor breakdown.

        Args:
            graph: Current knowledge graph snapshot
            records: Current review records
            weights: Factor weights to apply (the adaptive copy)
            health_provider: Optional wellness multiplier source

        Returns:
            ScoreBreakdown whose composite_score is in [0, 1]
        """
        now = self._clock()
        cache_key = (graph.last_updated, len(records))

        cached = self._cache.get(cache_key)
        if cached is not None and self._is_live(cached, now):
            logger.debug(f"CCS cache hit for {cache_key}")
            return ScoreBreakdown(
                components=cached.breakdown.components,
                weighted_score=cached.breakdown.weighted_score,
                health_adjustment=cached.breakdown.health_adjustment,
                composite_score=cached.breakdown.composite_score,
                failed_factors=list(cached.breakdown.failed_factors),
                from_cache=True,
            )

        failed: list[str] = []
        components = ScoreComponents(
            depth=self._safe_factor("depth", failed, self.compute_depth, graph),
            strength=self._safe_factor("strength", failed, self.compute_strength, graph),
            retention=self._safe_factor("retention", failed, self.compute_retention, records, now),
            urgency=self._safe_factor("urgency", failed, self.compute_urgency, graph, records, now),
        )

        if len(failed) == 4:
            logger.warning("All CCS factors failed; using neutral score")
            return neutral_breakdown()

        try:
            weighted = clamp01(components.weighted(weights))
        except Exception as e:
            logger.warning(f"CCS combination failed, using neutral score: {e}")
            return neutral_breakdown(failed)

        health_adjustment = await self._get_health_adjustment(health_provider)
        composite = clamp01(weighted * health_adjustment)

        logger.debug(
            f"CCS factors: D={components.depth:.3f}, S={components.strength:.3f}, "
            f"R={components.retention:.3f}, U={components.urgency:.3f}"
        )
        logger.info(
            f"CCS: {weighted * 100:.1f}% -> {composite * 100:.1f}% (health x{health_adjustment:.2f})"
        )

        breakdown = ScoreBreakdown(
            components=components,
            weighted_score=weighted,
            health_adjustment=health_adjustment,
            composite_score=composite,
            failed_factors=failed,
        )
        self._store(cache_key, breakdown, now)
        return breakdown

    def _safe_factor(self, name: str, failed: list[str], fn: Callable[..., float], *args) -> float:
        """Run a factor function, substituting the neutral score on failure."""
        try:
            return clamp01(fn(*args))
        except Exception as e:
            logger.warning(f"CCS {name} factor failed, using neutral {NEUTRAL_SCORE}: {e}")
            failed.append(name)
            return NEUTRAL_SCORE

    async def _get_health_adjustment(self, provider: HealthAdjustmentProvider | None) -> float:
        if provider is None:
            return 1.0

        try:
            return clamp_health_adjustment(await provider.get_health_adjustment())
        except Exception as e:
            logger.warning(f"Health adjustment unavailable, using x1.0: {e}")
            return 1.0

    # =========================================================================
    # CACHE
    # =========================================================================

    def _is_live(self, entry: _CacheEntry, now: datetime) -> bool:
        age = (now - entry.computed_at).total_seconds()
        return age < self._settings.score_cache_ttl_seconds

    def _store(self, key: tuple[Any, int], breakdown: ScoreBreakdown, now: datetime) -> None:
        for stale_key in [k for k, entry in self._cache.items() if not self._is_live(entry, now)]:
            del self._cache[stale_key]

        self._cache[key] = _CacheEntry(breakdown=breakdown, computed_at=now)

        while len(self._cache) > self._settings.score_cache_max_entries:
            del self._cache[next(iter(self._cache))]

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        """Clear cached scores (call when weights or graph data change)."""
        self._cache.clear()
