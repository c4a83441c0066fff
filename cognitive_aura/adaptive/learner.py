"""
Adaptive Learner.

Tunes the composite-score weights and the context thresholds from delayed
learner feedback. This is a single-sample, gradient-free heuristic:

Weight nudge (only when prediction error = 1 - accuracy exceeds 0.3):
    depth, strength  *= 1 - lr × error × 0.1
    retention        *= 1 + lr × error × 0.1
    urgency          *= 1 - lr × error × 0.05
then always renormalize so the four weights sum to 1.

Threshold drift (when context relevance < 0.6):
    recovery_ceiling -= 0.01 (floor 0.1)
    overload_floor   += 0.01 (ceiling 0.9)

Because every update ends in a renormalization and all factors stay
positive, repeated identical feedback converges instead of diverging.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from loguru import logger

from config import Settings, get_settings
from cognitive_aura.core.models import ContextThresholds, FactorWeights, PerformanceRecord


@dataclass
class PerformanceStats:
    """Aggregate view of the feedback buffer."""

    total_records: int = 0
    average_accuracy: float = 0.0
    average_completion: float = 0.0
    average_satisfaction: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "total_records": self.total_records,
            "average_accuracy": round(self.average_accuracy, 4),
            "average_completion": round(self.average_completion, 4),
            "average_satisfaction": round(self.average_satisfaction, 4),
        }


class AdaptiveLearner:
    """
    Owns the decision surface (weights + thresholds) and the feedback buffer.

    Two weight copies exist: the configured baseline and the adaptive copy.
    Only the adaptive copy is used when scoring.
    """

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()
        self._baseline = FactorWeights.from_dict(self._settings.get_weight_config()).normalized()
        self._baseline_thresholds = ContextThresholds(
            recovery_ceiling=self._settings.recovery_ceiling,
            overload_floor=self._settings.overload_floor,
        )
        self._weights = self._baseline
        self._thresholds = self._baseline_thresholds
        self._history: deque[PerformanceRecord] = deque(maxlen=self._settings.performance_buffer_size)

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def weights(self) -> FactorWeights:
        """Adaptive weights used for scoring."""
        return self._weights

    @property
    def baseline_weights(self) -> FactorWeights:
        return self._baseline

    @property
    def thresholds(self) -> ContextThresholds:
        return self._thresholds

    @property
    def history(self) -> list[PerformanceRecord]:
        """Buffered feedback, oldest first."""
        return list(self._history)

    # =========================================================================
    # LEARNING
    # =========================================================================

    def record_performance(self, metrics: PerformanceRecord) -> None:
        """
        Buffer a feedback record and adapt weights and thresholds.

        Args:
            metrics: Validated feedback on the last recommendation
        """
        self._history.append(metrics)
        self._weights = self.adapt_weights(self._weights, metrics)
        self._thresholds = self.adapt_thresholds(self._thresholds, metrics)

        logger.info(
            f"Performance recorded: accuracy={metrics.accuracy * 100:.1f}%, "
            f"relevance={metrics.context_relevance * 100:.1f}% "
            f"({len(self._history)} buffered)"
        )

    def adapt_weights(self, weights: FactorWeights, metrics: PerformanceRecord) -> FactorWeights:
        """Apply one feedback-driven weight nudge and renormalize."""
        error = 1 - metrics.accuracy

        if error > self._settings.error_threshold:
            step = self._settings.learning_rate * error
            weights = FactorWeights(
                depth=weights.depth * (1 - step * 0.1),
                strength=weights.strength * (1 - step * 0.1),
                retention=weights.retention * (1 + step * 0.1),
                urgency=weights.urgency * (1 - step * 0.05),
            )
            logger.debug(f"Weights nudged for error {error:.2f}: {weights.to_dict()}")

        return weights.normalized()

    def adapt_thresholds(
        self,
        thresholds: ContextThresholds,
        metrics: PerformanceRecord,
    ) -> ContextThresholds:
        """Widen the FOCUS band when the context felt wrong."""
        if metrics.context_relevance >= self._settings.relevance_threshold:
            return thresholds

        widened = thresholds.widened(
            step=self._settings.threshold_step,
            ceiling_min=self._settings.recovery_ceiling_min,
            floor_max=self._settings.overload_floor_max,
        )
        logger.debug(f"Context thresholds widened: {widened.to_dict()}")
        return widened

    def replay(self, records: Iterable[PerformanceRecord]) -> int:
        """Record a sequence of feedback records; returns how many were applied."""
        count = 0
        for record in records:
            self.record_performance(record)
            count += 1
        return count

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def update_baseline_weights(self, partial: Mapping[str, float]) -> FactorWeights:
        """
        Merge new values into the baseline and reset the adaptive copy to it.

        Args:
            partial: Subset of depth/strength/retention/urgency

        Returns:
            The new (normalized) baseline

        Raises:
            ValueError: Unknown keys, negative values, or an all-zero result
        """
        merged = {**self._baseline.to_dict(), **dict(partial)}
        candidate = FactorWeights.from_dict(merged)
        if candidate.total <= 0:
            raise ValueError("At least one weight must be positive")

        self._baseline = candidate.normalized()
        self._weights = self._baseline
        logger.info(f"CCS weights updated: {self._baseline.to_dict()}")
        return self._baseline

    def performance_stats(self) -> PerformanceStats:
        """Averages over the feedback buffer."""
        count = len(self._history)
        if count == 0:
            return PerformanceStats()

        return PerformanceStats(
            total_records=count,
            average_accuracy=sum(r.accuracy for r in self._history) / count,
            average_completion=sum(r.task_completion for r in self._history) / count,
            average_satisfaction=sum(r.user_satisfaction for r in self._history) / count,
        )

    def clear_history(self) -> None:
        """Drop buffered feedback, keeping the learned weights and thresholds."""
        self._history.clear()

    def reset(self) -> None:
        """Forget all feedback and return to the configured baseline."""
        self._history.clear()
        self._weights = self._baseline
        self._thresholds = self._baseline_thresholds
