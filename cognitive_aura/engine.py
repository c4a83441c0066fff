"""
Cognitive Aura Engine.

The decision engine behind NeuroLearn-style cognitive guidance: one call
turns the learner's knowledge graph and review history into a single
actionable recommendation.

Pipeline (one evaluation cycle):
    1. Fetch graph snapshot + review records from the providers
    2. Composite cognitive score (ScoreCalculator, cached 30s)
    3. Context classification against the adaptive thresholds
    4. Target concept via the three-tier cascade (TargetSelector)
    5. Micro-task, soundscape and physics hints (composer)
    6. Confidence from data quality
    7. Store, prepend history, publish to listeners

State machine:
    NO_STATE -> FRESH (computed < 5 min ago) -> STALE -> FRESH ...
    force_refresh skips the freshness check.

Failure model:
    Missing/empty data -> DefaultState (FOCUS, confidence 0.3)
    Anything unrecoverable -> ErrorState (RECOVERY, confidence 0.1)
    Neither is stored, so history is never polluted.
    Listener failures are logged and isolated per listener.

Concurrency:
    Single-threaded asyncio. Overlapping evaluate() calls share one
    in-flight computation (single-flight) and receive the same state.
"""

from __future__ import annotations

import asyncio
import inspect
import random
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from loguru import logger
from pydantic import ValidationError

from config import Settings, get_settings
from cognitive_aura.adaptive.learner import AdaptiveLearner, PerformanceStats
from cognitive_aura.adaptive.target_selector import TargetSelector
from cognitive_aura.core.models import (
    AuraContext,
    AuraState,
    ContextThresholds,
    FactorWeights,
    PerformanceRecord,
    PhysicsMode,
    SessionStatus,
    SoundscapePreset,
)
from cognitive_aura.delivery.composer import compose
from cognitive_aura.graph.providers import (
    GraphProvider,
    HealthAdjustmentProvider,
    ReviewRecordProvider,
)
from cognitive_aura.scoring.confidence import calculate_confidence
from cognitive_aura.scoring.context_classifier import classify_context
from cognitive_aura.scoring.score_engine import NEUTRAL_SCORE, ScoreBreakdown, ScoreCalculator

AuraListener = Callable[[AuraState], Awaitable[None] | None]

DEFAULT_STATE_TASK = (
    "Start by adding some flashcards or study materials to build your neural network."
)
ERROR_STATE_TASK = (
    "Take a moment to restart the application if you continue having issues."
)
DEFAULT_CONFIDENCE = 0.3
ERROR_CONFIDENCE = 0.1


def new_session_id(now: datetime) -> str:
    """Session identifier: cae_<epoch ms>_<random suffix>."""
    return f"cae_{int(now.timestamp() * 1000)}_{uuid4().hex[:9]}"


class CognitiveAuraEngine:
    """
    Produces aura states for one learner session.

    One engine instance per active learning session; learned weights and
    thresholds live as long as the instance.

    Usage:
        engine = CognitiveAuraEngine(graph_provider, review_provider, health_provider)
        state = await engine.evaluate()
        print(state.context, state.target_node, state.micro_task)

        await engine.record_performance(
            PerformanceRecord(accuracy=0.8, context_relevance=0.9, task_completion=1.0)
        )
    """

    def __init__(
        self,
        graph_provider: GraphProvider,
        review_provider: ReviewRecordProvider,
        health_provider: HealthAdjustmentProvider | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
        session_id: str | None = None,
    ):
        self._settings = settings or get_settings()
        self._clock = clock or (lambda: datetime.now(UTC))

        self._graph_provider = graph_provider
        self._review_provider = review_provider
        self._health_provider = health_provider

        self._calculator = ScoreCalculator(self._settings, self._clock)
        self._selector = TargetSelector(self._settings, rng)
        self._learner = AdaptiveLearner(self._settings)

        self.session_id = session_id or new_session_id(self._clock())
        self._current: AuraState | None = None
        self._last_breakdown: ScoreBreakdown | None = None
        self._listeners: list[AuraListener] = []
        self._inflight: asyncio.Task[AuraState] | None = None
        # bumped by dispose(); evaluations started earlier must not store or publish
        self._generation = 0

        logger.info(f"Cognitive Aura Engine initialized (session {self.session_id})")

    # =========================================================================
    # READ-ONLY STATE
    # =========================================================================

    @property
    def weights(self) -> FactorWeights:
        """Adaptive factor weights currently used for scoring."""
        return self._learner.weights

    @property
    def baseline_weights(self) -> FactorWeights:
        return self._learner.baseline_weights

    @property
    def thresholds(self) -> ContextThresholds:
        return self._learner.thresholds

    @property
    def learner(self) -> AdaptiveLearner:
        return self._learner

    @property
    def last_breakdown(self) -> ScoreBreakdown | None:
        """Factor breakdown behind the current state."""
        return self._last_breakdown

    @property
    def status(self) -> SessionStatus:
        if self._current is None:
            return SessionStatus.NO_STATE
        if self._is_fresh(self._current):
            return SessionStatus.FRESH
        return SessionStatus.STALE

    def get_current_state(self) -> AuraState | None:
        """Last successfully computed state (None before the first one)."""
        return self._current

    def performance_stats(self) -> PerformanceStats:
        return self._learner.performance_stats()

    # =========================================================================
    # EVALUATION
    # =========================================================================

    async def evaluate(self, force_refresh: bool = False) -> AuraState:
        """
        Produce the current aura state.

        Returns the cached state while it is fresh (unless force_refresh),
        joins an evaluation already in flight, or computes a new one.
        Never raises.
        """
        if not force_refresh and self._current is not None and self._is_fresh(self._current):
            logger.debug("Using cached aura state")
            return self._current

        if self._inflight is not None and not self._inflight.done():
            logger.debug("Joining in-flight aura evaluation")
            return await asyncio.shield(self._inflight)

        task = asyncio.ensure_future(self._evaluate(self._generation))
        self._inflight = task
        task.add_done_callback(self._clear_inflight)
        return await asyncio.shield(task)

    async def refresh_state(self) -> AuraState:
        """Force a recomputation regardless of freshness."""
        return await self.evaluate(force_refresh=True)

    def _clear_inflight(self, task: asyncio.Task[AuraState]) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _evaluate(self, generation: int) -> AuraState:
        try:
            graph = await self._graph_provider.get_snapshot()
            records = await self._review_provider.get_review_records()

            if graph is None or graph.is_empty:
                logger.warning("Empty knowledge graph, returning default state")
                return self._create_default_state()
            if records is None:
                logger.warning("Review records unavailable, returning default state")
                return self._create_default_state()

            thresholds = self._learner.thresholds
            breakdown = await self._calculator.compute_breakdown(
                graph, records, self._learner.weights, self._health_provider
            )
            score = breakdown.composite_score
            context = classify_context(score, thresholds)
            selection = self._selector.select(graph)
            recommendation = compose(selection.node, context, score, thresholds)
            confidence = calculate_confidence(
                graph, selection.node, context, len(self._learner.history)
            )

            previous = self._current
            state = AuraState(
                composite_score=score,
                context=context,
                target_node=selection.node,
                target_priority=selection.priority,
                micro_task=recommendation.micro_task,
                recommended_soundscape=recommendation.soundscape,
                physics_mode=recommendation.physics_mode,
                timestamp=self._clock(),
                session_id=self.session_id,
                confidence=confidence,
                previous_states=self._build_history(previous),
                adaptation_count=previous.adaptation_count + 1 if previous else 0,
            )

            if generation != self._generation:
                logger.info("Engine disposed during evaluation, discarding state")
                return state

            self._current = state
            self._last_breakdown = breakdown

        except Exception as e:
            logger.exception(f"Failed to generate aura state: {e}")
            return self._create_error_state()

        logger.info(
            f"Aura state: {state.context.value} (CCS {state.composite_score * 100:.1f}%), "
            f"target={state.target_node.label if state.target_node else 'None'} "
            f"({state.target_priority.value if state.target_priority else 'n/a'}), "
            f"confidence={state.confidence:.2f}"
        )
        await self._publish(state)
        return state

    def _build_history(self, previous: AuraState | None) -> list[AuraState]:
        """Previous state first, then its history, capped; entries drop their own history."""
        if previous is None:
            return []
        chain = [previous, *previous.previous_states][: self._settings.history_size]
        return [replace(state, previous_states=[]) for state in chain]

    def _is_fresh(self, state: AuraState) -> bool:
        return state.age_seconds(self._clock()) < self._settings.state_freshness_seconds

    def _create_default_state(self) -> AuraState:
        return AuraState(
            composite_score=NEUTRAL_SCORE,
            context=AuraContext.FOCUS,
            target_node=None,
            target_priority=None,
            micro_task=DEFAULT_STATE_TASK,
            recommended_soundscape=SoundscapePreset.CALM_READINESS,
            physics_mode=PhysicsMode.CALM,
            timestamp=self._clock(),
            session_id=self.session_id,
            confidence=DEFAULT_CONFIDENCE,
        )

    def _create_error_state(self) -> AuraState:
        return AuraState(
            composite_score=NEUTRAL_SCORE,
            context=AuraContext.RECOVERY,
            target_node=None,
            target_priority=None,
            micro_task=ERROR_STATE_TASK,
            recommended_soundscape=SoundscapePreset.CALM_READINESS,
            physics_mode=PhysicsMode.CALM,
            timestamp=self._clock(),
            session_id=self.session_id,
            confidence=ERROR_CONFIDENCE,
        )

    # =========================================================================
    # LISTENERS
    # =========================================================================

    def subscribe(self, listener: AuraListener) -> Callable[[], None]:
        """
        Register a listener for every newly computed state.

        Listeners may be plain or async callables.

        Returns:
            Callable that unsubscribes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def _publish(self, state: AuraState) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(state)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                name = getattr(listener, "__name__", type(listener).__name__)
                logger.warning(f"Aura listener {name} failed: {e}")

    # =========================================================================
    # FEEDBACK & CONFIGURATION
    # =========================================================================

    async def record_performance(self, metrics: PerformanceRecord | Mapping[str, Any]) -> None:
        """
        Feed learner outcome back into the adaptive learner.

        Mappings are validated into a PerformanceRecord first; invalid
        feedback is logged and dropped.
        """
        if not isinstance(metrics, PerformanceRecord):
            try:
                metrics = PerformanceRecord.model_validate(dict(metrics))
            except ValidationError as e:
                logger.error(f"Invalid performance record dropped: {e}")
                return

        self._learner.record_performance(metrics)

    def update_baseline_weights(self, partial: Mapping[str, float]) -> FactorWeights:
        """
        Replace part of the baseline weights and reset the adaptive copy.

        Cached scores are dropped since they were computed with old weights.
        Unlike the evaluation path, this call rejects bad input instead of
        degrading: it is the only engine operation that raises.

        Returns:
            The new baseline weights (normalized)

        Raises:
            ValueError: Unknown keys, negative values or all-zero weights
        """
        baseline = self._learner.update_baseline_weights(partial)
        self._calculator.clear_cache()
        return baseline

    def clear_caches(self) -> None:
        """Drop cached composite scores, forcing full recalculation."""
        self._calculator.clear_cache()
        logger.info("Cognitive aura caches cleared")

    def dispose(self) -> None:
        """
        Release listeners, caches, feedback history and the current state.

        An evaluation already in flight still completes for its awaiters,
        but its state is neither stored nor published.
        """
        self._generation += 1
        self._inflight = None
        self._listeners.clear()
        self._calculator.clear_cache()
        self._learner.clear_history()
        self._current = None
        self._last_breakdown = None
        logger.info(f"Cognitive aura engine disposed (session {self.session_id})")
