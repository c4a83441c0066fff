"""
Collaborator Interfaces.

The aura engine reads everything it needs through three narrow, async
providers. Production code plugs in adapters over the real graph builder,
spaced-repetition store and wellness tracker; the in-memory providers
below serve tests, the CLI and embedding callers that already hold data.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from loguru import logger

from cognitive_aura.graph.models import GraphSnapshot, ReviewRecord

MIN_HEALTH_ADJUSTMENT = 0.5
MAX_HEALTH_ADJUSTMENT = 1.5


def clamp_health_adjustment(value: float) -> float:
    """Clamp a health multiplier to [0.5, 1.5]."""
    return max(MIN_HEALTH_ADJUSTMENT, min(MAX_HEALTH_ADJUSTMENT, value))


# =============================================================================
# PROTOCOLS
# =============================================================================


@runtime_checkable
class GraphProvider(Protocol):
    """Source of knowledge graph snapshots."""

    async def get_snapshot(self) -> GraphSnapshot | None:
        """Return the current graph, or None when unavailable."""
        ...


@runtime_checkable
class ReviewRecordProvider(Protocol):
    """Source of spaced-repetition review records."""

    async def get_review_records(self) -> list[ReviewRecord] | None:
        """Return all review records, or None when unavailable."""
        ...


@runtime_checkable
class HealthAdjustmentProvider(Protocol):
    """Source of the wellness multiplier applied to the composite score."""

    async def get_health_adjustment(self) -> float:
        """Return a multiplier in [0.5, 1.5]."""
        ...


# =============================================================================
# IN-MEMORY PROVIDERS
# =============================================================================


class StaticGraphProvider:
    """Serves a graph snapshot held in memory."""

    def __init__(self, snapshot: GraphSnapshot | None = None):
        self.snapshot = snapshot

    async def get_snapshot(self) -> GraphSnapshot | None:
        return self.snapshot

    def update(self, snapshot: GraphSnapshot) -> None:
        """Swap in a new snapshot (callers should bump last_updated)."""
        self.snapshot = snapshot


class StaticReviewProvider:
    """Serves review records held in memory."""

    def __init__(self, records: list[ReviewRecord] | None = None):
        self.records = records if records is not None else []

    async def get_review_records(self) -> list[ReviewRecord] | None:
        return self.records


class StaticHealthProvider:
    """Serves a fixed health multiplier."""

    def __init__(self, adjustment: float = 1.0):
        self.adjustment = clamp_health_adjustment(adjustment)

    async def get_health_adjustment(self) -> float:
        return self.adjustment


class CircadianPhase(str, Enum):
    """Position in the learner's daily alertness cycle."""
    LOW = "low"
    RISING = "rising"
    PEAK = "peak"
    DECLINING = "declining"


@dataclass
class WellnessSignals:
    """
    External wellness inputs.

    Attributes:
        sleep_quality: Last night's sleep quality (0-1)
        stress_level: Current stress (0-1)
        exercise_frequency: Workouts in the past week
        circadian_phase: Current circadian phase
    """
    sleep_quality: float = 0.7
    stress_level: float = 0.3
    exercise_frequency: int = 0
    circadian_phase: CircadianPhase = CircadianPhase.RISING


class WellnessHealthProvider:
    """
    Derives the health multiplier from wellness signals.

    Multipliers (compounded, then clamped to [0.5, 1.5]):
    - Sleep quality < 0.5 -> x0.85, > 0.8 -> x1.10
    - Stress > 0.7 -> x0.90
    - Exercise >= 3 sessions/week -> x1.05
    - Circadian low -> x0.80, peak -> x1.15
    """

    def __init__(self, signals: WellnessSignals | None = None):
        self.signals = signals

    def compute_adjustment(self, signals: WellnessSignals) -> float:
        adjustment = 1.0

        if signals.sleep_quality < 0.5:
            adjustment *= 0.85
        elif signals.sleep_quality > 0.8:
            adjustment *= 1.1

        if signals.stress_level > 0.7:
            adjustment *= 0.9

        if signals.exercise_frequency >= 3:
            adjustment *= 1.05

        if signals.circadian_phase == CircadianPhase.LOW:
            adjustment *= 0.8
        elif signals.circadian_phase == CircadianPhase.PEAK:
            adjustment *= 1.15

        return clamp_health_adjustment(adjustment)

    async def get_health_adjustment(self) -> float:
        if self.signals is None:
            return 1.0  # No wellness data, no adjustment

        adjustment = self.compute_adjustment(self.signals)
        logger.debug(f"Wellness health adjustment: x{adjustment:.3f}")
        return adjustment
