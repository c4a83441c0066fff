"""
Core Aura Models.

Canonical types shared across the scoring, selection, delivery and
learning layers:

- AuraContext / NodePriority: the discrete outputs of a decision cycle
- FactorWeights / ContextThresholds: the tunable decision surface
- PerformanceRecord: learner feedback consumed by the adaptive learner
- AuraState: one complete recommendation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cognitive_aura.graph.models import ConceptNode

WEIGHT_KEYS = ("depth", "strength", "retention", "urgency")


class AuraContext(str, Enum):
    """
    Coarse cognitive context derived from the composite score.

    - RECOVERY -> gentle review, low-stakes tasks
    - FOCUS -> optimal learning window, challenging material
    - OVERLOAD -> short, simplified tasks to reduce load
    """
    RECOVERY = "recovery"
    FOCUS = "focus"
    OVERLOAD = "overload"


class NodePriority(str, Enum):
    """Priority tier a target concept was selected from."""
    URGENT_PREREQUISITE = "urgent_prerequisite"  # Tier 1: blocks active learning
    FORGETTING_RISK = "forgetting_risk"          # Tier 2: memory decaying
    COGNITIVE_LOAD = "cognitive_load"            # Tier 3: heaviest active concept

    @property
    def tier(self) -> int:
        return {
            NodePriority.URGENT_PREREQUISITE: 1,
            NodePriority.FORGETTING_RISK: 2,
            NodePriority.COGNITIVE_LOAD: 3,
        }[self]


class SoundscapePreset(str, Enum):
    """Ambient audio presets recommended to the soundscape collaborator."""
    DEEP_REST = "deep_rest"
    CALM_READINESS = "calm_readiness"
    DEEP_FOCUS = "deep_focus"
    MEMORY_FLOW = "memory_flow"
    REASONING_BOOST = "reasoning_boost"


class PhysicsMode(str, Enum):
    """Visualization intensity recommended to the graph renderer."""
    CALM = "calm"
    FOCUS = "focus"
    INTENSE = "intense"


class SessionStatus(str, Enum):
    """Freshness of the engine's current state."""
    NO_STATE = "no_state"
    FRESH = "fresh"
    STALE = "stale"


# =============================================================================
# DECISION SURFACE
# =============================================================================


@dataclass(frozen=True)
class FactorWeights:
    """
    Coefficients of the composite score.

    Score = D·depth + S·strength + R·retention + U·urgency
    """
    depth: float = 0.4
    strength: float = 0.3
    retention: float = 0.2
    urgency: float = 0.1

    @property
    def total(self) -> float:
        return self.depth + self.strength + self.retention + self.urgency

    def normalized(self) -> FactorWeights:
        """Return weights rescaled to sum to 1 (equal split if all are zero)."""
        total = self.total
        if total <= 0:
            return FactorWeights(0.25, 0.25, 0.25, 0.25)
        return FactorWeights(
            depth=self.depth / total,
            strength=self.strength / total,
            retention=self.retention / total,
            urgency=self.urgency / total,
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "depth": self.depth,
            "strength": self.strength,
            "retention": self.retention,
            "urgency": self.urgency,
        }

    @classmethod
    def from_dict(cls, data: dict[str, float]) -> FactorWeights:
        unknown = set(data) - set(WEIGHT_KEYS)
        if unknown:
            raise ValueError(f"Unknown weight keys: {sorted(unknown)}")
        negative = [key for key, value in data.items() if value < 0]
        if negative:
            raise ValueError(f"Weights must be non-negative: {negative}")
        return cls(**data)


@dataclass(frozen=True)
class ContextThresholds:
    """
    Boundaries between the three contexts.

    score < recovery_ceiling -> RECOVERY
    score >= overload_floor -> OVERLOAD
    otherwise -> FOCUS
    """
    recovery_ceiling: float = 0.3
    overload_floor: float = 0.7

    def __post_init__(self):
        if not 0 < self.recovery_ceiling < self.overload_floor < 1:
            raise ValueError(
                "Thresholds must satisfy 0 < recovery_ceiling < overload_floor < 1, "
                f"got {self.recovery_ceiling} / {self.overload_floor}"
            )

    def band(self, context: AuraContext) -> tuple[float, float]:
        """Score interval covered by a context."""
        return {
            AuraContext.RECOVERY: (0.0, self.recovery_ceiling),
            AuraContext.FOCUS: (self.recovery_ceiling, self.overload_floor),
            AuraContext.OVERLOAD: (self.overload_floor, 1.0),
        }[context]

    def band_midpoint(self, context: AuraContext) -> float:
        low, high = self.band(context)
        return (low + high) / 2

    def widened(self, step: float, ceiling_min: float, floor_max: float) -> ContextThresholds:
        """Widen the FOCUS band by step on both sides, within the drift bounds."""
        return ContextThresholds(
            recovery_ceiling=max(ceiling_min, self.recovery_ceiling - step),
            overload_floor=min(floor_max, self.overload_floor + step),
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "recovery_ceiling": self.recovery_ceiling,
            "overload_floor": self.overload_floor,
        }


class PerformanceRecord(BaseModel):
    """Learner feedback on the last recommendation."""

    model_config = ConfigDict(frozen=True)

    accuracy: float = Field(ge=0.0, le=1.0, description="How accurate the last prediction was")
    context_relevance: float = Field(ge=0.0, le=1.0, description="Was the context appropriate")
    task_completion: float = Field(default=0.0, ge=0.0, le=1.0, description="Completion ratio of the micro-task")
    time_to_complete: float = Field(default=0.0, ge=0.0, description="Elapsed seconds")
    user_satisfaction: float = Field(default=3.0, ge=1.0, le=5.0, description="Self-reported rating (1-5)")

    @field_validator("task_completion", mode="before")
    @classmethod
    def _completion_flag(cls, value: Any) -> Any:
        # A plain completed/not-completed flag counts as 1.0 / 0.0
        if isinstance(value, bool):
            return 1.0 if value else 0.0
        return value


# =============================================================================
# AURA STATE
# =============================================================================


@dataclass
class AuraState:
    """
    Complete recommendation for one evaluation cycle.

    Attributes:
        composite_score: Composite cognitive score (0-1)
        context: Derived cognitive context
        target_node: Concept to act on next (never mutated by the engine)
        target_priority: Tier the target was selected from
        micro_task: Actionable task text
        recommended_soundscape: Ambient audio preset hint
        physics_mode: Visualization intensity hint
        timestamp: When the state was produced
        session_id: Engine session that produced it
        confidence: Algorithm confidence (0-1)
        previous_states: Up to five earlier states, newest first
        adaptation_count: Number of successful evaluations before this one
    """
    composite_score: float
    context: AuraContext
    target_node: ConceptNode | None
    target_priority: NodePriority | None
    micro_task: str
    recommended_soundscape: SoundscapePreset
    physics_mode: PhysicsMode
    timestamp: datetime
    session_id: str
    confidence: float
    previous_states: list[AuraState] = field(default_factory=list)
    adaptation_count: int = 0

    def age_seconds(self, now: datetime) -> float:
        return (now - self.timestamp).total_seconds()

    def to_log_entry(self) -> dict[str, Any]:
        """Logical fields recorded for analytics."""
        return {
            "session_id": self.session_id,
            "timestamp": self.timestamp.isoformat(),
            "ccs": round(self.composite_score, 4),
            "context": self.context.value,
            "target_node_id": self.target_node.id if self.target_node else None,
            "priority": self.target_priority.value if self.target_priority else None,
            "confidence": round(self.confidence, 4),
            "adaptation_count": self.adaptation_count,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary (history as log entries)."""
        return {
            **self.to_log_entry(),
            "target_label": self.target_node.label if self.target_node else None,
            "micro_task": self.micro_task,
            "recommended_soundscape": self.recommended_soundscape.value,
            "physics_mode": self.physics_mode.value,
            "previous_states": [state.to_log_entry() for state in self.previous_states],
        }
