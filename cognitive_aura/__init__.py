"""
Cognitive Aura - adaptive cognitive-state decision engine.

Turns a learner's knowledge graph and spaced-repetition history into one
recommendation: a cognitive context, a target concept, a micro-task and
ambient audio/visual hints. Learns from feedback within a session.

Usage:
    from cognitive_aura import CognitiveAuraEngine
    from cognitive_aura.graph import StaticGraphProvider, StaticReviewProvider

    engine = CognitiveAuraEngine(StaticGraphProvider(graph), StaticReviewProvider(records))
    state = await engine.evaluate()
"""

from cognitive_aura.core.models import (
    AuraContext,
    AuraState,
    ContextThresholds,
    FactorWeights,
    NodePriority,
    PerformanceRecord,
    PhysicsMode,
    SessionStatus,
    SoundscapePreset,
)
from cognitive_aura.engine import CognitiveAuraEngine

__version__ = "1.0.0"

__all__ = [
    "AuraContext",
    "AuraState",
    "CognitiveAuraEngine",
    "ContextThresholds",
    "FactorWeights",
    "NodePriority",
    "PerformanceRecord",
    "PhysicsMode",
    "SessionStatus",
    "SoundscapePreset",
]
