"""
Core Module - Shared aura domain models and retention formulas.

Components:
- models: AuraState, FactorWeights, ContextThresholds, PerformanceRecord, enums
- retention: FSRS stability and legacy SM-2 retention estimates
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
from cognitive_aura.core.retention import estimate_retention

__all__ = [
    "AuraContext",
    "AuraState",
    "ContextThresholds",
    "FactorWeights",
    "NodePriority",
    "PerformanceRecord",
    "PhysicsMode",
    "SessionStatus",
    "SoundscapePreset",
    "estimate_retention",
]
