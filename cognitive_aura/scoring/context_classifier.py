"""
Context Classifier.

Maps a composite score onto exactly one cognitive context using the
learner's current (adaptive) thresholds. Stateless: every cycle is
classified fresh, with no hysteresis.
"""

from __future__ import annotations

from cognitive_aura.core.models import AuraContext, ContextThresholds


def classify_context(score: float, thresholds: ContextThresholds) -> AuraContext:
    """
    Classify a composite score.

    Args:
        score: Composite score in [0, 1]
        thresholds: Current recovery ceiling / overload floor

    Returns:
        RECOVERY below the ceiling, OVERLOAD at or above the floor, else FOCUS
    """
    if score < thresholds.recovery_ceiling:
        return AuraContext.RECOVERY
    if score >= thresholds.overload_floor:
        return AuraContext.OVERLOAD
    return AuraContext.FOCUS
