"""
Scoring: composite cognitive score, context classification and confidence.
"""

from cognitive_aura.scoring.confidence import calculate_confidence
from cognitive_aura.scoring.context_classifier import classify_context
from cognitive_aura.scoring.score_engine import (
    NEUTRAL_SCORE,
    ScoreBreakdown,
    ScoreCalculator,
    ScoreComponents,
)

__all__ = [
    "NEUTRAL_SCORE",
    "ScoreBreakdown",
    "ScoreCalculator",
    "ScoreComponents",
    "calculate_confidence",
    "classify_context",
]
