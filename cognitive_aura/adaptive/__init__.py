"""
Adaptive layer: target concept selection and feedback-driven tuning.

Components:
- TargetSelector: three-tier priority cascade with multi-criteria tie-break
- AdaptiveLearner: adapts factor weights and context thresholds from feedback
"""
from cognitive_aura.adaptive.learner import AdaptiveLearner, PerformanceStats
from cognitive_aura.adaptive.target_selector import TargetSelection, TargetSelector

__all__ = [
    "AdaptiveLearner",
    "PerformanceStats",
    "TargetSelection",
    "TargetSelector",
]
