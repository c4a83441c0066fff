"""
Delivery: user-facing recommendation payloads and downstream listeners.
"""

from cognitive_aura.delivery.composer import (
    Recommendation,
    compose,
    generate_micro_task,
    physics_mode_for,
    presentation_label,
    recommend_soundscape,
)
from cognitive_aura.delivery.state_log import JsonlStateLog

__all__ = [
    "JsonlStateLog",
    "Recommendation",
    "compose",
    "generate_micro_task",
    "physics_mode_for",
    "presentation_label",
    "recommend_soundscape",
]
