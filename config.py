"""
Configuration settings for the Cognitive Aura engine.

Uses Pydantic Settings for environment variable management with .env file support.
Every field can be overridden with an AURA_-prefixed environment variable,
e.g. AURA_WEIGHT_DEPTH=0.5 or AURA_LOG_LEVEL=DEBUG.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AURA_",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Composite Score Weights (baseline)
    # ========================================
    weight_depth: float = Field(
        default=0.4,
        ge=0.0,
        description="Baseline weight for the graph depth factor D",
    )
    weight_strength: float = Field(
        default=0.3,
        ge=0.0,
        description="Baseline weight for the synaptic strength factor S",
    )
    weight_retention: float = Field(
        default=0.2,
        ge=0.0,
        description="Baseline weight for the memory retention factor R",
    )
    weight_urgency: float = Field(
        default=0.1,
        ge=0.0,
        description="Baseline weight for the temporal urgency factor U",
    )

    # ========================================
    # Context Thresholds
    # ========================================
    recovery_ceiling: float = Field(
        default=0.3,
        gt=0.0,
        lt=1.0,
        description="Scores below this are classified RECOVERY",
    )
    overload_floor: float = Field(
        default=0.7,
        gt=0.0,
        lt=1.0,
        description="Scores at or above this are classified OVERLOAD",
    )
    recovery_ceiling_min: float = Field(
        default=0.1,
        description="Lowest value the recovery ceiling may drift to",
    )
    overload_floor_max: float = Field(
        default=0.9,
        description="Highest value the overload floor may drift to",
    )
    threshold_step: float = Field(
        default=0.01,
        description="Threshold drift applied per low-relevance feedback record",
    )

    # ========================================
    # Adaptive Learning
    # ========================================
    learning_rate: float = Field(
        default=0.1,
        gt=0.0,
        le=1.0,
        description="Learning rate for adaptive weight nudges",
    )
    error_threshold: float = Field(
        default=0.3,
        description="Prediction error above which weights are nudged",
    )
    relevance_threshold: float = Field(
        default=0.6,
        description="Context relevance below which thresholds widen",
    )
    performance_buffer_size: int = Field(
        default=100,
        ge=1,
        description="Capacity of the performance record ring buffer",
    )

    # ========================================
    # Caching & Session
    # ========================================
    score_cache_ttl_seconds: float = Field(
        default=30.0,
        description="Lifetime of a cached composite score",
    )
    score_cache_max_entries: int = Field(
        default=64,
        ge=1,
        description="Maximum cached composite scores kept at once",
    )
    state_freshness_seconds: float = Field(
        default=300.0,
        description="Age under which the current aura state is reused (5 minutes)",
    )
    history_size: int = Field(
        default=5,
        ge=0,
        description="Number of previous states kept on each new state",
    )

    # ========================================
    # Target Selection
    # ========================================
    prerequisite_mastery_threshold: float = Field(
        default=0.7,
        description="Tier 1: prerequisites below this mastery are urgent",
    )
    prerequisite_health_threshold: float = Field(
        default=0.5,
        description="Tier 1: prerequisites below this health score are urgent",
    )
    forgetting_risk_threshold: float = Field(
        default=0.6,
        description="Tier 2: retention estimate below this is a forgetting risk",
    )
    cognitive_load_threshold: float = Field(
        default=0.6,
        description="Tier 3: only nodes above this cognitive load qualify",
    )
    cognitive_load_top_n: int = Field(
        default=3,
        ge=1,
        description="Tier 3: number of highest-load nodes considered",
    )

    # ========================================
    # Logging & Output
    # ========================================
    log_level: str = Field(
        default="INFO",
        description="Loguru log level for the CLI sink",
    )
    state_log_path: str | None = Field(
        default=None,
        description="Optional JSON-lines file receiving every published aura state",
    )

    def get_weight_config(self) -> dict[str, float]:
        """Get baseline factor weights as a dictionary."""
        return {
            "depth": self.weight_depth,
            "strength": self.weight_strength,
            "retention": self.weight_retention,
            "urgency": self.weight_urgency,
        }

    def get_threshold_config(self) -> dict[str, float]:
        """Get context thresholds and their drift bounds."""
        return {
            "recovery_ceiling": self.recovery_ceiling,
            "overload_floor": self.overload_floor,
            "recovery_ceiling_min": self.recovery_ceiling_min,
            "overload_floor_max": self.overload_floor_max,
            "step": self.threshold_step,
        }

    def get_aura_config(self) -> dict[str, Any]:
        """Get the complete engine configuration as a dictionary."""
        return {
            "weights": self.get_weight_config(),
            "thresholds": self.get_threshold_config(),
            "learning": {
                "learning_rate": self.learning_rate,
                "error_threshold": self.error_threshold,
                "relevance_threshold": self.relevance_threshold,
                "buffer_size": self.performance_buffer_size,
            },
            "cache": {
                "score_ttl_seconds": self.score_cache_ttl_seconds,
                "score_max_entries": self.score_cache_max_entries,
                "state_freshness_seconds": self.state_freshness_seconds,
                "history_size": self.history_size,
            },
            "selection": {
                "prerequisite_mastery": self.prerequisite_mastery_threshold,
                "prerequisite_health": self.prerequisite_health_threshold,
                "forgetting_risk": self.forgetting_risk_threshold,
                "cognitive_load": self.cognitive_load_threshold,
                "cognitive_load_top_n": self.cognitive_load_top_n,
            },
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
