"""
Knowledge Graph Data Models.

Read-only views of the learner's knowledge graph and review history as
handed to the aura engine by its collaborators. The engine never mutates
these objects; the target concept on an aura state is a plain reference.

Concept content is a tagged variant: every node carries a category and a
payload dataclass matching that category, so downstream code reads typed
fields instead of inspecting arbitrary content.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union


class ConceptCategory(str, Enum):
    """Closed set of concept node categories."""
    CONCEPT = "concept"
    SKILL = "skill"
    LOGIC = "logic"
    MEMORY = "memory"
    HABIT = "habit"
    GOAL = "goal"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> ConceptCategory:
        """Map free-form category text onto the closed set (unknown -> OTHER)."""
        if not value:
            return cls.OTHER
        try:
            return cls(value.lower())
        except ValueError:
            return cls.OTHER


class EdgeType(str, Enum):
    """Types of edges between concepts."""
    PREREQUISITE = "prerequisite"
    SIMILARITY = "similarity"
    ASSOCIATION = "association"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> EdgeType:
        if not value:
            return cls.OTHER
        try:
            return cls(value.lower())
        except ValueError:
            return cls.OTHER


# =============================================================================
# CATEGORY PAYLOADS
# =============================================================================


@dataclass(frozen=True)
class ConceptPayload:
    """Declarative concept content."""
    summary: str = ""


@dataclass(frozen=True)
class LogicPayload:
    """Skill or logic-problem content."""
    problem_type: str = "deductive"  # deductive, inductive, abductive, ...
    premises: tuple[str, ...] = ()


@dataclass(frozen=True)
class MemoryPayload:
    """Memory item content (a fact, a name, a number...)."""
    cue: str = ""


@dataclass(frozen=True)
class HabitPayload:
    """Habit content."""
    frequency_per_week: int = 0


@dataclass(frozen=True)
class GoalPayload:
    """Goal content."""
    deadline: datetime | None = None


@dataclass(frozen=True)
class GenericPayload:
    """Content for categories without structured fields."""
    notes: str = ""


NodePayload = Union[
    ConceptPayload, LogicPayload, MemoryPayload, HabitPayload, GoalPayload, GenericPayload
]

PAYLOAD_TYPES: dict[ConceptCategory, type] = {
    ConceptCategory.CONCEPT: ConceptPayload,
    ConceptCategory.SKILL: LogicPayload,
    ConceptCategory.LOGIC: LogicPayload,
    ConceptCategory.MEMORY: MemoryPayload,
    ConceptCategory.HABIT: HabitPayload,
    ConceptCategory.GOAL: GoalPayload,
    ConceptCategory.OTHER: GenericPayload,
}


def default_payload(category: ConceptCategory) -> NodePayload:
    """Create an empty payload of the type matching a category."""
    return PAYLOAD_TYPES[category]()


# =============================================================================
# GRAPH ELEMENTS
# =============================================================================


@dataclass
class ConceptNode:
    """A concept in the learner's knowledge graph."""
    id: str
    label: str
    category: ConceptCategory = ConceptCategory.CONCEPT
    is_active: bool = False

    # Learning state (0-1 unless noted)
    mastery_level: float = 0.0
    cognitive_load: float = 0.0
    health_score: float | None = None  # Lower = more at risk
    activation_level: float = 0.0
    access_count: int = 0

    # Memory model: FSRS stability (days) or legacy SM-2 fields
    stability: float | None = None
    ease_factor: float | None = None
    interval_days: float | None = None

    payload: NodePayload | None = None

    def __post_init__(self):
        """Attach an empty payload of the right type when none was given."""
        if self.payload is None:
            self.payload = default_payload(self.category)


@dataclass
class ConceptEdge:
    """A directed relation between two concepts."""
    source_id: str
    target_id: str
    edge_type: EdgeType = EdgeType.ASSOCIATION
    strength: float | None = None  # None = unlabeled


@dataclass
class ConceptCluster:
    """A grouping of related concepts."""
    id: str
    node_ids: list[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.node_ids)


@dataclass
class GraphSnapshot:
    """
    Point-in-time view of the knowledge graph.

    Attributes:
        nodes: All concept nodes
        edges: Relations between nodes
        clusters: Optional cluster groupings (None = not computed)
        last_updated: Version marker, used as part of the score cache key
    """
    nodes: list[ConceptNode] = field(default_factory=list)
    edges: list[ConceptEdge] = field(default_factory=list)
    clusters: list[ConceptCluster] | None = None
    last_updated: datetime = field(default_factory=datetime.now)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def active_nodes(self) -> list[ConceptNode]:
        return [node for node in self.nodes if node.is_active]

    def get_node(self, node_id: str) -> ConceptNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def degree(self, node_id: str) -> int:
        """Number of edges touching a node, in either direction."""
        return sum(
            1 for edge in self.edges
            if edge.source_id == node_id or edge.target_id == node_id
        )


@dataclass
class ReviewRecord:
    """Spaced-repetition state of one reviewable item."""
    item_id: str
    stability: float | None = None
    ease_factor: float | None = None
    interval_days: float | None = None
    next_review: datetime | None = None  # None = due since forever
