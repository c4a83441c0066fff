"""
Snapshot Loader.

Validates JSON documents describing a knowledge graph, review records or
feedback records, and converts them into engine types. Used by the CLI
and by callers that exchange snapshots as files.

Graph document shape:
    {
      "last_updated": "2025-01-01T12:00:00",
      "nodes": [{"id": "n1", "label": "TCP", "category": "concept", ...}],
      "edges": [{"source_id": "n1", "target_id": "n2", "edge_type": "prerequisite"}],
      "clusters": [{"id": "c1", "node_ids": ["n1", "n2"]}]
    }

"links" is accepted as an alias for "edges", and "source"/"target" for the
edge endpoints.
"""

from __future__ import annotations

import json
from dataclasses import fields
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter

from cognitive_aura.core.models import PerformanceRecord
from cognitive_aura.graph.models import (
    PAYLOAD_TYPES,
    ConceptCategory,
    ConceptCluster,
    ConceptEdge,
    ConceptNode,
    EdgeType,
    GraphSnapshot,
    NodePayload,
    ReviewRecord,
)


# =============================================================================
# DOCUMENT SCHEMAS
# =============================================================================


class NodeDocument(BaseModel):
    """One concept node as stored in a snapshot file."""

    model_config = ConfigDict(extra="ignore")

    id: str
    label: str = ""
    category: str = "concept"
    is_active: bool = False
    mastery_level: float = Field(default=0.0, ge=0.0, le=1.0)
    cognitive_load: float = Field(default=0.0, ge=0.0, le=1.0)
    health_score: float | None = Field(default=None, ge=0.0, le=1.0)
    activation_level: float = Field(default=0.0, ge=0.0, le=1.0)
    access_count: int = Field(default=0, ge=0)
    stability: float | None = Field(default=None, ge=0.0)
    ease_factor: float | None = None
    interval_days: float | None = Field(default=None, ge=0.0)
    payload: dict[str, Any] = Field(default_factory=dict)


class EdgeDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    source_id: str = Field(validation_alias=AliasChoices("source_id", "source"))
    target_id: str = Field(validation_alias=AliasChoices("target_id", "target"))
    edge_type: str = Field(default="association", validation_alias=AliasChoices("edge_type", "type"))
    strength: float | None = Field(default=None, ge=0.0, le=1.0)


class ClusterDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    node_ids: list[str] = Field(default_factory=list, validation_alias=AliasChoices("node_ids", "nodes"))


class SnapshotDocument(BaseModel):
    """Top-level graph snapshot file."""

    model_config = ConfigDict(extra="ignore")

    last_updated: datetime = Field(default_factory=datetime.now)
    nodes: list[NodeDocument] = Field(default_factory=list)
    edges: list[EdgeDocument] = Field(default_factory=list, validation_alias=AliasChoices("edges", "links"))
    clusters: list[ClusterDocument] | None = None


class ReviewDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    item_id: str = Field(validation_alias=AliasChoices("item_id", "id"))
    stability: float | None = Field(default=None, ge=0.0)
    ease_factor: float | None = None
    interval_days: float | None = Field(default=None, ge=0.0)
    next_review: datetime | None = None


_reviews_adapter = TypeAdapter(list[ReviewDocument])
_feedback_adapter = TypeAdapter(list[PerformanceRecord])


# =============================================================================
# CONVERSION
# =============================================================================


def build_payload(category: ConceptCategory, data: dict[str, Any]) -> NodePayload:
    """Build the typed payload for a category, dropping unknown keys."""
    payload_type = PAYLOAD_TYPES[category]
    known = {f.name for f in fields(payload_type)}
    unknown = set(data) - known
    if unknown:
        logger.warning(f"Ignoring unknown {category.value} payload keys: {sorted(unknown)}")

    kwargs = {key: value for key, value in data.items() if key in known}
    if "premises" in kwargs:
        kwargs["premises"] = tuple(kwargs["premises"])
    if "deadline" in kwargs and isinstance(kwargs["deadline"], str):
        kwargs["deadline"] = datetime.fromisoformat(kwargs["deadline"])
    return payload_type(**kwargs)


def to_node(doc: NodeDocument) -> ConceptNode:
    category = ConceptCategory.parse(doc.category)
    return ConceptNode(
        id=doc.id,
        label=doc.label or doc.id,
        category=category,
        is_active=doc.is_active,
        mastery_level=doc.mastery_level,
        cognitive_load=doc.cognitive_load,
        health_score=doc.health_score,
        activation_level=doc.activation_level,
        access_count=doc.access_count,
        stability=doc.stability,
        ease_factor=doc.ease_factor,
        interval_days=doc.interval_days,
        payload=build_payload(category, doc.payload),
    )


def to_snapshot(doc: SnapshotDocument) -> GraphSnapshot:
    clusters = None
    if doc.clusters is not None:
        clusters = [ConceptCluster(id=c.id, node_ids=list(c.node_ids)) for c in doc.clusters]

    return GraphSnapshot(
        nodes=[to_node(node) for node in doc.nodes],
        edges=[
            ConceptEdge(
                source_id=edge.source_id,
                target_id=edge.target_id,
                edge_type=EdgeType.parse(edge.edge_type),
                strength=edge.strength,
            )
            for edge in doc.edges
        ],
        clusters=clusters,
        last_updated=doc.last_updated,
    )


def parse_snapshot(data: dict[str, Any]) -> GraphSnapshot:
    """Validate a decoded JSON object into a GraphSnapshot."""
    return to_snapshot(SnapshotDocument.model_validate(data))


def parse_reviews(data: list[dict[str, Any]]) -> list[ReviewRecord]:
    """Validate a decoded JSON array into review records."""
    return [
        ReviewRecord(
            item_id=doc.item_id,
            stability=doc.stability,
            ease_factor=doc.ease_factor,
            interval_days=doc.interval_days,
            next_review=doc.next_review,
        )
        for doc in _reviews_adapter.validate_python(data)
    ]


def parse_feedback(data: list[dict[str, Any]]) -> list[PerformanceRecord]:
    """Validate a decoded JSON array into performance records."""
    return _feedback_adapter.validate_python(data)


def _read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_snapshot(path: Path) -> GraphSnapshot:
    snapshot = parse_snapshot(_read_json(path))
    logger.info(f"Loaded graph snapshot from {path}: {len(snapshot.nodes)} nodes, {len(snapshot.edges)} edges")
    return snapshot


def load_reviews(path: Path) -> list[ReviewRecord]:
    records = parse_reviews(_read_json(path))
    logger.info(f"Loaded {len(records)} review records from {path}")
    return records


def load_feedback(path: Path) -> list[PerformanceRecord]:
    records = parse_feedback(_read_json(path))
    logger.info(f"Loaded {len(records)} feedback records from {path}")
    return records
