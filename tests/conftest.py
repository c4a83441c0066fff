"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import random
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import Settings
from cognitive_aura.graph.models import (
    ConceptCategory,
    ConceptEdge,
    ConceptNode,
    EdgeType,
    GraphSnapshot,
    ReviewRecord,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock for cache and freshness tests."""

    def __init__(self, start: datetime = FIXED_NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def settings():
    """Default engine settings (no .env file)."""
    return Settings(_env_file=None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def sample_graph():
    """
    Small study graph.

    - tcp (active) depends on ip (weak prerequisite)
    - dns (active) has a short legacy interval (forgetting risk)
    - routing (active) is heavy
    - osi is inactive
    """
    nodes = [
        ConceptNode(id="ip", label="IP Addressing", mastery_level=0.4, health_score=0.3,
                    cognitive_load=0.5, access_count=3),
        ConceptNode(id="tcp", label="TCP Handshake", is_active=True, mastery_level=0.6,
                    health_score=0.8, cognitive_load=0.4, stability=200.0, access_count=10),
        ConceptNode(id="dns", label="DNS Resolution", category=ConceptCategory.MEMORY,
                    is_active=True, mastery_level=0.5, ease_factor=1.5, interval_days=3.0,
                    cognitive_load=0.3, access_count=5),
        ConceptNode(id="routing", label="Routing", category=ConceptCategory.LOGIC,
                    is_active=True, mastery_level=0.3, cognitive_load=0.9, stability=100.0,
                    access_count=2),
        ConceptNode(id="osi", label="OSI Model", mastery_level=0.9, health_score=0.9),
    ]
    edges = [
        ConceptEdge("ip", "tcp", EdgeType.PREREQUISITE, 0.9),
        ConceptEdge("tcp", "dns", EdgeType.ASSOCIATION, 0.6),
        ConceptEdge("routing", "ip", EdgeType.SIMILARITY),
        ConceptEdge("osi", "tcp", EdgeType.ASSOCIATION, 0.4),
    ]
    return GraphSnapshot(nodes=nodes, edges=edges, last_updated=FIXED_NOW)


@pytest.fixture
def sample_reviews():
    return [
        ReviewRecord(item_id="tcp", stability=200.0, next_review=FIXED_NOW + timedelta(days=5)),
        ReviewRecord(item_id="dns", ease_factor=1.5, interval_days=3.0,
                     next_review=FIXED_NOW - timedelta(days=2)),
        ReviewRecord(item_id="routing", stability=100.0, next_review=FIXED_NOW + timedelta(days=1)),
    ]
