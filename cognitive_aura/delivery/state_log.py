"""
Aura State Log.

A downstream listener that appends every published aura state to a JSONL
file (one state per line) for offline analysis of how the engine's
decisions drift over a session.

Line shape:
    {"ts": "...", "type": "aura_state", "session_id": "...", "ccs": 0.61,
     "context": "focus", "target_node_id": "n3", "priority": "forgetting_risk",
     "confidence": 0.8, "adaptation_count": 4}
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loguru import logger

from cognitive_aura.core.models import AuraState


class JsonlStateLog:
    """
    JSONL writer usable as an engine listener.

    Usage:
        log = JsonlStateLog(Path("aura_states.jsonl"))
        engine.subscribe(log)
    """

    def __init__(self, path: Path, rotation_size_mb: int = 10):
        self.path = Path(path)
        self.rotation_size_bytes = rotation_size_mb * 1024 * 1024
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def __call__(self, state: AuraState) -> None:
        self.write(state)

    def write(self, state: AuraState) -> None:
        """Append one state. I/O errors propagate to the caller."""
        event = {
            "ts": datetime.now(UTC).isoformat(),
            "type": "aura_state",
            **state.to_log_entry(),
        }
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(event, default=str) + "\n")

        self._rotate_if_needed()

    def read_entries(self) -> list[dict[str, Any]]:
        """Read back all entries in the current file."""
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]

    def _rotate_if_needed(self) -> None:
        if self.path.stat().st_size > self.rotation_size_bytes:
            timestamp = datetime.now(UTC).strftime("%Y%m%d%H%M%S")
            rotated = self.path.with_suffix(f".{timestamp}.jsonl")
            counter = 1
            while rotated.exists():
                rotated = self.path.with_suffix(f".{timestamp}.{counter}.jsonl")
                counter += 1
            self.path.rename(rotated)
            self.path.touch()
            logger.debug(f"Rotated aura state log: {rotated.name}")
