"""Replay serialization — records step-by-step snapshots of one attempt."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from codecraft.core.models import Command
    from codecraft.core.snapshot import Snapshot

logger = logging.getLogger(__name__)


class ReplayRecorder:
    """Accumulates playback snapshots and flushes them to a JSON replay file."""

    __slots__ = ("_path", "_level_id", "_digest", "_commands", "_steps")

    def __init__(self, path: str | Path, level_id: int, digest: str) -> None:
        self._path = Path(path)
        self._level_id = level_id
        self._digest = digest
        self._commands: list[dict[str, Any]] = []
        self._steps: list[dict[str, Any]] = []

    @property
    def steps(self) -> list[dict[str, Any]]:
        return self._steps

    def record_commands(self, commands: tuple[Command, ...]) -> None:
        self._commands = [
            {"type": c.type.value, "payload": c.payload} for c in commands
        ]

    def record_snapshot(self, snap: Snapshot) -> None:
        self._steps.append(
            {
                "cursor": snap.cursor,
                "phase": snap.phase.name,
                "pos": [snap.position.x, snap.position.y],
                "dir": snap.direction.name,
                "fuel": snap.fuel_collected,
                "message": snap.message,
                "outcome": snap.outcome.value if snap.outcome else None,
            }
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": "1.0",
            "level_id": self._level_id,
            "program": self._digest,
            "commands": self._commands,
            "total_steps": len(self._steps),
            "steps": self._steps,
        }

    def flush(self) -> None:
        """Write accumulated data to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        logger.info("Replay saved to %s (%d steps)", self._path, len(self._steps))
