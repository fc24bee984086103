"""Read-only view of a playback for presentation layers."""

from __future__ import annotations

from dataclasses import dataclass

from codecraft.core.enums import Direction, Outcome, PlaybackPhase
from codecraft.core.models import Vector2
from codecraft.core.world_state import WorldState


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Everything a renderer needs after one command has been applied."""

    level_id: int
    generation: int
    phase: PlaybackPhase
    cursor: int
    total_commands: int
    position: Vector2
    direction: Direction
    visited: tuple[Vector2, ...]
    fuel_collected: bool
    running: bool
    completed: bool
    message: str | None
    outcome: Outcome | None = None

    @classmethod
    def capture(
        cls,
        state: WorldState,
        *,
        level_id: int,
        generation: int,
        phase: PlaybackPhase,
        cursor: int,
        total_commands: int,
        outcome: Outcome | None = None,
    ) -> Snapshot:
        return cls(
            level_id=level_id,
            generation=generation,
            phase=phase,
            cursor=cursor,
            total_commands=total_commands,
            position=state.position,
            direction=state.direction,
            visited=state.visited,
            fuel_collected=state.fuel_collected,
            running=state.running,
            completed=state.completed,
            message=state.message,
            outcome=outcome,
        )
