"""Conversions from engine objects to API schemas."""

from __future__ import annotations

from typing import TYPE_CHECKING

from codecraft.api.schemas import EventSchema, GameStateResponse, LevelSchema, PositionSchema

if TYPE_CHECKING:
    from codecraft.core.levels import Level
    from codecraft.core.models import Vector2
    from codecraft.core.snapshot import Snapshot
    from codecraft.utils.event_log import GameEvent


def position(pos: Vector2) -> PositionSchema:
    return PositionSchema(x=pos.x, y=pos.y)


def level_schema(level: Level, completed: bool = False) -> LevelSchema:
    return LevelSchema(
        id=level.id,
        title=level.title,
        description=level.description,
        hint=level.hint,
        grid_size=level.grid_size,
        start_pos=position(level.start_pos),
        start_dir=level.start_dir.name,
        goal_pos=position(level.goal_pos),
        fuel_pos=position(level.fuel_pos) if level.fuel_pos is not None else None,
        obstacles=[position(o) for o in level.obstacles],
        ideal_block_count=level.ideal_block_count,
        allowed_blocks=[b.value for b in level.allowed_blocks],
        completed=completed,
    )


def state_schema(snap: Snapshot, events: list[GameEvent]) -> GameStateResponse:
    return GameStateResponse(
        level_id=snap.level_id,
        generation=snap.generation,
        phase=snap.phase.name,
        cursor=snap.cursor,
        total_commands=snap.total_commands,
        position=position(snap.position),
        direction=snap.direction.name,
        visited=[position(v) for v in snap.visited],
        fuel_collected=snap.fuel_collected,
        running=snap.running,
        completed=snap.completed,
        message=snap.message,
        outcome=snap.outcome.value if snap.outcome else None,
        events=[
            EventSchema(seq=e.seq, category=e.category, message=e.message, level_id=e.level_id)
            for e in events
        ],
    )
