"""Level catalog — immutable puzzle descriptors and the built-in course.

Each level is a pydantic dataclass so the same definition validates the
built-in course, serializes for the API, and feeds the simulator.

Key types:
  Level         — one puzzle: grid, obstacles, start pose, goal, optional fuel
  LevelCatalog  — ordered, contiguous 1-based collection of levels
  DEFAULT_LEVELS— the built-in beginner course
"""

from __future__ import annotations

from pydantic import model_validator
from pydantic.dataclasses import dataclass as pydantic_dataclass

from codecraft.core.enums import CommandType, Direction
from codecraft.core.models import Vector2

_ALL_BLOCKS = (CommandType.MOVE, CommandType.TURN_LEFT, CommandType.TURN_RIGHT)


@pydantic_dataclass(frozen=True)
class Level:
    """Immutable blueprint of one puzzle."""

    id: int
    title: str
    grid_size: int
    start_pos: Vector2
    goal_pos: Vector2
    start_dir: Direction = Direction.EAST
    obstacles: tuple[Vector2, ...] = ()
    fuel_pos: Vector2 | None = None
    ideal_block_count: int = 1      # Hint only, never enforced
    description: str = ""
    hint: str = ""
    allowed_blocks: tuple[CommandType, ...] = (CommandType.MOVE,)

    @model_validator(mode="after")
    def _check_geometry(self) -> Level:
        if self.id < 1:
            raise ValueError(f"level id must be positive, got {self.id}")
        if self.grid_size < 1:
            raise ValueError(f"grid_size must be positive, got {self.grid_size}")
        if self.ideal_block_count < 1:
            raise ValueError("ideal_block_count must be positive")
        named = [("start_pos", self.start_pos), ("goal_pos", self.goal_pos)]
        if self.fuel_pos is not None:
            named.append(("fuel_pos", self.fuel_pos))
        for name, pos in named:
            if not pos.in_square(self.grid_size):
                raise ValueError(f"{name} {pos} outside {self.grid_size}x{self.grid_size} grid")
        for obstacle in self.obstacles:
            if not obstacle.in_square(self.grid_size):
                raise ValueError(f"obstacle {obstacle} outside grid")
            for name, pos in named:
                if obstacle == pos:
                    raise ValueError(f"obstacle {obstacle} overlaps {name}")
        return self

    @property
    def requires_fuel(self) -> bool:
        return self.fuel_pos is not None

    def is_blocked(self, pos: Vector2) -> bool:
        """True when *pos* is off the grid or on an obstacle."""
        return not pos.in_square(self.grid_size) or pos in self.obstacles


class LevelCatalog:
    """Ordered collection of levels with contiguous ids starting at 1."""

    __slots__ = ("_levels",)

    def __init__(self, levels: tuple[Level, ...] | list[Level]) -> None:
        ordered = tuple(sorted(levels, key=lambda lvl: lvl.id))
        if not ordered:
            raise ValueError("catalog needs at least one level")
        for expected, level in enumerate(ordered, start=1):
            if level.id != expected:
                raise ValueError(f"level ids must be contiguous from 1; expected {expected}, got {level.id}")
        self._levels = ordered

    def __len__(self) -> int:
        return len(self._levels)

    def __iter__(self):
        return iter(self._levels)

    @property
    def first_id(self) -> int:
        return 1

    @property
    def final_id(self) -> int:
        return len(self._levels)

    def get(self, level_id: int) -> Level:
        if not 1 <= level_id <= len(self._levels):
            raise KeyError(f"unknown level id {level_id}")
        return self._levels[level_id - 1]

    def clamp(self, level_id: int) -> int:
        return max(self.first_id, min(level_id, self.final_id))

    def is_final(self, level_id: int) -> bool:
        return level_id == self.final_id


# ---------------------------------------------------------------------------
# Built-in course
# ---------------------------------------------------------------------------

DEFAULT_LEVELS: tuple[Level, ...] = (
    Level(
        id=1, title="First Steps", grid_size=5,
        start_pos=Vector2(0, 2), goal_pos=Vector2(3, 2),
        ideal_block_count=3,
        description="Help the rocket reach the star. It is straight ahead!",
        hint="Stack three move blocks.",
    ),
    Level(
        id=2, title="Turn the Corner", grid_size=5,
        start_pos=Vector2(0, 4), goal_pos=Vector2(2, 2),
        ideal_block_count=5,
        description="The star is up and to the right. Move, then turn.",
        hint="Move twice, turn left, then move twice more.",
        allowed_blocks=_ALL_BLOCKS,
    ),
    Level(
        id=3, title="Around the Rock", grid_size=5,
        start_pos=Vector2(0, 1), goal_pos=Vector2(4, 1),
        obstacles=(Vector2(2, 1),),
        ideal_block_count=9,
        description="A rock blocks the way. Find a path around it.",
        hint="Step down a row, cross over, then come back up.",
        allowed_blocks=_ALL_BLOCKS,
    ),
    Level(
        id=4, title="Loop the Loop", grid_size=6,
        start_pos=Vector2(0, 5), goal_pos=Vector2(5, 5),
        ideal_block_count=2,
        description="A long road! Try the repeat block instead of many moves.",
        hint="Repeat move five times.",
        allowed_blocks=_ALL_BLOCKS,
    ),
    Level(
        id=5, title="Fill Up", grid_size=5,
        start_pos=Vector2(0, 2), goal_pos=Vector2(4, 2),
        fuel_pos=Vector2(2, 2),
        ideal_block_count=5,
        description="The rocket is low on fuel. Stop at the pump on the way.",
        hint="Use the refuel block when you are on the pump.",
        allowed_blocks=_ALL_BLOCKS + (CommandType.COLLECT,),
    ),
    Level(
        id=6, title="Detour for Fuel", grid_size=6,
        start_pos=Vector2(0, 0), goal_pos=Vector2(5, 0),
        obstacles=(Vector2(3, 0), Vector2(3, 1), Vector2(3, 2)),
        fuel_pos=Vector2(2, 4),
        ideal_block_count=10,
        description="A wall stands between you and the star, and the pump is far below.",
        hint="Go down first, refuel, then cross under the wall.",
        allowed_blocks=_ALL_BLOCKS + (CommandType.COLLECT,),
    ),
    Level(
        id=7, title="Staircase", grid_size=6,
        start_pos=Vector2(0, 5), goal_pos=Vector2(5, 0),
        obstacles=(Vector2(3, 5), Vector2(4, 4), Vector2(5, 3)),
        ideal_block_count=5,
        description="Climb the stairs one step at a time.",
        hint="Repeat: move, turn left, move, turn right.",
        allowed_blocks=_ALL_BLOCKS,
    ),
    Level(
        id=8, title="Grand Tour", grid_size=7,
        start_pos=Vector2(0, 6), goal_pos=Vector2(0, 0),
        obstacles=(Vector2(2, 3), Vector2(3, 3), Vector2(4, 3)),
        fuel_pos=Vector2(6, 6),
        ideal_block_count=8,
        description="Fly along the edge of the map, refuel in the corner, and come home.",
        hint="Use a repeat block for each side of the map.",
        allowed_blocks=_ALL_BLOCKS + (CommandType.COLLECT,),
    ),
)


def default_catalog() -> LevelCatalog:
    return LevelCatalog(DEFAULT_LEVELS)
