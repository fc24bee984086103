"""World state of one level attempt — replaced, never mutated in place."""

from __future__ import annotations

from dataclasses import dataclass, replace

from codecraft.core.enums import Direction
from codecraft.core.levels import Level
from codecraft.core.models import Vector2


@dataclass(frozen=True, slots=True)
class WorldState:
    """Character pose, visited trail, fuel status, and run/complete flags.

    The PlaybackController is the only owner that swaps in new states; the
    simulator and evaluator produce copies via :meth:`evolve`.
    """

    position: Vector2
    direction: Direction = Direction.EAST
    visited: tuple[Vector2, ...] = ()
    fuel_collected: bool = False
    message: str | None = None
    running: bool = False
    completed: bool = False

    @classmethod
    def initial(cls, level: Level) -> WorldState:
        return cls(position=level.start_pos, direction=level.start_dir)

    def evolve(self, **changes) -> WorldState:
        return replace(self, **changes)

    def with_visit(self, pos: Vector2) -> WorldState:
        """Append *pos* to the visited trail unless it is already there."""
        if pos in self.visited:
            return self
        return replace(self, visited=self.visited + (pos,))
