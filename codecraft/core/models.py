"""Core data models: Vector2, Command, and direction geometry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from codecraft.core.enums import CommandType, Direction


@dataclass(frozen=True, slots=True)
class Vector2:
    """Immutable 2D integer grid coordinate."""

    x: int = 0
    y: int = 0

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def manhattan(self, other: Vector2) -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def in_square(self, size: int) -> bool:
        return 0 <= self.x < size and 0 <= self.y < size

    def __repr__(self) -> str:
        return f"({self.x}, {self.y})"


# Direction offsets mapped to Direction enum values
DIRECTION_OFFSETS: dict[Direction, Vector2] = {
    Direction.NORTH: Vector2(0, -1),
    Direction.EAST: Vector2(1, 0),
    Direction.SOUTH: Vector2(0, 1),
    Direction.WEST: Vector2(-1, 0),
}


def direction_vector(direction: Direction) -> Vector2:
    return DIRECTION_OFFSETS[Direction(direction)]


def turn_right(direction: Direction) -> Direction:
    return Direction((direction + 1) % 4)


def turn_left(direction: Direction) -> Direction:
    return Direction((direction + 3) % 4)


@dataclass(frozen=True, slots=True)
class Command:
    """One primitive action emitted by a learner's program.

    ``payload`` is carried through untouched; the simulator ignores it.
    """

    type: CommandType
    payload: Any = None

    def __repr__(self) -> str:
        if self.payload is None:
            return f"Command({self.type.value})"
        return f"Command({self.type.value}, payload={self.payload!r})"
