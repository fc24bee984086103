"""MoveAction — one cell forward, unless a wall or obstacle is ahead.

Cells outside the grid count as walls, so the character can never leave
the board; a blocked move leaves the pose untouched and reports the bump.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from codecraft.actions.base import StepResult
from codecraft.core import messages
from codecraft.core.models import Vector2, direction_vector

if TYPE_CHECKING:
    from codecraft.core.levels import Level
    from codecraft.core.models import Command
    from codecraft.core.world_state import WorldState

logger = logging.getLogger(__name__)


class MoveAction:
    """Stateless handler for MOVE commands."""

    @staticmethod
    def target(state: WorldState) -> Vector2:
        return state.position + direction_vector(state.direction)

    @staticmethod
    def validate(target: Vector2, level: Level) -> bool:
        if level.is_blocked(target):
            logger.debug("Move blocked at %s on level %d", target, level.id)
            return False
        return True

    @staticmethod
    def apply(state: WorldState, command: Command, level: Level) -> StepResult:
        target = MoveAction.target(state)
        if not MoveAction.validate(target, level):
            return state.evolve(message=messages.BUMPED), messages.BUMPED
        return state.evolve(position=target, message=None), None
