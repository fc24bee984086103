"""TurnAction — rotate in place a quarter turn left or right."""

from __future__ import annotations

from typing import TYPE_CHECKING

from codecraft.actions.base import StepResult
from codecraft.core.enums import CommandType
from codecraft.core.models import turn_left, turn_right

if TYPE_CHECKING:
    from codecraft.core.levels import Level
    from codecraft.core.models import Command
    from codecraft.core.world_state import WorldState


class TurnAction:
    """Stateless handler for TURN_LEFT and TURN_RIGHT commands."""

    @staticmethod
    def apply(state: WorldState, command: Command, level: Level) -> StepResult:
        if command.type == CommandType.TURN_LEFT:
            new_dir = turn_left(state.direction)
        else:
            new_dir = turn_right(state.direction)
        return state.evolve(direction=new_dir, message=None), None
