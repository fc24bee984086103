"""WorldSimulator — applies one command to a world state.

Pure function of (state, command, level): the same inputs always give the
same next state and message. The pre-command position is recorded in the
visited trail before the command's own effect, so the starting cell is
captured by the very first command.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from codecraft.actions.collect import CollectAction
from codecraft.actions.move import MoveAction
from codecraft.actions.turn import TurnAction
from codecraft.core.enums import CommandType

if TYPE_CHECKING:
    from codecraft.actions.base import CommandHandler, StepResult
    from codecraft.core.levels import Level
    from codecraft.core.models import Command
    from codecraft.core.world_state import WorldState


class WorldSimulator:
    """Dispatches commands to their stateless handlers."""

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: dict[CommandType, CommandHandler] = {
            CommandType.MOVE: MoveAction,
            CommandType.TURN_LEFT: TurnAction,
            CommandType.TURN_RIGHT: TurnAction,
            CommandType.COLLECT: CollectAction,
        }

    def apply(self, state: WorldState, command: Command, level: Level) -> StepResult:
        state = state.with_visit(state.position)
        handler = self._handlers[command.type]
        return handler.apply(state, command, level)

    def replay(self, state: WorldState, commands, level: Level) -> list[WorldState]:
        """Apply *commands* in order and return every intermediate state."""
        trajectory: list[WorldState] = []
        for command in commands:
            state, _msg = self.apply(state, command, level)
            trajectory.append(state)
        return trajectory
