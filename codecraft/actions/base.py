"""Base command handler — the contract every primitive action follows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from codecraft.core.levels import Level
    from codecraft.core.models import Command
    from codecraft.core.world_state import WorldState

# A handler returns the next state and the message that replaces the old one.
StepResult = tuple["WorldState", "str | None"]


class CommandHandler(Protocol):
    """Stateless handler for one CommandType."""

    @staticmethod
    def apply(state: WorldState, command: Command, level: Level) -> StepResult: ...
