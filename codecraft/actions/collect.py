"""CollectAction — refuel when standing exactly on the level's pump."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from codecraft.actions.base import StepResult
from codecraft.core import messages

if TYPE_CHECKING:
    from codecraft.core.levels import Level
    from codecraft.core.models import Command
    from codecraft.core.world_state import WorldState

logger = logging.getLogger(__name__)


class CollectAction:
    """Stateless handler for COLLECT commands.

    Collecting twice is harmless: a miss never clears an earlier refuel.
    """

    @staticmethod
    def validate(state: WorldState, level: Level) -> bool:
        return level.fuel_pos is not None and state.position == level.fuel_pos

    @staticmethod
    def apply(state: WorldState, command: Command, level: Level) -> StepResult:
        if not CollectAction.validate(state, level):
            return state.evolve(message=messages.NOTHING_TO_COLLECT), messages.NOTHING_TO_COLLECT
        logger.debug("Fuel collected at %s on level %d", state.position, level.id)
        return state.evolve(fuel_collected=True, message=messages.REFUELED), messages.REFUELED
