"""Action system: one stateless handler per command type."""

from codecraft.actions.base import CommandHandler
from codecraft.actions.collect import CollectAction
from codecraft.actions.move import MoveAction
from codecraft.actions.turn import TurnAction

__all__ = ["CollectAction", "CommandHandler", "MoveAction", "TurnAction"]
