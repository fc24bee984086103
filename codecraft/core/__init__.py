"""Core data models: commands, geometry, levels, and world state."""

from codecraft.core.enums import CommandType, Direction, Outcome, PlaybackPhase
from codecraft.core.models import Command, Vector2, direction_vector, turn_left, turn_right
from codecraft.core.levels import DEFAULT_LEVELS, Level, LevelCatalog, default_catalog
from codecraft.core.world_state import WorldState
from codecraft.core.snapshot import Snapshot

__all__ = [
    "Command",
    "CommandType",
    "DEFAULT_LEVELS",
    "Direction",
    "Level",
    "LevelCatalog",
    "Outcome",
    "PlaybackPhase",
    "Snapshot",
    "Vector2",
    "WorldState",
    "default_catalog",
    "direction_vector",
    "turn_left",
    "turn_right",
]
