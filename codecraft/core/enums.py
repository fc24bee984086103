"""Enumerations used throughout the engine."""

from __future__ import annotations

from enum import Enum, IntEnum, unique


@unique
class CommandType(str, Enum):
    """Primitive actions a program can emit. Values are the wire tags."""

    MOVE = "MOVE"
    TURN_LEFT = "TURN_LEFT"
    TURN_RIGHT = "TURN_RIGHT"
    COLLECT = "COLLECT"


@unique
class Direction(IntEnum):
    """Cardinal facing directions, clockwise from north."""

    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3


@unique
class Outcome(str, Enum):
    """Terminal classification of a playback attempt."""

    GOAL_REACHED = "goal_reached"
    GOAL_REACHED_MISSING_FUEL = "goal_reached_missing_fuel"
    NOT_REACHED = "not_reached"


@unique
class PlaybackPhase(IntEnum):
    """States of the playback state machine.

    IDLE      — nothing translated yet (fresh level or after reset)
    QUEUED    — commands translated, first single step pending on a timer
    STEPPING  — manual mode, waiting for the next step request
    RUNNING   — continuous mode, the timer drives ``advance()``
    FINISHED  — the outcome has been evaluated
    """

    IDLE = 0
    QUEUED = 1
    STEPPING = 2
    RUNNING = 3
    FINISHED = 4
