"""Outcome evaluation and level-completion bookkeeping."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from codecraft.core import messages
from codecraft.core.enums import Outcome
from codecraft.core.models import Vector2

if TYPE_CHECKING:
    from codecraft.core.levels import Level, LevelCatalog
    from codecraft.core.world_state import WorldState

logger = logging.getLogger(__name__)


def evaluate(final_position: Vector2, fuel_collected: bool, level: Level) -> Outcome:
    """Classify where a finished playback left the character."""
    if final_position != level.goal_pos:
        return Outcome.NOT_REACHED
    if level.requires_fuel and not fuel_collected:
        return Outcome.GOAL_REACHED_MISSING_FUEL
    return Outcome.GOAL_REACHED


class ProgressTracker:
    """Ids of completed levels, in the order they were first completed."""

    __slots__ = ("_completed",)

    def __init__(self) -> None:
        self._completed: list[int] = []

    @property
    def completed(self) -> tuple[int, ...]:
        return tuple(self._completed)

    def is_completed(self, level_id: int) -> bool:
        return level_id in self._completed

    def record(self, level_id: int) -> bool:
        """Record a completion. Returns False if it was already recorded."""
        if level_id in self._completed:
            return False
        self._completed.append(level_id)
        return True

    def clear(self) -> None:
        self._completed.clear()


class OutcomeEvaluator:
    """Judges a finished playback and fires completion signals.

    Listeners:
      - ``on_level_completed(level_id)`` on every GOAL_REACHED
      - ``on_course_completed()`` when the catalog's final level is reached
    A failing listener is logged and skipped.
    """

    __slots__ = ("_catalog", "_progress", "_level_listeners", "_course_listeners")

    def __init__(self, catalog: LevelCatalog, progress: ProgressTracker | None = None) -> None:
        self._catalog = catalog
        self._progress = progress or ProgressTracker()
        self._level_listeners: list[Callable[[int], None]] = []
        self._course_listeners: list[Callable[[], None]] = []

    @property
    def progress(self) -> ProgressTracker:
        return self._progress

    def on_level_completed(self, listener: Callable[[int], None]) -> None:
        self._level_listeners.append(listener)

    def on_course_completed(self, listener: Callable[[], None]) -> None:
        self._course_listeners.append(listener)

    def conclude(self, state: WorldState, level: Level) -> tuple[WorldState, Outcome]:
        """Evaluate *state* and return the terminal state plus its outcome."""
        outcome = evaluate(state.position, state.fuel_collected, level)
        logger.info("Level %d finished at %s: %s", level.id, state.position, outcome.value)

        if outcome == Outcome.GOAL_REACHED:
            state = state.evolve(completed=True, running=False, message=messages.GOAL_REACHED)
            if self._progress.record(level.id):
                logger.info("Level %d recorded as completed", level.id)
            self._notify_level(level.id)
            if self._catalog.is_final(level.id):
                self._notify_course()
        elif outcome == Outcome.GOAL_REACHED_MISSING_FUEL:
            state = state.evolve(running=False, message=messages.MISSING_FUEL)
        else:
            state = state.evolve(running=False, message=messages.NOT_REACHED)
        return state, outcome

    def _notify_level(self, level_id: int) -> None:
        for listener in self._level_listeners:
            try:
                listener(level_id)
            except Exception:
                logger.exception("Level-completed listener failed for level %d", level_id)

    def _notify_course(self) -> None:
        for listener in self._course_listeners:
            try:
                listener()
            except Exception:
                logger.exception("Course-completed listener failed")
