"""PlaybackController — the state machine that replays commands.

Phases:
  IDLE -> RUNNING  (run)              timer calls advance() every step_delay
  IDLE -> QUEUED   (step)             first command fires after first_step_delay
  QUEUED/RUNNING -> STEPPING (step)   pending timer cancelled, next command now
  STEPPING -> STEPPING (step)         one command per request
  * -> FINISHED                       advance() with the cursor past the end
  * -> IDLE        (reset / level switch)

Every reset bumps the attempt generation and cancels pending timers; a
timer that still fires from an older generation is ignored.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Callable

from codecraft.core import messages
from codecraft.core.enums import Outcome, PlaybackPhase
from codecraft.core.snapshot import Snapshot
from codecraft.core.world_state import WorldState

if TYPE_CHECKING:
    from codecraft.config import GameConfig
    from codecraft.core.levels import Level
    from codecraft.core.models import Command
    from codecraft.engine.evaluator import OutcomeEvaluator
    from codecraft.engine.scheduler import Scheduler, TimerHandle
    from codecraft.engine.simulator import WorldSimulator
    from codecraft.engine.translator import ProgramTranslator, Translation

logger = logging.getLogger(__name__)

_ACTIVE = frozenset({PlaybackPhase.QUEUED, PlaybackPhase.STEPPING, PlaybackPhase.RUNNING})


class PlaybackController:
    """Single writer of the live WorldState for one level attempt."""

    __slots__ = (
        "_config", "_translator", "_simulator", "_evaluator", "_scheduler",
        "_lock", "_level", "_program", "_state", "_phase", "_commands",
        "_cursor", "_generation", "_pending", "_outcome", "_listeners", "_translation",
    )

    def __init__(
        self,
        config: GameConfig,
        level: Level,
        translator: ProgramTranslator,
        simulator: WorldSimulator,
        evaluator: OutcomeEvaluator,
        scheduler: Scheduler,
        lock: threading.RLock | None = None,
    ) -> None:
        self._config = config
        self._translator = translator
        self._simulator = simulator
        self._evaluator = evaluator
        self._scheduler = scheduler
        self._lock = lock or threading.RLock()
        self._level = level
        self._program = ""
        self._state = WorldState.initial(level)
        self._phase = PlaybackPhase.IDLE
        self._commands: tuple[Command, ...] = ()
        self._cursor = 0
        self._generation = 0
        self._pending: list[TimerHandle] = []
        self._outcome: Outcome | None = None
        self._listeners: list[Callable[[Snapshot], None]] = []
        self._translation: Translation | None = None

    # -- read access --

    @property
    def level(self) -> Level:
        return self._level

    @property
    def state(self) -> WorldState:
        return self._state

    @property
    def phase(self) -> PlaybackPhase:
        return self._phase

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def commands(self) -> tuple[Command, ...]:
        return self._commands

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def outcome(self) -> Outcome | None:
        return self._outcome

    @property
    def program(self) -> str:
        return self._program

    @property
    def last_translation(self) -> Translation | None:
        return self._translation

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot.capture(
                self._state,
                level_id=self._level.id,
                generation=self._generation,
                phase=self._phase,
                cursor=self._cursor,
                total_commands=len(self._commands),
                outcome=self._outcome,
            )

    def subscribe(self, listener: Callable[[Snapshot], None]) -> None:
        """Call *listener* with a fresh snapshot after every state change."""
        self._listeners.append(listener)

    # -- inputs --

    def set_program(self, program: str) -> None:
        """Replace the program used by the next fresh run or step."""
        with self._lock:
            self._program = program

    def load_level(self, level: Level) -> None:
        """Switch levels; any in-flight playback is cancelled."""
        with self._lock:
            self._level = level
            self.reset()

    # -- controls --

    def reset(self) -> None:
        """Cancel pending timers and return to the level's start pose."""
        with self._lock:
            self._cancel_pending()
            self._generation += 1
            self._state = WorldState.initial(self._level)
            self._phase = PlaybackPhase.IDLE
            self._commands = ()
            self._cursor = 0
            self._outcome = None
            logger.debug("Level %d reset (generation %d)", self._level.id, self._generation)
            self._publish()

    def run(self) -> bool:
        """Start continuous playback. Returns False when nothing was started."""
        with self._lock:
            if self._phase in _ACTIVE:
                logger.debug("Run ignored: playback already %s", self._phase.name)
                return False
            self.reset()
            if not self._prepare():
                return False
            self._phase = PlaybackPhase.RUNNING
            self._state = self._state.evolve(running=True, message=None)
            logger.info("Running %d command(s) on level %d", len(self._commands), self._level.id)
            self._publish()
            self._schedule(self._config.step_delay, self._on_run_timer)
            return True

    def step(self) -> bool:
        """Single-step playback. Returns False when nothing was started."""
        with self._lock:
            if self._phase in (PlaybackPhase.IDLE, PlaybackPhase.FINISHED):
                self.reset()
                if not self._prepare():
                    return False
                self._phase = PlaybackPhase.QUEUED
                self._state = self._state.evolve(running=True, message=None)
                self._publish()
                self._schedule(self._config.first_step_delay, self._on_first_step_timer)
                return True

            if self._phase in (PlaybackPhase.QUEUED, PlaybackPhase.RUNNING):
                self._cancel_pending()
                self._phase = PlaybackPhase.STEPPING
            self.advance()
            return True

    def advance(self) -> PlaybackPhase:
        """Apply the next command, or judge the attempt once none remain."""
        with self._lock:
            if self._phase not in _ACTIVE:
                return self._phase
            if self._cursor < len(self._commands):
                command = self._commands[self._cursor]
                self._state, message = self._simulator.apply(self._state, command, self._level)
                self._cursor += 1
                logger.debug(
                    "Step %d/%d %s -> %s %s%s",
                    self._cursor, len(self._commands), command.type.value,
                    self._state.position, self._state.direction.name,
                    f" ({message})" if message else "",
                )
            else:
                self._finish()
            self._publish()
            return self._phase

    # -- internals --

    def _prepare(self) -> bool:
        translation = self._translator.translate_detailed(self._program)
        self._translation = translation
        if translation.empty:
            self._state = self._state.evolve(message=messages.NO_BLOCKS)
            logger.info("Nothing to run on level %d", self._level.id)
            self._publish()
            return False
        self._commands = translation.commands
        self._cursor = 0
        return True

    def _finish(self) -> None:
        self._cancel_pending()
        self._state, self._outcome = self._evaluator.conclude(self._state, self._level)
        self._phase = PlaybackPhase.FINISHED

    def _schedule(self, delay: float, callback: Callable[[int], None]) -> None:
        generation = self._generation
        handles: list[TimerHandle] = []

        def fire() -> None:
            with self._lock:
                if handles and handles[0] in self._pending:
                    self._pending.remove(handles[0])
                if generation != self._generation:
                    return
                callback(generation)

        handle = self._scheduler.call_later(delay, fire)
        handles.append(handle)
        self._pending.append(handle)

    def _cancel_pending(self) -> None:
        for handle in self._pending:
            self._scheduler.cancel(handle)
        self._pending.clear()

    def _on_run_timer(self, generation: int) -> None:
        if self._phase != PlaybackPhase.RUNNING:
            return
        self.advance()
        if self._phase == PlaybackPhase.RUNNING:
            exhausted = self._cursor >= len(self._commands)
            delay = self._config.settle_delay if exhausted else self._config.step_delay
            self._schedule(delay, self._on_run_timer)

    def _on_first_step_timer(self, generation: int) -> None:
        if self._phase != PlaybackPhase.QUEUED:
            return
        self._phase = PlaybackPhase.STEPPING
        self.advance()

    def _publish(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in self._listeners:
            try:
                listener(snap)
            except Exception:
                logger.exception("Snapshot listener failed")
