"""SessionManager — owns one learner's game: level, program, playback, progress.

The API and the headless CLI both drive the game through this object. All
state changes go through one re-entrant lock shared with the
PlaybackController, so timer callbacks and HTTP requests never interleave.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from codecraft.core import messages
from codecraft.core.levels import Level, LevelCatalog, default_catalog
from codecraft.core.snapshot import Snapshot
from codecraft.engine.evaluator import OutcomeEvaluator, ProgressTracker
from codecraft.engine.playback import PlaybackController
from codecraft.engine.scheduler import ThreadingScheduler
from codecraft.engine.simulator import WorldSimulator
from codecraft.engine.translator import ProgramTranslator, Translation
from codecraft.utils.event_log import EventLog

if TYPE_CHECKING:
    from codecraft.config import GameConfig
    from codecraft.engine.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class SessionManager:
    """Manages the game lifecycle for a single learner.

    Provides:
      - program upload (text + block count from the editor)
      - run / step / reset controls
      - level navigation (select, next, previous, restart course)
      - progress (completed levels, course completion) and an event feed
    """

    def __init__(
        self,
        config: GameConfig,
        catalog: LevelCatalog | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._config = config
        self._catalog = catalog or default_catalog()
        self._scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.RLock()
        self._event_log = EventLog()
        self._progress = ProgressTracker()
        self._translator = ProgramTranslator(config)

        self._evaluator = OutcomeEvaluator(self._catalog, self._progress)
        self._evaluator.on_level_completed(self._handle_level_completed)
        self._evaluator.on_course_completed(self._handle_course_completed)

        self._level_id = self._catalog.clamp(config.start_level_id)
        self._controller = PlaybackController(
            config=config,
            level=self._catalog.get(self._level_id),
            translator=self._translator,
            simulator=WorldSimulator(),
            evaluator=self._evaluator,
            scheduler=self._scheduler,
            lock=self._lock,
        )
        self._controller.subscribe(self._handle_snapshot)

        self._block_count = 0
        self._course_completed = False
        self._course_timer: TimerHandle | None = None
        self._course_generation = 0
        self._last_message: str | None = None
        self._last_fault_digest: str | None = None

    # -- public properties --

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def catalog(self) -> LevelCatalog:
        return self._catalog

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def controller(self) -> PlaybackController:
        return self._controller

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def progress(self) -> ProgressTracker:
        return self._progress

    @property
    def level(self) -> Level:
        return self._controller.level

    @property
    def block_count(self) -> int:
        return self._block_count

    @property
    def over_ideal(self) -> bool:
        """True when the program uses more blocks than the level suggests."""
        return self._block_count > self.level.ideal_block_count

    @property
    def course_completed(self) -> bool:
        return self._course_completed

    def get_snapshot(self) -> Snapshot:
        return self._controller.snapshot()

    def translate_program(self) -> Translation:
        """Translate the current program without starting playback."""
        with self._lock:
            return self._translator.translate_detailed(self._controller.program)

    # -- program & controls --

    def set_program(self, code: str, block_count: int = 0) -> None:
        with self._lock:
            self._controller.set_program(code)
            self._block_count = max(0, block_count)

    def run(self) -> bool:
        with self._lock:
            started = self._controller.run()
            self._note_translation()
            return started

    def step(self) -> bool:
        with self._lock:
            acted = self._controller.step()
            self._note_translation()
            return acted

    def reset(self) -> None:
        with self._lock:
            self._cancel_course_timer()
            self._controller.reset()

    # -- navigation --

    def select_level(self, level_id: int) -> Level:
        """Switch to *level_id*. Raises KeyError for ids outside the catalog."""
        with self._lock:
            level = self._catalog.get(level_id)
            self._cancel_course_timer()
            self._level_id = level.id
            self._last_message = None
            self._controller.load_level(level)
            self._event_log.append("level_selected", level.title, level.id)
            logger.info("Level %d selected: %s", level.id, level.title)
            return level

    def next_level(self) -> Level:
        with self._lock:
            return self.select_level(self._catalog.clamp(self._level_id + 1))

    def previous_level(self) -> Level:
        with self._lock:
            return self.select_level(self._catalog.clamp(self._level_id - 1))

    def restart_course(self) -> Level:
        """Forget all progress and go back to the first level."""
        with self._lock:
            self._progress.clear()
            self._course_completed = False
            logger.info("Course restarted")
            return self.select_level(self._catalog.first_id)

    def shutdown(self) -> None:
        with self._lock:
            self._cancel_course_timer()
            self._controller.reset()
        logger.info("SessionManager stopped.")

    # -- signal handlers (called under the lock) --

    def _handle_snapshot(self, snap: Snapshot) -> None:
        if snap.message and snap.message != self._last_message:
            self._event_log.append("message", snap.message, snap.level_id)
        self._last_message = snap.message

    def _handle_level_completed(self, level_id: int) -> None:
        self._event_log.append("level_completed", f"Level {level_id} completed", level_id)

    def _handle_course_completed(self) -> None:
        self._cancel_course_timer()
        generation = self._course_generation
        self._course_timer = self._scheduler.call_later(
            self._config.course_complete_delay,
            lambda: self._fire_course_completed(generation),
        )

    def _fire_course_completed(self, generation: int) -> None:
        with self._lock:
            # A timer thread can get here after the lock holder cancelled it.
            if generation != self._course_generation:
                return
            self._course_timer = None
            self._course_completed = True
            self._event_log.append("course_completed", messages.COURSE_COMPLETE, self._catalog.final_id)
            logger.info("Course completed")

    def _cancel_course_timer(self) -> None:
        self._course_generation += 1
        if self._course_timer is not None:
            self._scheduler.cancel(self._course_timer)
            self._course_timer = None

    def _note_translation(self) -> None:
        translation = self._controller.last_translation
        if translation is None or translation.fault is None:
            return
        if translation.digest == self._last_fault_digest:
            return
        self._last_fault_digest = translation.digest
        self._event_log.append(
            "translation_fault", translation.fault, self._level_id,
            commands=len(translation.commands),
        )
