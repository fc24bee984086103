"""Tests for the playback state machine on a virtual clock."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from codecraft.config import GameConfig
from codecraft.core import messages
from codecraft.core.enums import Outcome, PlaybackPhase
from codecraft.core.models import Vector2
from codecraft.engine.evaluator import OutcomeEvaluator
from codecraft.engine.playback import PlaybackController
from codecraft.engine.scheduler import ManualScheduler
from codecraft.engine.simulator import WorldSimulator
from codecraft.engine.translator import ProgramTranslator
from codecraft.core.levels import LevelCatalog
from tests.helpers.playground import Playground, emit_program, level


def make_controller(lvl=None):
    lvl = lvl or level()
    config = GameConfig()
    scheduler = ManualScheduler()
    controller = PlaybackController(
        config=config,
        level=lvl,
        translator=ProgramTranslator(config),
        simulator=WorldSimulator(),
        evaluator=OutcomeEvaluator(LevelCatalog([lvl])),
        scheduler=scheduler,
    )
    return controller, scheduler


class TestContinuousRun:

    def test_reaches_goal(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        assert pg.run()
        snap = pg.finish()
        assert snap.phase == PlaybackPhase.FINISHED
        assert snap.position == Vector2(2, 0)
        assert snap.outcome == Outcome.GOAL_REACHED
        assert snap.completed
        assert not snap.running
        assert snap.message == messages.GOAL_REACHED

    def test_step_delay_between_commands(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        pg.run()
        assert pg.snapshot.phase == PlaybackPhase.RUNNING
        assert pg.snapshot.running
        pg.advance(0.7)
        assert pg.snapshot.cursor == 0
        pg.advance(0.1)
        assert pg.snapshot.cursor == 1
        assert pg.snapshot.position == Vector2(1, 0)
        pg.advance(0.8)
        assert pg.snapshot.cursor == 2
        assert pg.snapshot.phase == PlaybackPhase.RUNNING

    def test_evaluation_waits_settle_delay(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        pg.run()
        pg.advance(1.6)
        assert pg.snapshot.outcome is None
        pg.advance(0.4)
        assert pg.snapshot.outcome is None
        pg.advance(0.1)
        assert pg.snapshot.outcome == Outcome.GOAL_REACHED

    def test_bump_then_not_reached(self):
        pg = Playground(level(goal=(2, 0), obstacles=((1, 0),)))
        pg.program("MOVE")
        pg.run()
        pg.advance(0.8)
        assert pg.snapshot.message == messages.BUMPED
        assert pg.snapshot.position == Vector2(0, 0)
        snap = pg.finish()
        assert snap.outcome == Outcome.NOT_REACHED
        assert snap.message == messages.NOT_REACHED

    def test_missing_fuel(self):
        pg = Playground(level(goal=(2, 0), fuel=(1, 0)))
        pg.program("MOVE", "MOVE")
        pg.run()
        snap = pg.finish()
        assert snap.position == Vector2(2, 0)
        assert snap.outcome == Outcome.GOAL_REACHED_MISSING_FUEL
        assert snap.message == messages.MISSING_FUEL
        assert not snap.completed

    def test_refuel_then_goal(self):
        pg = Playground(level(goal=(2, 0), fuel=(1, 0)))
        pg.program("MOVE", "COLLECT", "MOVE")
        pg.run()
        snap = pg.finish()
        assert snap.fuel_collected
        assert snap.outcome == Outcome.GOAL_REACHED

    def test_run_ignored_while_running(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        assert pg.run()
        pg.advance(0.8)
        generation = pg.snapshot.generation
        assert not pg.run()
        assert pg.snapshot.generation == generation
        assert pg.snapshot.cursor == 1

    def test_run_again_after_finish(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        pg.run()
        pg.finish()
        assert pg.run()
        snap = pg.snapshot
        assert snap.phase == PlaybackPhase.RUNNING
        assert snap.cursor == 0
        assert snap.position == Vector2(0, 0)
        assert snap.outcome is None

    def test_faulted_program_plays_prefix(self):
        pg = Playground(level(goal=(2, 0)))
        pg.code("emit('MOVE')\nraise Exception('oops')\nemit('MOVE')")
        assert pg.run()
        snap = pg.finish()
        assert snap.total_commands == 1
        assert snap.position == Vector2(1, 0)
        assert snap.outcome == Outcome.NOT_REACHED


class TestEmptyProgram:

    def test_run_shows_no_blocks(self):
        pg = Playground()
        pg.code("")
        assert not pg.run()
        snap = pg.snapshot
        assert snap.phase == PlaybackPhase.IDLE
        assert snap.message == messages.NO_BLOCKS
        assert pg.scheduler.pending == 0

    def test_step_shows_no_blocks(self):
        pg = Playground()
        pg.code("x = 1")
        assert not pg.step()
        assert pg.snapshot.message == messages.NO_BLOCKS
        assert pg.snapshot.phase == PlaybackPhase.IDLE


class TestStepMode:

    def test_first_step_after_short_delay(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        assert pg.step()
        assert pg.snapshot.phase == PlaybackPhase.QUEUED
        assert pg.snapshot.cursor == 0
        pg.advance(0.1)
        assert pg.snapshot.phase == PlaybackPhase.STEPPING
        assert pg.snapshot.cursor == 1

    def test_one_command_per_step(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        pg.step()
        pg.advance(0.1)
        pg.step()
        assert pg.snapshot.cursor == 2
        assert pg.snapshot.position == Vector2(2, 0)

    def test_no_evaluation_until_step_after_last(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        pg.step()
        pg.advance(0.1)
        pg.step()
        pg.advance(60)
        snap = pg.snapshot
        assert snap.phase == PlaybackPhase.STEPPING
        assert snap.outcome is None
        assert snap.message is None
        pg.step()
        assert pg.snapshot.phase == PlaybackPhase.FINISHED
        assert pg.snapshot.outcome == Outcome.GOAL_REACHED

    def test_step_before_queued_fires(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        pg.step()
        pg.step()
        assert pg.snapshot.phase == PlaybackPhase.STEPPING
        assert pg.snapshot.cursor == 1
        pg.advance(1)
        assert pg.snapshot.cursor == 1

    def test_step_pauses_continuous_run(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        pg.run()
        pg.advance(0.8)
        pg.step()
        assert pg.snapshot.phase == PlaybackPhase.STEPPING
        assert pg.snapshot.cursor == 2
        pg.advance(10)
        assert pg.snapshot.phase == PlaybackPhase.STEPPING
        assert pg.snapshot.outcome is None

    def test_run_ignored_while_stepping(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        pg.step()
        pg.advance(0.1)
        assert not pg.run()
        assert pg.snapshot.phase == PlaybackPhase.STEPPING

    def test_step_after_finish_starts_over(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE")
        pg.run()
        pg.finish()
        assert pg.step()
        assert pg.snapshot.phase == PlaybackPhase.QUEUED
        assert pg.snapshot.position == Vector2(0, 0)


class TestReset:

    def test_reset_restores_start(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        pg.run()
        pg.advance(0.8)
        pg.session.reset()
        snap = pg.snapshot
        assert snap.phase == PlaybackPhase.IDLE
        assert snap.position == Vector2(0, 0)
        assert snap.visited == ()
        assert not snap.running
        assert snap.message is None

    def test_reset_cancels_timers(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        pg.run()
        pg.session.reset()
        assert pg.scheduler.pending == 0
        pg.advance(10)
        assert pg.snapshot.cursor == 0
        assert pg.snapshot.position == Vector2(0, 0)

    def test_reset_bumps_generation(self):
        pg = Playground()
        before = pg.snapshot.generation
        pg.session.reset()
        assert pg.snapshot.generation == before + 1

    def test_stale_timer_ignored(self):
        controller, scheduler = make_controller(level(goal=(2, 0)))
        controller.set_program(emit_program("MOVE", "MOVE"))
        controller.run()
        # Untrack the timer so reset cannot cancel it.
        controller._pending.clear()
        controller.reset()
        scheduler.advance(5)
        assert controller.cursor == 0
        assert controller.phase == PlaybackPhase.IDLE

    def test_program_change_mid_run_waits_for_next_attempt(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        pg.run()
        pg.program("TURN_LEFT")
        snap = pg.finish()
        assert snap.total_commands == 2
        assert snap.outcome == Outcome.GOAL_REACHED


class TestSnapshots:

    def test_published_after_each_command(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "MOVE")
        pg.run()
        pg.finish()
        positions = [s.position for s in pg.snapshots if s.phase == PlaybackPhase.RUNNING]
        assert Vector2(1, 0) in positions
        assert pg.snapshots[-1].phase == PlaybackPhase.FINISHED

    def test_cursor_never_exceeds_total(self):
        pg = Playground(level(goal=(2, 0)))
        pg.program("MOVE", "TURN_LEFT", "MOVE")
        pg.run()
        pg.finish()
        for snap in pg.snapshots:
            assert snap.cursor <= snap.total_commands

    def test_subscriber_failure_does_not_stop_playback(self):
        controller, scheduler = make_controller(level(goal=(2, 0)))

        def broken(snap):
            raise RuntimeError("renderer crashed")

        controller.subscribe(broken)
        controller.set_program(emit_program("MOVE", "MOVE"))
        controller.run()
        scheduler.run_until_idle()
        assert controller.outcome == Outcome.GOAL_REACHED


class TestControllerLevels:

    def test_load_level_resets(self):
        controller, scheduler = make_controller(level(goal=(2, 0)))
        controller.set_program(emit_program("MOVE"))
        controller.run()
        other = level(id=1, grid_size=4, start=(1, 1), goal=(3, 3))
        controller.load_level(other)
        assert controller.level is other
        assert controller.phase == PlaybackPhase.IDLE
        assert controller.state.position == Vector2(1, 1)
        assert scheduler.pending == 0
