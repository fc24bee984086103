"""Playground — test fixture for playback scenarios.

Builds a SessionManager on a virtual clock with a small custom catalog so
tests can place a program, drive playback, and inspect snapshots.

Usage:
    pg = Playground(level(grid_size=3, goal=(2, 0)))
    pg.program("MOVE", "MOVE")
    pg.run()
    pg.finish()
    assert pg.snapshot.outcome == Outcome.GOAL_REACHED
"""

from __future__ import annotations

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from codecraft.api.session_manager import SessionManager
from codecraft.config import GameConfig
from codecraft.core.enums import Direction
from codecraft.core.levels import Level, LevelCatalog
from codecraft.core.models import Vector2
from codecraft.core.snapshot import Snapshot
from codecraft.engine.scheduler import ManualScheduler


def level(
    id: int = 1,
    grid_size: int = 3,
    start: tuple[int, int] = (0, 0),
    goal: tuple[int, int] = (2, 0),
    direction: Direction = Direction.EAST,
    obstacles: tuple[tuple[int, int], ...] = (),
    fuel: tuple[int, int] | None = None,
    ideal: int = 2,
) -> Level:
    return Level(
        id=id,
        title=f"Test level {id}",
        grid_size=grid_size,
        start_pos=Vector2(*start),
        goal_pos=Vector2(*goal),
        start_dir=direction,
        obstacles=tuple(Vector2(*o) for o in obstacles),
        fuel_pos=Vector2(*fuel) if fuel is not None else None,
        ideal_block_count=ideal,
    )


def emit_program(*types: str) -> str:
    """Program text that emits *types* in order, one call per line."""
    return "\n".join(f"emit({t!r})" for t in types)


class Playground:
    """Session on a ManualScheduler with recorded snapshots."""

    def __init__(self, *levels: Level, config: GameConfig | None = None) -> None:
        self.config = config or GameConfig()
        self.scheduler = ManualScheduler()
        catalog = LevelCatalog(levels or (level(),))
        self.session = SessionManager(self.config, catalog=catalog, scheduler=self.scheduler)
        self.snapshots: list[Snapshot] = []
        self.session.controller.subscribe(self.snapshots.append)

    @property
    def controller(self):
        return self.session.controller

    @property
    def snapshot(self) -> Snapshot:
        return self.session.get_snapshot()

    def program(self, *types: str, block_count: int = 0) -> None:
        self.session.set_program(emit_program(*types), block_count)

    def code(self, text: str, block_count: int = 0) -> None:
        self.session.set_program(text, block_count)

    def run(self) -> bool:
        return self.session.run()

    def step(self) -> bool:
        return self.session.step()

    def advance(self, seconds: float) -> int:
        return self.scheduler.advance(seconds)

    def finish(self) -> Snapshot:
        self.scheduler.run_until_idle()
        return self.snapshot
