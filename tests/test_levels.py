"""Tests for level validation and the level catalog."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from pydantic import ValidationError

from codecraft.core.enums import CommandType, Direction
from codecraft.core.levels import DEFAULT_LEVELS, Level, LevelCatalog, default_catalog
from codecraft.core.models import Vector2
from tests.helpers.playground import level


class TestLevelValidation:

    def test_valid_level(self):
        lvl = level(grid_size=3, goal=(2, 0), fuel=(1, 0))
        assert lvl.requires_fuel
        assert lvl.start_dir == Direction.EAST

    def test_no_fuel_by_default(self):
        assert not level().requires_fuel

    def test_goal_outside_grid_rejected(self):
        with pytest.raises(ValidationError):
            level(grid_size=3, goal=(3, 0))

    def test_start_outside_grid_rejected(self):
        with pytest.raises(ValidationError):
            level(grid_size=3, start=(-1, 0))

    def test_fuel_outside_grid_rejected(self):
        with pytest.raises(ValidationError):
            level(grid_size=3, fuel=(0, 5))

    def test_obstacle_on_start_rejected(self):
        with pytest.raises(ValidationError):
            level(obstacles=((0, 0),))

    def test_obstacle_on_goal_rejected(self):
        with pytest.raises(ValidationError):
            level(goal=(2, 0), obstacles=((2, 0),))

    def test_obstacle_on_fuel_rejected(self):
        with pytest.raises(ValidationError):
            level(fuel=(1, 1), obstacles=((1, 1),))

    def test_obstacle_outside_grid_rejected(self):
        with pytest.raises(ValidationError):
            level(obstacles=((7, 7),))

    def test_zero_grid_rejected(self):
        with pytest.raises(ValidationError):
            Level(id=1, title="x", grid_size=0, start_pos=Vector2(0, 0), goal_pos=Vector2(0, 0))

    def test_is_blocked(self):
        lvl = level(grid_size=3, obstacles=((1, 1),))
        assert lvl.is_blocked(Vector2(1, 1))
        assert lvl.is_blocked(Vector2(-1, 0))
        assert lvl.is_blocked(Vector2(0, 3))
        assert not lvl.is_blocked(Vector2(1, 0))

    def test_frozen(self):
        lvl = level()
        with pytest.raises(Exception):
            lvl.grid_size = 10


class TestLevelCatalog:

    def test_sorted_by_id(self):
        catalog = LevelCatalog([level(id=2), level(id=1)])
        assert [lvl.id for lvl in catalog] == [1, 2]

    def test_gap_rejected(self):
        with pytest.raises(ValueError):
            LevelCatalog([level(id=1), level(id=3)])

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            LevelCatalog([])

    def test_get_unknown(self):
        catalog = LevelCatalog([level(id=1)])
        with pytest.raises(KeyError):
            catalog.get(2)
        with pytest.raises(KeyError):
            catalog.get(0)

    def test_clamp(self):
        catalog = LevelCatalog([level(id=1), level(id=2), level(id=3)])
        assert catalog.clamp(0) == 1
        assert catalog.clamp(2) == 2
        assert catalog.clamp(9) == 3

    def test_is_final(self):
        catalog = LevelCatalog([level(id=1), level(id=2)])
        assert catalog.is_final(2)
        assert not catalog.is_final(1)


class TestDefaultCourse:

    def test_course_has_eight_levels(self):
        catalog = default_catalog()
        assert len(catalog) == 8
        assert catalog.first_id == 1
        assert catalog.final_id == 8

    def test_first_level_only_allows_move(self):
        assert default_catalog().get(1).allowed_blocks == (CommandType.MOVE,)

    def test_fuel_levels_offer_collect(self):
        for lvl in DEFAULT_LEVELS:
            if lvl.requires_fuel:
                assert CommandType.COLLECT in lvl.allowed_blocks

    def test_titles_unique(self):
        titles = [lvl.title for lvl in DEFAULT_LEVELS]
        assert len(set(titles)) == len(titles)
