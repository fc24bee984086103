"""Pydantic request/response models for the REST API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# --- Geometry ---

class PositionSchema(BaseModel):
    x: int
    y: int


# --- Program ---

class ProgramRequest(BaseModel):
    code: str = Field("", description="Program text generated by the block editor")
    block_count: int = Field(0, ge=0, description="Blocks currently placed in the workspace")


class CommandSchema(BaseModel):
    type: str
    payload: Any = None


class ProgramResponse(BaseModel):
    digest: str
    commands: list[CommandSchema]
    fault: str | None = None
    block_count: int = 0
    ideal_block_count: int = 1
    over_ideal: bool = False


# --- State ---

class EventSchema(BaseModel):
    seq: int
    category: str
    message: str
    level_id: int | None = None


class GameStateResponse(BaseModel):
    level_id: int
    generation: int
    phase: str
    cursor: int
    total_commands: int
    position: PositionSchema
    direction: str
    visited: list[PositionSchema] = Field(default_factory=list)
    fuel_collected: bool = False
    running: bool = False
    completed: bool = False
    message: str | None = None
    outcome: str | None = None
    events: list[EventSchema] = Field(default_factory=list)


# --- Levels ---

class LevelSchema(BaseModel):
    id: int
    title: str
    description: str = ""
    hint: str = ""
    grid_size: int
    start_pos: PositionSchema
    start_dir: str
    goal_pos: PositionSchema
    fuel_pos: PositionSchema | None = None
    obstacles: list[PositionSchema] = Field(default_factory=list)
    ideal_block_count: int
    allowed_blocks: list[str] = Field(default_factory=list)
    completed: bool = False


class LevelListResponse(BaseModel):
    current_level_id: int
    levels: list[LevelSchema]


# --- Progress ---

class ProgressResponse(BaseModel):
    current_level_id: int
    total_levels: int
    completed_levels: list[int]
    course_completed: bool


# --- Control ---

class ControlResponse(BaseModel):
    status: str
    message: str
    phase: str
    cursor: int = 0


# --- Config ---

class GameConfigResponse(BaseModel):
    step_delay: float
    settle_delay: float
    first_step_delay: float
    course_complete_delay: float
    max_steps: int
    max_commands: int
    timeout_seconds: float
