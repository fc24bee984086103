"""/api/v1/levels and /api/v1/progress — level catalog and navigation."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from codecraft.api.dependencies import get_session_manager
from codecraft.api.routes.serializers import level_schema
from codecraft.api.schemas import LevelListResponse, LevelSchema, ProgressResponse
from codecraft.api.session_manager import SessionManager

router = APIRouter()


def _current(manager: SessionManager) -> LevelSchema:
    level = manager.level
    return level_schema(level, manager.progress.is_completed(level.id))


@router.get("/levels", response_model=LevelListResponse)
def list_levels(manager: SessionManager = Depends(get_session_manager)) -> LevelListResponse:
    return LevelListResponse(
        current_level_id=manager.level.id,
        levels=[level_schema(lvl, manager.progress.is_completed(lvl.id)) for lvl in manager.catalog],
    )


@router.get("/levels/current", response_model=LevelSchema)
def current_level(manager: SessionManager = Depends(get_session_manager)) -> LevelSchema:
    return _current(manager)


@router.post("/levels/next", response_model=LevelSchema)
def next_level(manager: SessionManager = Depends(get_session_manager)) -> LevelSchema:
    manager.next_level()
    return _current(manager)


@router.post("/levels/previous", response_model=LevelSchema)
def previous_level(manager: SessionManager = Depends(get_session_manager)) -> LevelSchema:
    manager.previous_level()
    return _current(manager)


@router.post("/levels/{level_id}/select", response_model=LevelSchema)
def select_level(
    level_id: int,
    manager: SessionManager = Depends(get_session_manager),
) -> LevelSchema:
    try:
        manager.select_level(level_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Level {level_id} not found.")
    return _current(manager)


@router.get("/progress", response_model=ProgressResponse)
def get_progress(manager: SessionManager = Depends(get_session_manager)) -> ProgressResponse:
    return ProgressResponse(
        current_level_id=manager.level.id,
        total_levels=len(manager.catalog),
        completed_levels=list(manager.progress.completed),
        course_completed=manager.course_completed,
    )


@router.post("/course/restart", response_model=ProgressResponse)
def restart_course(manager: SessionManager = Depends(get_session_manager)) -> ProgressResponse:
    manager.restart_course()
    return get_progress(manager)
