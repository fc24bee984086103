"""GET /api/v1/config — expose game configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from codecraft.api.dependencies import get_session_manager
from codecraft.api.schemas import GameConfigResponse
from codecraft.api.session_manager import SessionManager

router = APIRouter()


@router.get("/config", response_model=GameConfigResponse)
def get_config(manager: SessionManager = Depends(get_session_manager)) -> GameConfigResponse:
    cfg = manager.config
    return GameConfigResponse(
        step_delay=cfg.step_delay,
        settle_delay=cfg.settle_delay,
        first_step_delay=cfg.first_step_delay,
        course_complete_delay=cfg.course_complete_delay,
        max_steps=cfg.max_steps,
        max_commands=cfg.max_commands,
        timeout_seconds=cfg.timeout_seconds,
    )
