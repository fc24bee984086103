"""GET /api/v1/state — live playback snapshot and event feed (polled by UI)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from codecraft.api.dependencies import get_session_manager
from codecraft.api.routes.serializers import state_schema
from codecraft.api.schemas import GameStateResponse
from codecraft.api.session_manager import SessionManager

router = APIRouter()


@router.get("/state", response_model=GameStateResponse)
def get_state(
    since: int = Query(0, ge=0, description="Only return events after this sequence number"),
    manager: SessionManager = Depends(get_session_manager),
) -> GameStateResponse:
    snapshot = manager.get_snapshot()
    return state_schema(snapshot, manager.event_log.since(since))
