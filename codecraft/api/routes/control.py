"""POST /api/v1/control/{action} — playback controls."""

from __future__ import annotations

from enum import Enum

from fastapi import APIRouter, Depends

from codecraft.api.dependencies import get_session_manager
from codecraft.api.schemas import ControlResponse
from codecraft.api.session_manager import SessionManager

router = APIRouter()


class ControlAction(str, Enum):
    run = "run"
    step = "step"
    reset = "reset"


@router.post("/control/{action}", response_model=ControlResponse)
def control(
    action: ControlAction,
    manager: SessionManager = Depends(get_session_manager),
) -> ControlResponse:
    match action:
        case ControlAction.run:
            started = manager.run()
            status, message = ("ok", "Playback started.") if started else ("noop", "Nothing started.")

        case ControlAction.step:
            acted = manager.step()
            status, message = ("ok", "Stepped.") if acted else ("noop", "Nothing to step.")

        case ControlAction.reset:
            manager.reset()
            status, message = "ok", "Level reset."

    snapshot = manager.get_snapshot()
    if snapshot.message and status == "noop":
        message = snapshot.message
    return ControlResponse(status=status, message=message, phase=snapshot.phase.name, cursor=snapshot.cursor)
