"""/api/v1/program — upload the block editor's program and preview its commands."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from codecraft.api.dependencies import get_session_manager
from codecraft.api.schemas import CommandSchema, ProgramRequest, ProgramResponse
from codecraft.api.session_manager import SessionManager

router = APIRouter()


def _describe(manager: SessionManager) -> ProgramResponse:
    translation = manager.translate_program()
    return ProgramResponse(
        digest=translation.digest,
        commands=[CommandSchema(type=c.type.value, payload=c.payload) for c in translation.commands],
        fault=translation.fault,
        block_count=manager.block_count,
        ideal_block_count=manager.level.ideal_block_count,
        over_ideal=manager.over_ideal,
    )


@router.put("/program", response_model=ProgramResponse)
def set_program(
    body: ProgramRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> ProgramResponse:
    manager.set_program(body.code, body.block_count)
    return _describe(manager)


@router.get("/program", response_model=ProgramResponse)
def get_program(manager: SessionManager = Depends(get_session_manager)) -> ProgramResponse:
    return _describe(manager)
