"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codecraft.api.dependencies import set_session_manager
from codecraft.api.routes import api_router
from codecraft.api.session_manager import SessionManager
from codecraft.config import GameConfig
from codecraft.utils.logging import setup_logging

if TYPE_CHECKING:
    from codecraft.core.levels import LevelCatalog
    from codecraft.engine.scheduler import Scheduler

logger = logging.getLogger(__name__)


def create_app(
    config: GameConfig | None = None,
    catalog: LevelCatalog | None = None,
    scheduler: Scheduler | None = None,
) -> FastAPI:
    """Build and return the fully-configured FastAPI application."""
    if config is None:
        config = GameConfig()

    _config = config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(_config.log_level)
        manager = SessionManager(_config, catalog=catalog, scheduler=scheduler)
        set_session_manager(manager)
        app.state.session_manager = manager
        logger.info("API server started — level %d ready.", manager.level.id)
        yield
        manager.shutdown()
        set_session_manager(None)
        logger.info("API server shutting down.")

    app = FastAPI(
        title="Code Craft Engine",
        description=(
            "Block-program translation and grid playback API.\n\n"
            "## API Groups\n\n"
            "- **State** — Live playback snapshot and event feed\n"
            "- **Program** — Upload the block editor's program, preview its commands\n"
            "- **Control** — Playback controls: run, step, reset\n"
            "- **Levels** — Level catalog, navigation, and progress\n"
            "- **Config** — Read-only game configuration\n"
        ),
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "State", "description": "Snapshot of the current attempt polled by the frontend, plus events since a sequence number."},
            {"name": "Program", "description": "Program text generated by the block editor and the commands it emits."},
            {"name": "Control", "description": "Continuous run, single step, and reset of the current attempt."},
            {"name": "Levels", "description": "Level catalog, level selection, completed levels, and course restart."},
            {"name": "Config", "description": "Read-only playback timing and sandbox limits."},
        ],
    )

    # CORS: allow any origin in dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app
