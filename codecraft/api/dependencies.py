"""FastAPI dependency injection: the process-wide SessionManager.

The app lifespan installs the manager on startup and clears it on shutdown;
routes receive it through ``Depends(get_session_manager)``.
"""

from __future__ import annotations

from fastapi import HTTPException

from codecraft.api.session_manager import SessionManager

_session_manager: SessionManager | None = None


def set_session_manager(manager: SessionManager | None) -> None:
    global _session_manager
    _session_manager = manager


def get_session_manager() -> SessionManager:
    """Return the live manager, or answer 503 while the app is not started."""
    if _session_manager is None:
        raise HTTPException(status_code=503, detail="Game session not initialized.")
    return _session_manager
