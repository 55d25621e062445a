"""
Conversation Routes

HTTP surface of the session manager. The session id travels in an HttpOnly
cookie set by session initialization.

- POST   /api/voiceflow/session   -> initialize (sets cookie)
- POST   /api/voiceflow/interact  -> send a message or action
- GET    /api/voiceflow/state     -> raw runtime state (debug)
- DELETE /api/voiceflow/session   -> teardown (always clears cookie)
- GET    /api/voiceflow/status    -> configuration status
"""

import logging
from typing import Any

from fastapi import APIRouter, Cookie, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from convo_proxy.config.settings import ProxySettings
from convo_proxy.session import ProxyError, SessionManager
from convo_proxy.transport.auth import get_owner_id

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "voiceflow_session_id"

router = APIRouter(prefix="/api/voiceflow", tags=["voiceflow"])


class InteractRequest(BaseModel):
    """Body of an interaction: a free-text message or a structured action."""
    message: str | None = None
    action: Any = Field(
        default=None,
        description="Structured runtime action; must be an object",
    )


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_settings(request: Request) -> ProxySettings:
    return request.app.state.settings


def error_response(exc: ProxyError, settings: ProxySettings) -> JSONResponse:
    """Render a ProxyError; internal details only in development."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(include_details=settings.diagnostics_enabled),
    )


def _set_session_cookie(response: Response, session_id: str, settings: ProxySettings) -> None:
    response.set_cookie(
        SESSION_COOKIE_NAME,
        session_id,
        max_age=settings.cookie_max_age_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def _clear_session_cookie(response: Response, settings: ProxySettings) -> None:
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


@router.post("/session")
async def create_session(
    response: Response,
    owner_id: str = Depends(get_owner_id),
    manager: SessionManager = Depends(get_session_manager),
    settings: ProxySettings = Depends(get_settings),
    session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
):
    """Initialize (or resume) the caller's conversation session."""
    result = await manager.initialize_session(owner_id, session_id)
    _set_session_cookie(response, result.session_id, settings)
    return result.model_dump(mode="json")


@router.post("/interact")
async def interact(
    body: InteractRequest | None = None,
    owner_id: str = Depends(get_owner_id),
    manager: SessionManager = Depends(get_session_manager),
    session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
):
    """Send a message or action and return the normalized response."""
    body = body or InteractRequest()
    result = await manager.submit_interaction(
        owner_id,
        session_id,
        message=body.message,
        action=body.action,
    )
    return result.model_dump(mode="json")


@router.get("/state")
async def get_state(
    owner_id: str = Depends(get_owner_id),
    manager: SessionManager = Depends(get_session_manager),
    session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
):
    """Return the runtime's conversation state, unmodified."""
    state = await manager.fetch_state(owner_id, session_id)
    return {"state": state}


@router.delete("/session")
async def delete_session(
    owner_id: str = Depends(get_owner_id),
    manager: SessionManager = Depends(get_session_manager),
    settings: ProxySettings = Depends(get_settings),
    session_id: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
):
    """Reset the session. The cookie is cleared whatever the outcome."""
    try:
        result = await manager.delete_session(owner_id, session_id)
    except ProxyError as exc:
        failed = error_response(exc, settings)
        _clear_session_cookie(failed, settings)
        return failed

    response = JSONResponse(content={
        "success": True,
        "message": "Session deleted successfully",
        "remote_deleted": result.remote_deleted,
    })
    _clear_session_cookie(response, settings)
    return response


@router.get("/status")
async def get_status(
    owner_id: str = Depends(get_owner_id),
    manager: SessionManager = Depends(get_session_manager),
):
    """Report whether the runtime credentials are usable, with setup steps."""
    return manager.configuration_status().to_dict()
