"""
Session Models

Identity helpers and the result shapes returned by the session manager.

Session Lifecycle:
1. absent -> active on initialize
2. active -> active on interact / state fetch
3. active -> absent on delete (terminal)

There is no expiry transition; a process restart with the in-memory store
makes every session implicitly absent and clients re-initialize.
"""

from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field


def new_session_id() -> str:
    """Generate a fresh opaque session id."""
    return uuid4().hex


def derive_actor_id(owner_id: str, prefix: str = "user_") -> str:
    """
    Map an owner to the actor identity used with the agent runtime.

    Deterministic, so the same user always resumes the same remote
    conversation state across sessions.
    """
    return f"{prefix}{owner_id}"


class SessionInit(BaseModel):
    """Result of initializing a session."""
    session_id: str
    external_actor_id: str
    expires_at: datetime = Field(
        ...,
        description="When the session cookie expires on the client"
    )
    messages: list[str] = Field(default_factory=list)
    audio_refs: list[str] = Field(default_factory=list)
    extracted_data: dict[str, Any] = Field(default_factory=dict)


class InteractionResult(BaseModel):
    """Result of one message or action submission."""
    messages: list[str] = Field(default_factory=list)
    audio_refs: list[str] = Field(default_factory=list)
    extracted_data: dict[str, Any] = Field(default_factory=dict)
    is_complete: bool = False
    traces: list[Any] = Field(
        default_factory=list,
        description="Raw runtime traces, for diagnostic consumers"
    )


class SessionDeletion(BaseModel):
    """Outcome of a session teardown. The local record is always gone."""
    session_id: str
    remote_deleted: bool
    remote_status: int | None = None
