# Session Manager
# Conversation session lifecycle, ownership checks and error taxonomy

from convo_proxy.session.errors import (
    ProxyError,
    Unauthenticated,
    InvalidRequest,
    SessionNotFound,
    OwnershipViolation,
    Misconfigured,
    UpstreamError,
    TransportFailure,
)
from convo_proxy.session.session import (
    SessionInit,
    InteractionResult,
    SessionDeletion,
    derive_actor_id,
    new_session_id,
)
from convo_proxy.session.manager import SessionManager

__all__ = [
    "ProxyError",
    "Unauthenticated",
    "InvalidRequest",
    "SessionNotFound",
    "OwnershipViolation",
    "Misconfigured",
    "UpstreamError",
    "TransportFailure",
    "SessionInit",
    "InteractionResult",
    "SessionDeletion",
    "derive_actor_id",
    "new_session_id",
    "SessionManager",
]
