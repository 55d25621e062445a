# Storage Layer
# Pluggable session persistence for the conversation proxy
#
# This module provides:
# - Port interface (ABC) defining the session store contract
# - In-memory implementation for development/testing
# - Redis implementation for multi-process deployments
# - Factory for configuration-based adapter selection

from .ports import (
    SessionStore,
    SessionRecord,
    StorageError,
)
from .memory import InMemorySessionStore
from .factory import (
    StorageSettings,
    StorageBackend,
    create_session_store,
    create_session_store_from_env,
    settings_from_env,
)

__all__ = [
    # Ports
    "SessionStore",
    "SessionRecord",
    "StorageError",
    # Adapters
    "InMemorySessionStore",
    # Factory
    "StorageSettings",
    "StorageBackend",
    "create_session_store",
    "create_session_store_from_env",
    "settings_from_env",
]
