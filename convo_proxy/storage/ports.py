"""
Storage Port Interfaces

Abstract base classes defining the storage contract for conversation sessions.
All persistence APIs are async.

These ports follow the hexagonal architecture pattern:
- The session manager depends only on these interfaces
- Adapters (in-memory, Redis) implement these interfaces
- Storage is injected via dependency inversion

Thread-safety: All implementations must be safe for concurrent async usage.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


# =============================================================================
# Session Store
# =============================================================================

@dataclass
class SessionRecord:
    """
    Stored session data.

    Binds an opaque, client-visible session id to the user that created it
    and to the actor identity used when talking to the agent runtime.
    """
    session_id: str
    owner_id: str
    external_actor_id: str
    created_at: datetime


class SessionStore(ABC):
    """
    Storage interface for conversation sessions.

    Mutations are either whole-record overwrites or removals, so concurrent
    calls on the same id resolve as last-writer-wins without corruption.
    """

    @abstractmethod
    async def create(self, record: SessionRecord) -> None:
        """
        Insert a session, overwriting any record with the same id.

        Args:
            record: Session data to persist

        Raises:
            StorageError: If the write fails
        """
        ...

    @abstractmethod
    async def claim(self, record: SessionRecord) -> bool:
        """
        Insert a session only if no record with the same id exists.

        Atomic with respect to concurrent claims and creates on the same id.

        Args:
            record: Session data to persist

        Returns:
            True if the record was inserted, False if the id was already taken

        Raises:
            StorageError: If the write fails
        """
        ...

    @abstractmethod
    async def get(self, session_id: str) -> SessionRecord | None:
        """
        Get a session by ID.

        Args:
            session_id: The opaque session id

        Returns:
            Session record or None if not found
        """
        ...

    @abstractmethod
    async def remove(self, session_id: str) -> None:
        """
        Remove a session. Removing an unknown id is not an error.

        Args:
            session_id: The opaque session id
        """
        ...

    async def close(self) -> None:
        """
        Release connections held by the store.

        Called during shutdown.
        """
        pass


# =============================================================================
# Exceptions
# =============================================================================

class StorageError(Exception):
    """Base exception for storage errors."""
    pass
