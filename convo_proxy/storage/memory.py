"""
In-Memory Storage Adapter

Uses asyncio locks for concurrent async safety.

Everything is lost on restart: clients holding a session cookie from a
previous process simply re-initialize. Use for:
- Local development
- Unit/integration testing
- Single-process deployments without persistence requirements
"""

import asyncio

from convo_proxy.storage.ports import SessionStore, SessionRecord


class InMemorySessionStore(SessionStore):
    """
    In-memory session storage.

    Uses dict with asyncio.Lock for thread-safety.
    """

    def __init__(self):
        self._sessions: dict[str, SessionRecord] = {}
        self._lock = asyncio.Lock()

    async def create(self, record: SessionRecord) -> None:
        async with self._lock:
            self._sessions[record.session_id] = record

    async def claim(self, record: SessionRecord) -> bool:
        async with self._lock:
            if record.session_id in self._sessions:
                return False
            self._sessions[record.session_id] = record
            return True

    async def get(self, session_id: str) -> SessionRecord | None:
        async with self._lock:
            return self._sessions.get(session_id)

    async def remove(self, session_id: str) -> None:
        async with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
