"""
Redis Storage Adapter

Redis-based implementation of SessionStore for deployments where several
worker processes must agree on session ownership.

Uses redis.asyncio for async operations.
"""

from __future__ import annotations

import json
from datetime import datetime

from redis.asyncio import Redis
from redis.exceptions import RedisError

from .ports import SessionStore, SessionRecord, StorageError


# =============================================================================
# Serialization Helpers
# =============================================================================

def _serialize_datetime(dt: datetime) -> str:
    """Serialize datetime to ISO format."""
    return dt.isoformat()


def _deserialize_datetime(s: str) -> datetime:
    """Deserialize ISO format to datetime."""
    return datetime.fromisoformat(s)


# =============================================================================
# Redis Session Store
# =============================================================================

class RedisSessionStore(SessionStore):
    """
    Redis-based session store with optional TTL.

    Key pattern:
    - {prefix}:session:{session_id} -> JSON-encoded SessionRecord
    """

    def __init__(
        self,
        redis: Redis,
        key_prefix: str = "convo",
        ttl_seconds: int | None = None,
    ) -> None:
        """
        Initialize Redis session store.

        Args:
            redis: Redis async client
            key_prefix: Prefix for all keys (deployment isolation)
            ttl_seconds: Expiry applied on every write (None keeps keys forever)
        """
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _session_key(self, session_id: str) -> str:
        """Key for session record."""
        return f"{self._prefix}:session:{session_id}"

    def _serialize_record(self, record: SessionRecord) -> str:
        """Serialize SessionRecord to JSON."""
        return json.dumps({
            "session_id": record.session_id,
            "owner_id": record.owner_id,
            "external_actor_id": record.external_actor_id,
            "created_at": _serialize_datetime(record.created_at),
        })

    def _deserialize_record(self, data: str | bytes) -> SessionRecord:
        """Deserialize JSON to SessionRecord."""
        if isinstance(data, bytes):
            data = data.decode()
        d = json.loads(data)
        return SessionRecord(
            session_id=d["session_id"],
            owner_id=d["owner_id"],
            external_actor_id=d["external_actor_id"],
            created_at=_deserialize_datetime(d["created_at"]),
        )

    async def create(self, record: SessionRecord) -> None:
        try:
            await self._redis.set(
                self._session_key(record.session_id),
                self._serialize_record(record),
                ex=self._ttl,
            )
        except RedisError as e:
            raise StorageError(f"Failed to store session {record.session_id}: {e}") from e

    async def claim(self, record: SessionRecord) -> bool:
        try:
            created = await self._redis.set(
                self._session_key(record.session_id),
                self._serialize_record(record),
                ex=self._ttl,
                nx=True,
            )
        except RedisError as e:
            raise StorageError(f"Failed to claim session {record.session_id}: {e}") from e
        return bool(created)

    async def get(self, session_id: str) -> SessionRecord | None:
        try:
            data = await self._redis.get(self._session_key(session_id))
        except RedisError as e:
            raise StorageError(f"Failed to read session {session_id}: {e}") from e
        if not data:
            return None
        return self._deserialize_record(data)

    async def remove(self, session_id: str) -> None:
        try:
            await self._redis.delete(self._session_key(session_id))
        except RedisError as e:
            raise StorageError(f"Failed to remove session {session_id}: {e}") from e

    async def close(self) -> None:
        await self._redis.aclose()
