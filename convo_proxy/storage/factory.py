"""
Storage Factory

Environment-based configuration and factory for the session store.

Supported backends:
- memory: In-memory storage (development/testing, single process)
- redis: Redis storage (shared across worker processes)

Usage:
    # From environment
    store = create_session_store_from_env()

    # From settings
    settings = StorageSettings(backend=StorageBackend.REDIS, redis_url="redis://...")
    store = create_session_store(settings)

    # Use in the session manager
    manager = SessionManager(store=store, client=client, settings=proxy_settings)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from .ports import SessionStore
from .memory import InMemorySessionStore


class StorageBackend(str, Enum):
    """Supported storage backends."""
    MEMORY = "memory"
    REDIS = "redis"


@dataclass
class StorageSettings:
    """
    Configuration for storage layer.

    Attributes:
        backend: Storage backend type
        redis_url: Redis connection URL (required for the redis backend)
        key_prefix: Prefix for Redis keys (deployment isolation)
        session_ttl_seconds: TTL for session records in Redis (None = no expiry)
    """
    backend: StorageBackend = StorageBackend.MEMORY
    redis_url: str | None = None
    key_prefix: str = "convo"
    session_ttl_seconds: int | None = None


def settings_from_env() -> StorageSettings:
    """
    Create StorageSettings from environment variables.

    Environment variables:
        CONVO_STORAGE_BACKEND: "memory" or "redis"
        CONVO_REDIS_URL: Redis connection URL
        CONVO_KEY_PREFIX: Redis key prefix
        CONVO_SESSION_TTL: Session TTL in seconds (Redis only)
    """
    redis_url = os.getenv("CONVO_REDIS_URL")
    backend_str = os.getenv("CONVO_STORAGE_BACKEND")

    # Auto-detect backend from URL if not set explicitly
    if backend_str:
        backend = StorageBackend(backend_str.lower())
    elif redis_url:
        backend = StorageBackend.REDIS
    else:
        backend = StorageBackend.MEMORY

    ttl_str = os.getenv("CONVO_SESSION_TTL")

    return StorageSettings(
        backend=backend,
        redis_url=redis_url,
        key_prefix=os.getenv("CONVO_KEY_PREFIX", "convo"),
        session_ttl_seconds=int(ttl_str) if ttl_str else None,
    )


def create_session_store(settings: StorageSettings) -> SessionStore:
    """
    Create a session store from settings.

    Args:
        settings: Storage configuration

    Returns:
        Configured SessionStore

    Raises:
        ValueError: If settings are invalid
    """
    if settings.backend == StorageBackend.MEMORY:
        return InMemorySessionStore()

    if not settings.redis_url:
        raise ValueError(f"redis_url required for backend {settings.backend.value}")

    from redis.asyncio import Redis
    from .redis import RedisSessionStore

    redis_client = Redis.from_url(settings.redis_url, decode_responses=False)
    return RedisSessionStore(
        redis=redis_client,
        key_prefix=settings.key_prefix,
        ttl_seconds=settings.session_ttl_seconds,
    )


def create_session_store_from_env() -> SessionStore:
    """
    Create a session store from environment variables.

    Convenience function that combines settings_from_env() and create_session_store().
    """
    return create_session_store(settings_from_env())
