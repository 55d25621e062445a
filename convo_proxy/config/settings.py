"""
Proxy Settings

Runtime configuration for the conversation proxy, read from environment
variables (optionally loaded from a .env file by the application module).
"""

import logging
import os
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_RUNTIME_URL = "https://general-runtime.voiceflow.com"


class ProxySettings(BaseModel):
    """Configuration for the agent runtime connection and session handling."""

    api_key: str | None = Field(
        default=None,
        description="Dialog Manager API key sent as the Authorization header",
    )
    project_key: str | None = Field(
        default=None,
        description="Project identifier, also used as the runtime versionID",
    )
    version_id: str | None = Field(
        default=None,
        description="Fallback versionID when no project key is set",
    )
    runtime_url: str = Field(
        default=DEFAULT_RUNTIME_URL,
        description="Base URL of the agent runtime",
    )
    environment: Literal["development", "test", "production"] = Field(
        default="production",
        description="Deployment environment; unset means production",
    )
    actor_prefix: str = Field(
        default="user_",
        description="Namespace prepended to owner ids to form runtime actor ids",
    )
    http_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Per-request timeout for outbound calls in seconds",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        description="Additional attempts after a network-level failure",
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Fixed wait between attempts",
    )
    auth_header: str = Field(
        default="X-Authenticated-User",
        description="Header carrying the caller identity set by the identity proxy",
    )
    cookie_max_age_seconds: int = Field(
        default=60 * 60 * 24 * 7,
        description="Lifetime of the session cookie",
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def diagnostics_enabled(self) -> bool:
        """Upstream bodies and transport errors are echoed to clients only in development."""
        return self.environment == "development"

    @property
    def effective_version_id(self) -> str:
        """versionID sent to the runtime: project key, then version, then production."""
        return self.project_key or self.version_id or "production"


def settings_from_env() -> ProxySettings:
    """
    Create ProxySettings from environment variables.

    Reads:
    - VOICEFLOW_API_KEY, VOICEFLOW_PROJECT_KEY, VOICEFLOW_VERSION
    - VOICEFLOW_RUNTIME_URL (default: general runtime)
    - CONVO_ENV (default: "production")
    - CONVO_ACTOR_PREFIX (default: "user_")
    - CONVO_HTTP_TIMEOUT (default: 30.0)
    - CONVO_MAX_RETRIES (default: 2)
    - CONVO_RETRY_DELAY (default: 1.0)
    - CONVO_AUTH_HEADER (default: "X-Authenticated-User")
    """
    settings = ProxySettings(
        api_key=os.getenv("VOICEFLOW_API_KEY") or None,
        project_key=os.getenv("VOICEFLOW_PROJECT_KEY") or None,
        version_id=os.getenv("VOICEFLOW_VERSION") or None,
        runtime_url=os.getenv("VOICEFLOW_RUNTIME_URL", DEFAULT_RUNTIME_URL).rstrip("/"),
        environment=os.getenv("CONVO_ENV", "production").lower(),
        actor_prefix=os.getenv("CONVO_ACTOR_PREFIX", "user_"),
        http_timeout=float(os.getenv("CONVO_HTTP_TIMEOUT", "30.0")),
        max_retries=int(os.getenv("CONVO_MAX_RETRIES", "2")),
        retry_delay_seconds=float(os.getenv("CONVO_RETRY_DELAY", "1.0")),
        auth_header=os.getenv("CONVO_AUTH_HEADER", "X-Authenticated-User"),
    )

    logger.info(
        f"Proxy settings loaded: environment={settings.environment}, "
        f"runtime_url={settings.runtime_url}"
    )

    return settings
