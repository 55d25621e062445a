"""
Agent Runtime Client

Builds the outbound requests understood by the conversational-agent runtime.
All calls go through the RetryingTransport and return raw responses; status
interpretation belongs to the session manager.

Endpoints (relative to the runtime base URL):
- POST   /state/user/{actor}/interact  -> list of trace events
- GET    /state/user/{actor}           -> opaque state blob
- DELETE /state/user/{actor}           -> remote state teardown
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from convo_proxy.config.settings import ProxySettings
from convo_proxy.runtime.retry import RetryingTransport

logger = logging.getLogger(__name__)

LAUNCH_ACTION = {"type": "launch"}


def text_action(message: str) -> dict[str, Any]:
    """Wrap free text as a runtime text action."""
    return {"type": "text", "payload": message}


class AgentRuntimeClient:
    """Thin request builder for the agent runtime state API."""

    def __init__(self, transport: RetryingTransport, settings: ProxySettings):
        self._transport = transport
        self._settings = settings

    def _state_url(self, actor_id: str) -> str:
        return f"{self._settings.runtime_url}/state/user/{quote(actor_id, safe='')}"

    def _headers(self, with_body: bool = False) -> dict[str, str]:
        headers = {"Authorization": self._settings.api_key or ""}
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def interact(self, actor_id: str, action: dict[str, Any]) -> httpx.Response:
        """Send one action (launch, text or structured) for an actor."""
        body = {
            "action": action,
            "config": {
                "tts": True,
                "stripSSML": True,
            },
            "versionID": self._settings.effective_version_id,
        }
        logger.debug(f"Interact for actor {actor_id}: action type {action.get('type')}")
        return await self._transport.request(
            "POST",
            f"{self._state_url(actor_id)}/interact",
            headers=self._headers(with_body=True),
            json=body,
        )

    async def launch(self, actor_id: str) -> httpx.Response:
        """Start (or restart) the conversation for an actor."""
        return await self.interact(actor_id, dict(LAUNCH_ACTION))

    async def fetch_state(self, actor_id: str) -> httpx.Response:
        return await self._transport.request(
            "GET",
            self._state_url(actor_id),
            headers=self._headers(),
        )

    async def delete_state(self, actor_id: str) -> httpx.Response:
        return await self._transport.request(
            "DELETE",
            self._state_url(actor_id),
            headers=self._headers(),
        )
