"""
Session Manager

Manages conversation sessions between authenticated users and the agent
runtime: initialization, message/action submission, state inspection and
teardown.

Every operation requires the caller identity supplied by the authentication
layer. A session id is bound to the user that created it for its whole life;
no other identity may use it, even with a guessed or intercepted id.

Session ownership is held by an injected SessionStore.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, TYPE_CHECKING

import httpx

from convo_proxy.config.guard import ConfigCheck, check_configuration
from convo_proxy.config.settings import ProxySettings
from convo_proxy.runtime.client import text_action
from convo_proxy.session.errors import (
    InvalidRequest,
    Misconfigured,
    OwnershipViolation,
    SessionNotFound,
    TransportFailure,
    Unauthenticated,
    UpstreamError,
)
from convo_proxy.session.session import (
    InteractionResult,
    SessionDeletion,
    SessionInit,
    derive_actor_id,
    new_session_id,
)
from convo_proxy.storage import SessionRecord
from convo_proxy.trace import normalize_traces, parse_traces

if TYPE_CHECKING:
    from convo_proxy.runtime.client import AgentRuntimeClient
    from convo_proxy.storage import SessionStore

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Orchestrates the lifecycle of conversation sessions.

    Stateless apart from the injected store; safe to share across
    concurrent requests.
    """

    def __init__(
        self,
        store: "SessionStore",
        client: "AgentRuntimeClient",
        settings: ProxySettings,
    ):
        """
        Initialize the session manager.

        Args:
            store: Session ownership storage
            client: Agent runtime client (calls go through the retrying transport)
            settings: Proxy settings (credentials, actor prefix, cookie lifetime)
        """
        self._store = store
        self._client = client
        self._settings = settings

    # =========================================================================
    # Operations
    # =========================================================================

    async def initialize_session(
        self,
        owner_id: str | None,
        session_id: str | None = None,
    ) -> SessionInit:
        """
        Create or resume a session and launch the conversation.

        Args:
            owner_id: Authenticated caller
            session_id: Previously issued id (e.g. from the session cookie)

        Returns:
            SessionInit with the session id to persist and the opening messages

        Raises:
            Unauthenticated, Misconfigured, UpstreamError, TransportFailure
        """
        owner_id = self._require_owner(owner_id)

        check = check_configuration(self._settings)
        if not check.is_ok:
            logger.error(f"Cannot initialize session: {check.message}")
            raise Misconfigured(check)

        actor_id = derive_actor_id(owner_id, self._settings.actor_prefix)
        now = datetime.now(timezone.utc)

        session_id = await self._bind_session(owner_id, session_id, actor_id, now)

        logger.info(f"Session created for user {owner_id}: {session_id}")

        response = await self._send(
            "Failed to create Voiceflow session",
            self._client.launch(actor_id),
        )
        self._raise_for_status(response, "Failed to initialize Voiceflow session", owner_id)

        normalized = normalize_traces(parse_traces(self._json(response)))

        logger.info(f"Session initialized successfully for user {owner_id}")

        return SessionInit(
            session_id=session_id,
            external_actor_id=actor_id,
            expires_at=now + timedelta(seconds=self._settings.cookie_max_age_seconds),
            messages=normalized.messages,
            audio_refs=normalized.audio_refs,
            extracted_data=normalized.extracted_data,
        )

    async def submit_interaction(
        self,
        owner_id: str | None,
        session_id: str | None,
        message: str | None = None,
        action: dict[str, Any] | None = None,
    ) -> InteractionResult:
        """
        Forward one free-text message or structured action to the runtime.

        Exactly one of message and action must be given.

        Raises:
            Unauthenticated, InvalidRequest, SessionNotFound, OwnershipViolation,
            UpstreamError, TransportFailure
        """
        owner_id = self._require_owner(owner_id)
        self._require_session_id(session_id)

        if message and action:
            raise InvalidRequest("Provide either message or action, not both")
        if not message and not action:
            raise InvalidRequest("Either message or action is required")
        if action is not None and not isinstance(action, dict):
            raise InvalidRequest("Action must be an object")

        record = await self._load_owned(owner_id, session_id)

        runtime_action = action if action else text_action(message)

        logger.info(
            f"Sending interaction for user {owner_id} "
            f"(action type: {runtime_action.get('type')})"
        )

        response = await self._send(
            "Failed to process Voiceflow interaction",
            self._client.interact(record.external_actor_id, runtime_action),
        )
        self._raise_for_status(response, "Failed to send message to Voiceflow", owner_id)

        raw = self._json(response)
        normalized = normalize_traces(parse_traces(raw))

        logger.info(
            f"Interaction successful for user {owner_id}: "
            f"{len(normalized.messages)} message(s), "
            f"profile data: {bool(normalized.extracted_data)}, "
            f"complete: {normalized.is_complete}"
        )

        return InteractionResult(
            messages=normalized.messages,
            audio_refs=normalized.audio_refs,
            extracted_data=normalized.extracted_data,
            is_complete=normalized.is_complete,
            traces=raw if isinstance(raw, list) else [],
        )

    async def fetch_state(self, owner_id: str | None, session_id: str | None) -> Any:
        """
        Return the runtime's state blob for the session, unmodified.

        Raises:
            Unauthenticated, InvalidRequest, SessionNotFound, OwnershipViolation,
            UpstreamError, TransportFailure
        """
        owner_id = self._require_owner(owner_id)
        self._require_session_id(session_id)
        record = await self._load_owned(owner_id, session_id)

        response = await self._send(
            "Failed to fetch Voiceflow state",
            self._client.fetch_state(record.external_actor_id),
        )
        self._raise_for_status(response, "Failed to fetch Voiceflow state", owner_id)

        return self._json(response)

    async def delete_session(
        self,
        owner_id: str | None,
        session_id: str | None,
    ) -> SessionDeletion:
        """
        Tear down remote state, then remove the local session unconditionally.

        The local record is removed even when the remote call fails, so a
        user can always reset. Exhausted retries are still reported.

        Raises:
            Unauthenticated, InvalidRequest, SessionNotFound, OwnershipViolation,
            TransportFailure (after the local record is removed)
        """
        owner_id = self._require_owner(owner_id)
        self._require_session_id(session_id)
        record = await self._load_owned(owner_id, session_id)

        remote_error: httpx.TransportError | None = None
        remote_status: int | None = None

        try:
            response = await self._client.delete_state(record.external_actor_id)
            remote_status = response.status_code
            if not response.is_success:
                logger.warning(
                    f"Remote state delete for user {owner_id} returned {remote_status}"
                )
        except httpx.TransportError as e:
            remote_error = e
            logger.warning(f"Remote state delete for user {owner_id} failed: {e!r}")
        finally:
            await self._store.remove(session_id)

        logger.info(f"Session deleted for user {owner_id}: {session_id}")

        if remote_error is not None:
            raise TransportFailure(
                "Failed to delete Voiceflow session",
                cause=remote_error,
            ) from remote_error

        return SessionDeletion(
            session_id=session_id,
            remote_deleted=remote_status is not None and 200 <= remote_status < 300,
            remote_status=remote_status,
        )

    def configuration_status(self) -> ConfigCheck:
        """Current configuration check, for operator diagnostics."""
        return check_configuration(self._settings)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _require_owner(owner_id: str | None) -> str:
        if not owner_id:
            raise Unauthenticated()
        return owner_id

    @staticmethod
    def _require_session_id(session_id: str | None) -> None:
        if not session_id:
            raise InvalidRequest("No session found. Please initialize a session first.")

    async def _bind_session(
        self,
        owner_id: str,
        session_id: str | None,
        actor_id: str,
        now: datetime,
    ) -> str:
        """
        Bind a session id to this caller and return it.

        A supplied id is claimed atomically when unknown and refreshed when
        already owned by the caller. An id bound to another user, including
        one claimed concurrently, is never rebound: a fresh id is minted.
        """
        def record_for(sid: str) -> SessionRecord:
            return SessionRecord(
                session_id=sid,
                owner_id=owner_id,
                external_actor_id=actor_id,
                created_at=now,
            )

        if session_id:
            if await self._store.claim(record_for(session_id)):
                return session_id

            existing = await self._store.get(session_id)
            if existing is not None and existing.owner_id == owner_id:
                await self._store.create(record_for(session_id))
                return session_id

            logger.warning(
                f"Security: user {owner_id} presented session {session_id} "
                f"bound to another user; issuing a fresh session id"
            )

        fresh_id = new_session_id()
        await self._store.create(record_for(fresh_id))
        return fresh_id

    async def _load_owned(self, owner_id: str, session_id: str) -> SessionRecord:
        """Load a session and verify the caller owns it."""
        record = await self._store.get(session_id)

        if record is None:
            raise SessionNotFound(session_id)

        if record.owner_id != owner_id:
            logger.warning(
                f"Security: ownership violation on session {session_id} "
                f"(caller: {owner_id}, owner: {record.owner_id})"
            )
            raise OwnershipViolation(session_id)

        return record

    @staticmethod
    async def _send(
        failure_message: str,
        call: Awaitable[httpx.Response],
    ) -> httpx.Response:
        """Await an outbound call, mapping exhausted retries to TransportFailure."""
        try:
            return await call
        except httpx.TransportError as e:
            raise TransportFailure(failure_message, cause=e) from e

    def _raise_for_status(
        self,
        response: httpx.Response,
        failure_message: str,
        owner_id: str,
    ) -> None:
        if response.is_success:
            return

        body = self._json(response)
        logger.error(
            f"{failure_message}: user={owner_id}, status={response.status_code}, "
            f"reason={response.reason_phrase}, error={body}"
        )
        raise UpstreamError(failure_message, status_code=response.status_code, body=body)

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {}
