"""
Pytest configuration and fixtures for conversation proxy tests.

The agent runtime is replaced by a scripted RuntimeStub behind
httpx.MockTransport, so no test touches the network.
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from convo_proxy.config import ProxySettings
from convo_proxy.runtime import AgentRuntimeClient, RetryingTransport
from convo_proxy.session import SessionManager
from convo_proxy.storage import InMemorySessionStore
from convo_proxy.transport.app import create_app

VALID_API_KEY = "VF.DM.test1234567890.abcdefghij"
PROJECT_KEY = "test-project-key"
RUNTIME_URL = "https://runtime.test"

TEXT_TRACE = {
    "type": "text",
    "payload": {"message": "Hello! I can help you plan your trip."},
}
SPEAK_TRACE = {
    "type": "speak",
    "payload": {
        "message": "What is your name?",
        "src": "https://voiceflow-tts.example.com/audio/abc123.mp3",
    },
}
PROFILE_DATA_TRACE = {
    "type": "profile_data",
    "payload": {
        "data": {
            "contactInfo": {
                "firstName": "John",
                "lastName": "Doe",
                "email": "john@example.com",
            },
        },
    },
}
END_TRACE = {"type": "end", "payload": {}}

LAUNCH_TRACES = [TEXT_TRACE, SPEAK_TRACE]
INTERACT_TRACES = [
    {"type": "text", "payload": {"message": "Thanks for sharing that information!"}},
    PROFILE_DATA_TRACE,
]
RUNTIME_STATE = {
    "stack": [{"nodeId": "node-1", "type": "block"}],
    "storage": {},
    "variables": {"userName": "John"},
}


class RuntimeStub:
    """
    Scripted agent runtime.

    Queued outcomes are consumed in order; once empty every call answers
    200 with the launch traces. Every request that reaches the runtime is
    recorded, including those that then fail.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._outcomes: list = []

    def reply(self, status_code: int = 200, json=None) -> "RuntimeStub":
        self._outcomes.append((status_code, json))
        return self

    def fail(self, times: int = 1) -> "RuntimeStub":
        for _ in range(times):
            self._outcomes.append(httpx.ConnectError("Network error"))
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self._outcomes.pop(0) if self._outcomes else (200, LAUNCH_TRACES)
        if isinstance(outcome, Exception):
            raise outcome
        status_code, body = outcome
        return httpx.Response(status_code, json=body)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def settings():
    """Settings with valid credentials and no retry delay."""
    return ProxySettings(
        api_key=VALID_API_KEY,
        project_key=PROJECT_KEY,
        runtime_url=RUNTIME_URL,
        environment="test",
        retry_delay_seconds=0.0,
    )


@pytest.fixture
def runtime():
    return RuntimeStub()


@pytest.fixture
def http_client(runtime):
    return httpx.AsyncClient(transport=httpx.MockTransport(runtime.handler))


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def make_manager(store, http_client):
    """Build a SessionManager for given settings, sharing the runtime (and store by default)."""
    shared_store = store

    def _make(settings: ProxySettings, store=None) -> SessionManager:
        transport = RetryingTransport(
            http_client,
            max_retries=settings.max_retries,
            retry_delay_seconds=settings.retry_delay_seconds,
        )
        return SessionManager(
            store=shared_store if store is None else store,
            client=AgentRuntimeClient(transport, settings),
            settings=settings,
        )
    return _make


@pytest.fixture
def manager(make_manager, settings):
    return make_manager(settings)


@pytest.fixture
def make_client(store, http_client):
    """Build a TestClient around an app with the given settings."""
    def _make(settings: ProxySettings) -> TestClient:
        app = create_app(settings=settings, store=store, http_client=http_client)
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client, settings):
    return make_client(settings)


def auth(user_id: str = "test-user-id") -> dict[str, str]:
    """Identity header as injected by the fronting identity proxy."""
    return {"X-Authenticated-User": user_id}
