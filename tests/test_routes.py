"""
Tests for the HTTP surface: cookies, authentication and error mapping.
"""
from fastapi import Request
from fastapi.testclient import TestClient

from convo_proxy.config import ProxySettings
from convo_proxy.transport.app import create_app
from convo_proxy.transport.auth import Authenticator
from convo_proxy.transport.routes import SESSION_COOKIE_NAME

from conftest import INTERACT_TRACES, RUNTIME_STATE, auth


def start_session(client, user_id: str = "test-user-id") -> str:
    response = client.post("/api/voiceflow/session", headers=auth(user_id))
    assert response.status_code == 200
    return response.json()["session_id"]


class TestCreateSession:
    def test_sets_http_only_cookie(self, client):
        response = client.post("/api/voiceflow/session", headers=auth())

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {
            "session_id", "external_actor_id", "expires_at",
            "messages", "audio_refs", "extracted_data",
        }
        assert data["external_actor_id"] == "user_test-user-id"
        assert len(data["messages"]) == len(data["audio_refs"]) == 2

        cookie = response.headers["set-cookie"]
        assert f"{SESSION_COOKIE_NAME}={data['session_id']}" in cookie
        assert "HttpOnly" in cookie
        assert "samesite=lax" in cookie.lower()
        assert "Max-Age=604800" in cookie
        assert "Secure" not in cookie

    def test_reuses_session_cookie(self, client):
        first = start_session(client)
        second = start_session(client)

        assert first == second

    def test_requires_authentication(self, client, runtime):
        response = client.post("/api/voiceflow/session")

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required", "code": "auth/no-token"}
        assert runtime.call_count == 0

    def test_misconfigured_reports_setup_steps(self, make_client, settings, runtime):
        client = make_client(settings.model_copy(update={"api_key": "VF.DM.XXXXXXXXXXXXXXXX"}))

        response = client.post("/api/voiceflow/session", headers=auth())

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Voiceflow service not configured properly"
        assert data["problem"] == "api_key_placeholder"
        assert data["instructions"]
        assert "set-cookie" not in response.headers
        assert runtime.call_count == 0

    def test_upstream_details_hidden_in_production(self, make_client, settings, runtime):
        client = make_client(settings.model_copy(update={"environment": "production"}))
        runtime.reply(401, {"message": "Invalid API key"})

        response = client.post("/api/voiceflow/session", headers=auth())

        assert response.status_code == 401
        assert response.json() == {
            "error": "Failed to initialize Voiceflow session",
            "code": "upstream/error",
        }

    def test_details_hidden_by_default(self, make_client, settings, runtime):
        client = make_client(ProxySettings(**settings.model_dump(exclude={"environment"})))
        runtime.reply(401, {"message": "Invalid API key VF.DM.secret"})

        response = client.post("/api/voiceflow/session", headers=auth())

        assert response.status_code == 401
        assert "details" not in response.json()
        assert "VF.DM.secret" not in response.text

    def test_details_hidden_in_test_environment(self, client, runtime):
        runtime.reply(401, {"message": "Invalid API key VF.DM.secret"})

        response = client.post("/api/voiceflow/session", headers=auth())

        assert "details" not in response.json()

    def test_unreachable_runtime_is_bad_gateway(self, make_client, settings, runtime):
        client = make_client(settings.model_copy(update={"environment": "development"}))
        runtime.fail(times=3)

        response = client.post("/api/voiceflow/session", headers=auth())

        assert response.status_code == 502
        assert response.json()["code"] == "upstream/unreachable"
        assert response.json()["details"] == "Network error"

    def test_transport_details_hidden_in_production(self, make_client, settings, runtime):
        client = make_client(settings.model_copy(update={"environment": "production"}))
        runtime.fail(times=3)

        response = client.post("/api/voiceflow/session", headers=auth())

        assert response.status_code == 502
        assert response.json() == {
            "error": "Failed to create Voiceflow session",
            "code": "upstream/unreachable",
        }

    def test_cookie_secure_in_production(self, make_client, settings):
        client = make_client(settings.model_copy(update={"environment": "production"}))

        response = client.post("/api/voiceflow/session", headers=auth())

        assert response.status_code == 200
        cookie = response.headers["set-cookie"]
        assert "Secure" in cookie
        assert "HttpOnly" in cookie


class TestInteract:
    def test_message(self, client, runtime):
        start_session(client)
        runtime.reply(200, INTERACT_TRACES)

        response = client.post(
            "/api/voiceflow/interact",
            headers=auth(),
            json={"message": "My name is John Doe"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["messages"] == ["Thanks for sharing that information!"]
        assert data["extracted_data"]["contactInfo"]["firstName"] == "John"
        assert data["is_complete"] is False
        assert data["traces"] == INTERACT_TRACES

    def test_without_cookie(self, client, runtime):
        response = client.post("/api/voiceflow/interact", headers=auth(), json={"message": "hi"})

        assert response.status_code == 400
        assert response.json()["error"] == "No session found. Please initialize a session first."
        assert runtime.call_count == 0

    def test_empty_body(self, client, runtime):
        start_session(client)
        calls_before = runtime.call_count

        response = client.post("/api/voiceflow/interact", headers=auth(), json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Either message or action is required"
        assert runtime.call_count == calls_before

    def test_non_object_action_is_client_error(self, client, runtime):
        start_session(client)
        calls_before = runtime.call_count

        response = client.post("/api/voiceflow/interact", headers=auth(), json={"action": "launch"})

        assert response.status_code == 400
        assert response.json() == {"error": "Action must be an object", "code": "request/invalid"}
        assert runtime.call_count == calls_before

    def test_malformed_body_uses_proxy_error_shape(self, client, runtime):
        start_session(client)
        calls_before = runtime.call_count

        response = client.post("/api/voiceflow/interact", headers=auth(), json={"message": ["hi"]})

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "request/invalid"
        assert "message" in data["error"]
        assert "detail" not in data
        assert runtime.call_count == calls_before

    def test_other_users_session_is_forbidden(self, client, runtime):
        start_session(client, "alice")
        calls_before = runtime.call_count

        response = client.post(
            "/api/voiceflow/interact",
            headers=auth("mallory"),
            json={"message": "hijack"},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Invalid session"
        assert runtime.call_count == calls_before

    def test_forged_cookie_is_not_found(self, client):
        client.cookies.set(SESSION_COOKIE_NAME, "forged-session-id")

        response = client.post("/api/voiceflow/interact", headers=auth(), json={"message": "hi"})

        assert response.status_code == 404

    def test_upstream_status_forwarded_with_details(self, make_client, settings, runtime):
        client = make_client(settings.model_copy(update={"environment": "development"}))
        start_session(client)
        runtime.reply(429, {"message": "Too many requests"})

        response = client.post("/api/voiceflow/interact", headers=auth(), json={"message": "hi"})

        assert response.status_code == 429
        assert response.json() == {
            "error": "Failed to send message to Voiceflow",
            "code": "upstream/error",
            "details": {"message": "Too many requests"},
        }


class TestState:
    def test_returns_runtime_state(self, client, runtime):
        start_session(client)
        runtime.reply(200, RUNTIME_STATE)

        response = client.get("/api/voiceflow/state", headers=auth())

        assert response.status_code == 200
        assert response.json() == {"state": RUNTIME_STATE}

    def test_without_cookie(self, client):
        response = client.get("/api/voiceflow/state", headers=auth())
        assert response.status_code == 400


class TestDeleteSession:
    def test_deletes_and_clears_cookie(self, client, runtime, store):
        start_session(client)
        runtime.reply(200, {})

        response = client.delete("/api/voiceflow/session", headers=auth())

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Session deleted successfully",
            "remote_deleted": True,
        }
        assert "max-age=0" in response.headers["set-cookie"].lower()
        assert len(store) == 0

    def test_failure_still_clears_cookie(self, client, runtime, store):
        start_session(client)
        runtime.fail(times=3)

        response = client.delete("/api/voiceflow/session", headers=auth())

        assert response.status_code == 502
        assert "max-age=0" in response.headers["set-cookie"].lower()
        assert len(store) == 0

    def test_without_cookie(self, client):
        response = client.delete("/api/voiceflow/session", headers=auth())

        assert response.status_code == 400
        assert "max-age=0" in response.headers["set-cookie"].lower()


class TestStatusAndHealth:
    def test_status_ready(self, client):
        response = client.get("/api/voiceflow/status", headers=auth())

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["configuration"]["api_key"] == "valid"
        assert data["setup_instructions"] is None

    def test_status_requires_authentication(self, client):
        assert client.get("/api/voiceflow/status").status_code == 401

    def test_status_not_configured(self, make_client, settings):
        client = make_client(settings.model_copy(update={"project_key": None}))

        data = client.get("/api/voiceflow/status", headers=auth()).json()

        assert data["status"] == "not_configured"
        assert data["problem"] == "project_key_missing"
        assert data["configuration"]["project_key"] == "missing"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"] == "InMemorySessionStore"
        assert data["configured"] is True


class FixedAuthenticator(Authenticator):
    def __init__(self, user_id: str | None):
        self.user_id = user_id

    async def authenticate(self, request: Request) -> str | None:
        return self.user_id


def test_custom_authenticator(settings, store, http_client):
    app = create_app(
        settings=settings,
        store=store,
        http_client=http_client,
        authenticator=FixedAuthenticator("sso-user"),
    )
    client = TestClient(app)

    response = client.post("/api/voiceflow/session")

    assert response.status_code == 200
    assert response.json()["external_actor_id"] == "user_sso-user"
