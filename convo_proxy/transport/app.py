"""
Conversation Proxy Application

FastAPI application exposing the conversation session routes.
This is the main entry point for running the proxy:

    uvicorn convo_proxy.transport.app:app

Agent runtime connection is configured via environment variables:
- VOICEFLOW_API_KEY: Dialog Manager API key (starts with VF.DM.)
- VOICEFLOW_PROJECT_KEY: Project identifier (sent as versionID)
- VOICEFLOW_VERSION: Fallback versionID (default: "production")
- VOICEFLOW_RUNTIME_URL: Runtime base URL

Proxy behaviour:
- CONVO_ENV: "development", "test" or "production" (default; error details only in development)
- CONVO_AUTH_HEADER: Identity header set by the fronting identity proxy
- CONVO_HTTP_TIMEOUT, CONVO_MAX_RETRIES, CONVO_RETRY_DELAY: Outbound call tuning

Session storage:
- CONVO_STORAGE_BACKEND: "memory" or "redis"
- CONVO_REDIS_URL, CONVO_KEY_PREFIX, CONVO_SESSION_TTL

Environment variables can be loaded from a .env file in the project root.
"""

import logging
from contextlib import asynccontextmanager

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

# Load environment variables from .env file
load_dotenv()

from convo_proxy import __version__
from convo_proxy.config import ProxySettings, log_configuration_status, settings_from_env
from convo_proxy.runtime import AgentRuntimeClient, RetryingTransport
from convo_proxy.session import InvalidRequest, ProxyError, SessionManager
from convo_proxy.storage import SessionStore, create_session_store_from_env
from convo_proxy.transport.auth import Authenticator, HeaderAuthenticator
from convo_proxy.transport.routes import error_response, router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Reports the runtime configuration at startup and releases outbound
    resources at shutdown.
    """
    logger.info("Starting conversation proxy...")
    log_configuration_status(app.state.settings)
    logger.info(f"Session store: {type(app.state.store).__name__}")

    yield

    logger.info("Shutting down conversation proxy...")
    await app.state.http_client.aclose()
    await app.state.store.close()
    logger.info("Conversation proxy stopped")


async def proxy_error_handler(request: Request, exc: ProxyError):
    return error_response(exc, request.app.state.settings)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Render malformed request bodies in the proxy error shape."""
    fields = ", ".join(".".join(str(p) for p in error["loc"]) for error in exc.errors())
    logger.warning(f"Rejected request to {request.url.path}: invalid {fields}")
    return error_response(
        InvalidRequest(f"Invalid request: {fields}"),
        request.app.state.settings,
    )


def create_app(
    settings: ProxySettings | None = None,
    store: SessionStore | None = None,
    authenticator: Authenticator | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """
    Build the application with its collaborators.

    Anything not supplied is created from the environment.

    Args:
        settings: Proxy settings
        store: Session store
        authenticator: Caller identity resolver
        http_client: Client for outbound runtime calls
    """
    settings = settings or settings_from_env()
    store = store or create_session_store_from_env()
    authenticator = authenticator or HeaderAuthenticator(settings.auth_header)
    http_client = http_client or httpx.AsyncClient(timeout=settings.http_timeout)

    transport = RetryingTransport(
        http_client,
        max_retries=settings.max_retries,
        retry_delay_seconds=settings.retry_delay_seconds,
    )
    session_manager = SessionManager(
        store=store,
        client=AgentRuntimeClient(transport, settings),
        settings=settings,
    )

    app = FastAPI(
        title="Conversation Proxy",
        description="Session broker and trace normalizer for the conversational-agent runtime",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.authenticator = authenticator
    app.state.http_client = http_client
    app.state.session_manager = session_manager

    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "store": type(store).__name__,
            "configured": session_manager.configuration_status().is_ok,
        }

    return app


app = create_app()
