# Transport Layer
# FastAPI surface of the conversation proxy

from convo_proxy.transport.auth import Authenticator, HeaderAuthenticator, get_owner_id
from convo_proxy.transport.routes import SESSION_COOKIE_NAME, router

__all__ = [
    "Authenticator",
    "HeaderAuthenticator",
    "get_owner_id",
    "SESSION_COOKIE_NAME",
    "router",
]
