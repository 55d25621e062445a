"""
Caller Authentication

The proxy does not authenticate users itself. An Authenticator resolves the
verified caller identity for a request; routes depend on get_owner_id and
never run without one.
"""

import logging
from abc import ABC, abstractmethod

from fastapi import Request

from convo_proxy.session.errors import Unauthenticated

logger = logging.getLogger(__name__)


class Authenticator(ABC):
    """Resolves the authenticated user id for a request."""

    @abstractmethod
    async def authenticate(self, request: Request) -> str | None:
        """
        Args:
            request: Incoming request

        Returns:
            The caller's user id, or None if the request is not authenticated
        """
        ...


class HeaderAuthenticator(Authenticator):
    """
    Trusts an identity header injected by the fronting identity proxy.

    Only safe when the proxy strips the header from client traffic.
    """

    def __init__(self, header_name: str = "X-Authenticated-User"):
        self._header_name = header_name

    async def authenticate(self, request: Request) -> str | None:
        value = request.headers.get(self._header_name, "").strip()
        return value or None


async def get_owner_id(request: Request) -> str:
    """FastAPI dependency returning the authenticated caller id."""
    authenticator: Authenticator = request.app.state.authenticator
    owner_id = await authenticator.authenticate(request)

    if not owner_id:
        logger.warning(
            f"Authentication failed: {request.method} {request.url.path} "
            f"from {request.client.host if request.client else 'unknown'}"
        )
        raise Unauthenticated()

    return owner_id
