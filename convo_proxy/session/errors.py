"""
Session Errors

Failure taxonomy of the conversation proxy. Each error carries the HTTP
status the API surface answers with and a stable machine-readable code.
"""

from typing import Any

from convo_proxy.config.guard import ConfigCheck


class ProxyError(Exception):
    """Base exception for conversation proxy errors."""

    status_code: int = 500
    code: str = "proxy/error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self, include_details: bool = False) -> dict[str, Any]:
        """Serialize for error responses."""
        return {"error": self.message, "code": self.code}


class Unauthenticated(ProxyError):
    """No verified caller identity."""
    status_code = 401
    code = "auth/no-token"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class InvalidRequest(ProxyError):
    """Client-side mistake: missing session id, missing or conflicting input."""
    status_code = 400
    code = "request/invalid"


class SessionNotFound(ProxyError):
    status_code = 404
    code = "session/not-found"

    def __init__(self, session_id: str):
        super().__init__("Session not found. Please initialize a session first.")
        self.session_id = session_id


class OwnershipViolation(ProxyError):
    """The session exists but belongs to another user."""
    status_code = 403
    code = "session/forbidden"

    def __init__(self, session_id: str):
        super().__init__("Invalid session")
        self.session_id = session_id


class Misconfigured(ProxyError):
    """Runtime credentials are missing or unusable; no call was attempted."""
    status_code = 500
    code = "config/invalid"

    def __init__(self, check: ConfigCheck):
        super().__init__("Voiceflow service not configured properly")
        self.check = check

    def to_dict(self, include_details: bool = False) -> dict[str, Any]:
        data = super().to_dict(include_details)
        data["problem"] = self.check.problem.value if self.check.problem else None
        data["message"] = self.check.message
        data["instructions"] = list(self.check.instructions)
        return data


class UpstreamError(ProxyError):
    """The runtime answered with a non-2xx status."""
    code = "upstream/error"

    def __init__(self, message: str, status_code: int, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def to_dict(self, include_details: bool = False) -> dict[str, Any]:
        data = super().to_dict(include_details)
        if include_details:
            data["details"] = self.body
        return data


class TransportFailure(ProxyError):
    """The runtime could not be reached after all retries."""
    status_code = 502
    code = "upstream/unreachable"

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause

    def to_dict(self, include_details: bool = False) -> dict[str, Any]:
        data = super().to_dict(include_details)
        if include_details and self.cause is not None:
            data["details"] = str(self.cause) or repr(self.cause)
        return data
