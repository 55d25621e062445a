# Conversation Proxy - session broker for a conversational-agent runtime
# Brokers session identity, retries transient failures, enforces session
# ownership and normalizes agent traces for the travel-profile application

__version__ = "0.1.0"

# Re-export commonly used components for convenience
from convo_proxy.session import (
    SessionManager,
    ProxyError,
)
from convo_proxy.trace import (
    NormalizedTrace,
    normalize_traces,
    parse_traces,
)
from convo_proxy.storage import (
    SessionStore,
    SessionRecord,
    InMemorySessionStore,
)

__all__ = [
    "__version__",
    # Sessions
    "SessionManager",
    "ProxyError",
    # Traces
    "NormalizedTrace",
    "normalize_traces",
    "parse_traces",
    # Storage
    "SessionStore",
    "SessionRecord",
    "InMemorySessionStore",
]
