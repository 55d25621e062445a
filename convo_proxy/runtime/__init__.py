# Agent Runtime
# Outbound calls to the conversational-agent service

from convo_proxy.runtime.retry import (
    RetryingTransport,
    MAX_RETRIES,
    RETRY_DELAY_SECONDS,
)
from convo_proxy.runtime.client import AgentRuntimeClient, text_action

__all__ = [
    "RetryingTransport",
    "MAX_RETRIES",
    "RETRY_DELAY_SECONDS",
    "AgentRuntimeClient",
    "text_action",
]
