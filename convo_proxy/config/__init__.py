# Configuration
# Settings loading and credential checks for the agent runtime

from convo_proxy.config.settings import ProxySettings, settings_from_env
from convo_proxy.config.guard import (
    ConfigCheck,
    ConfigProblem,
    CredentialStatus,
    check_configuration,
    classify_api_key,
    log_configuration_status,
)

__all__ = [
    "ProxySettings",
    "settings_from_env",
    "ConfigCheck",
    "ConfigProblem",
    "CredentialStatus",
    "check_configuration",
    "classify_api_key",
    "log_configuration_status",
]
