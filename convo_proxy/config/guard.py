"""
Configuration Guard

Checks the agent runtime credentials before any network call is made.

Checks, in order:
1. API key is present
2. API key is not a placeholder value copied from a template
3. API key has the Dialog Manager prefix and a plausible length
4. Project key is present

Each failure names the precondition that failed and carries ordered
remediation steps, since a missing key, a placeholder key and a malformed
key each need a different operator action.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from convo_proxy.config.settings import ProxySettings

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "VF.DM."
API_KEY_MIN_LENGTH = 20
PLACEHOLDER_MARKER = "XXXX"

DASHBOARD_URL = "https://www.voiceflow.com/dashboard"


class CredentialStatus(str, Enum):
    """Classification of the configured API key."""
    MISSING = "missing"
    PLACEHOLDER = "placeholder"
    INVALID = "invalid"
    VALID = "valid"


class ConfigProblem(str, Enum):
    """Which precondition failed."""
    API_KEY_MISSING = "api_key_missing"
    API_KEY_PLACEHOLDER = "api_key_placeholder"
    API_KEY_MALFORMED = "api_key_malformed"
    PROJECT_KEY_MISSING = "project_key_missing"


@dataclass
class ConfigCheck:
    """
    Result of a configuration check.
    """
    api_key_status: CredentialStatus
    project_key: str | None
    runtime_url: str
    problem: ConfigProblem | None = None
    message: str = "Voiceflow service is ready"
    instructions: list[str] = field(default_factory=list)

    @property
    def is_ok(self) -> bool:
        return self.problem is None

    def to_dict(self) -> dict:
        """Serialize for status responses."""
        return {
            "status": "ready" if self.is_ok else "not_configured",
            "message": self.message,
            "problem": self.problem.value if self.problem else None,
            "configuration": {
                "api_key": self.api_key_status.value,
                "project_key": self.project_key or "missing",
                "runtime_url": self.runtime_url,
            },
            "setup_instructions": self.instructions or None,
        }


def classify_api_key(api_key: str | None) -> CredentialStatus:
    """Classify an API key as missing, placeholder, invalid or valid."""
    if not api_key:
        return CredentialStatus.MISSING
    if PLACEHOLDER_MARKER in api_key:
        return CredentialStatus.PLACEHOLDER
    if not api_key.startswith(API_KEY_PREFIX) or len(api_key) < API_KEY_MIN_LENGTH:
        return CredentialStatus.INVALID
    return CredentialStatus.VALID


def check_configuration(settings: ProxySettings) -> ConfigCheck:
    """
    Validate credentials and identifiers required to reach the runtime.

    Args:
        settings: Proxy settings to check

    Returns:
        ConfigCheck describing the first failed precondition, if any
    """
    key_status = classify_api_key(settings.api_key)
    check = ConfigCheck(
        api_key_status=key_status,
        project_key=settings.project_key,
        runtime_url=settings.runtime_url,
    )

    if key_status == CredentialStatus.MISSING:
        check.problem = ConfigProblem.API_KEY_MISSING
        check.message = "Voiceflow API key not configured"
        check.instructions = [
            f"1. Go to Voiceflow Dashboard ({DASHBOARD_URL})",
            "2. Navigate to Project Settings → API Keys",
            f"3. Copy the Dialog Manager API key (starts with {API_KEY_PREFIX})",
            "4. Set it as VOICEFLOW_API_KEY in the environment or .env file",
            "5. Restart the server",
        ]
    elif key_status == CredentialStatus.PLACEHOLDER:
        check.problem = ConfigProblem.API_KEY_PLACEHOLDER
        check.message = "Voiceflow API key is a placeholder"
        check.instructions = [
            "The configured VOICEFLOW_API_KEY is a placeholder value",
            "Replace it with your real Dialog Manager API key",
            f"Visit {DASHBOARD_URL} → Project Settings → API Keys",
        ]
    elif key_status == CredentialStatus.INVALID:
        check.problem = ConfigProblem.API_KEY_MALFORMED
        check.message = "Voiceflow API key has invalid format"
        check.instructions = [
            f"API keys should start with '{API_KEY_PREFIX}' and be at least "
            f"{API_KEY_MIN_LENGTH} characters",
            "Please verify VOICEFLOW_API_KEY",
        ]
    elif not settings.project_key:
        check.problem = ConfigProblem.PROJECT_KEY_MISSING
        check.message = "Voiceflow project key not configured"
        check.instructions = [
            "Set VOICEFLOW_PROJECT_KEY in the environment or .env file",
            "Use your Voiceflow project ID (found in project URL or settings)",
        ]

    return check


def log_configuration_status(settings: ProxySettings) -> ConfigCheck:
    """Log the configuration check at startup without leaking the key."""
    check = check_configuration(settings)

    if check.api_key_status == CredentialStatus.VALID:
        key_display = f"SET ({settings.api_key[:10]}...)"
    else:
        key_display = check.api_key_status.value.upper()

    logger.info("Voiceflow configuration check:")
    logger.info(f"  API key: {key_display}")
    logger.info(f"  Project key: {settings.project_key or 'MISSING'}")
    logger.info(f"  Runtime URL: {settings.runtime_url}")

    if not check.is_ok:
        logger.warning(f"Voiceflow not configured: {check.message}")

    return check
