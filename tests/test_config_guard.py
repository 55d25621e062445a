"""
Tests for settings loading and the configuration guard.
"""
import logging

import pytest
from pydantic import ValidationError

from convo_proxy.config import (
    ConfigProblem,
    CredentialStatus,
    ProxySettings,
    check_configuration,
    classify_api_key,
    log_configuration_status,
    settings_from_env,
)

from conftest import PROJECT_KEY, VALID_API_KEY


def make_settings(**overrides) -> ProxySettings:
    values = {"api_key": VALID_API_KEY, "project_key": PROJECT_KEY}
    values.update(overrides)
    return ProxySettings(**values)


class TestClassifyApiKey:
    @pytest.mark.parametrize("api_key", [None, ""])
    def test_missing(self, api_key):
        assert classify_api_key(api_key) == CredentialStatus.MISSING

    def test_placeholder(self):
        assert classify_api_key("VF.DM.XXXXXXXXXXXXXXXXXXXX") == CredentialStatus.PLACEHOLDER

    def test_wrong_prefix(self):
        assert classify_api_key("sk-1234567890abcdefghijkl") == CredentialStatus.INVALID

    def test_too_short(self):
        assert classify_api_key("VF.DM.short") == CredentialStatus.INVALID

    def test_valid(self):
        assert classify_api_key(VALID_API_KEY) == CredentialStatus.VALID


class TestCheckConfiguration:
    def test_ready(self):
        check = check_configuration(make_settings())

        assert check.is_ok
        assert check.problem is None
        assert check.to_dict()["status"] == "ready"

    def test_missing_key(self):
        check = check_configuration(make_settings(api_key=None))

        assert check.problem == ConfigProblem.API_KEY_MISSING
        assert check.api_key_status == CredentialStatus.MISSING
        assert any("VOICEFLOW_API_KEY" in step for step in check.instructions)
        assert check.instructions[0].startswith("1.")

    def test_placeholder_key(self):
        check = check_configuration(make_settings(api_key="VF.DM.XXXX-your-key-here"))

        assert check.problem == ConfigProblem.API_KEY_PLACEHOLDER
        assert check.message == "Voiceflow API key is a placeholder"

    def test_malformed_key(self):
        check = check_configuration(make_settings(api_key="not-a-voiceflow-key-at-all"))

        assert check.problem == ConfigProblem.API_KEY_MALFORMED
        assert "VF.DM." in check.instructions[0]

    def test_key_checked_before_project(self):
        check = check_configuration(make_settings(api_key=None, project_key=None))
        assert check.problem == ConfigProblem.API_KEY_MISSING

    def test_missing_project_key(self):
        check = check_configuration(make_settings(project_key=None))

        assert check.problem == ConfigProblem.PROJECT_KEY_MISSING
        assert any("VOICEFLOW_PROJECT_KEY" in step for step in check.instructions)

    def test_status_dict(self):
        data = check_configuration(make_settings(api_key="VF.DM.XXXX")).to_dict()

        assert data["status"] == "not_configured"
        assert data["problem"] == "api_key_placeholder"
        assert data["configuration"]["api_key"] == "placeholder"
        assert data["configuration"]["project_key"] == PROJECT_KEY
        assert data["setup_instructions"]


class TestSettings:
    def test_version_id_fallbacks(self):
        assert make_settings().effective_version_id == PROJECT_KEY
        assert make_settings(project_key=None, version_id="v2").effective_version_id == "v2"
        assert make_settings(project_key=None).effective_version_id == "production"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("VOICEFLOW_API_KEY", VALID_API_KEY)
        monkeypatch.setenv("VOICEFLOW_PROJECT_KEY", PROJECT_KEY)
        monkeypatch.setenv("VOICEFLOW_RUNTIME_URL", "https://runtime.example.com/")
        monkeypatch.setenv("CONVO_ENV", "production")
        monkeypatch.setenv("CONVO_MAX_RETRIES", "4")

        settings = settings_from_env()

        assert settings.api_key == VALID_API_KEY
        assert settings.runtime_url == "https://runtime.example.com"
        assert settings.is_production
        assert settings.max_retries == 4
        assert settings.retry_delay_seconds == 1.0

    def test_from_env_treats_empty_as_missing(self, monkeypatch):
        monkeypatch.setenv("VOICEFLOW_API_KEY", "")
        monkeypatch.delenv("VOICEFLOW_PROJECT_KEY", raising=False)

        settings = settings_from_env()

        assert settings.api_key is None
        assert check_configuration(settings).problem == ConfigProblem.API_KEY_MISSING

    def test_environment_defaults_to_production(self, monkeypatch):
        monkeypatch.delenv("CONVO_ENV", raising=False)

        settings = settings_from_env()

        assert settings.is_production
        assert not settings.diagnostics_enabled

    def test_diagnostics_only_in_development(self):
        assert make_settings(environment="development").diagnostics_enabled
        assert not make_settings(environment="test").diagnostics_enabled
        assert not make_settings(environment="production").diagnostics_enabled

    def test_unknown_environment_is_rejected(self, monkeypatch):
        monkeypatch.setenv("CONVO_ENV", "staging")

        with pytest.raises(ValidationError):
            settings_from_env()

    def test_environment_name_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("CONVO_ENV", "Development")

        assert settings_from_env().diagnostics_enabled


def test_startup_log_never_prints_full_key(caplog):
    with caplog.at_level(logging.INFO, logger="convo_proxy.config.guard"):
        log_configuration_status(make_settings())

    assert VALID_API_KEY[:10] in caplog.text
    assert VALID_API_KEY not in caplog.text
