"""Settings loading and startup validation tests."""

from pathlib import Path

import pytest
import yaml

from clipforge import DEFAULT_SESSION_SECRET, missing_credentials, validate_configuration
from clipforge.config import Settings

FULL_CREDENTIALS = {
    "google": {"api_key": "g"},
    "openai": {"api_key": "o"},
    "edenai": {"api_key": "e"},
    "render": {"api_key": "r"},
    "hosting": {"bucket": "media"},
}


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CLIPFORGE_RENDER__POLL_MAX_ATTEMPTS", "7")
    monkeypatch.setenv("CLIPFORGE_OPENAI__TTS_VOICE", "nova")

    settings = Settings()

    assert settings.render.poll_max_attempts == 7
    assert settings.openai.tts_voice == "nova"
    assert settings.render.poll_interval == 2.0


def test_defaults():
    settings = Settings()

    assert settings.pipeline.tts_max_chars == 4096
    assert settings.render.poll_max_attempts == 30
    assert settings.server.session_max_age == 24 * 60 * 60


def test_development_tolerates_missing_credentials():
    settings = Settings(environment="development", **{k: {} for k in FULL_CREDENTIALS})

    assert missing_credentials(settings)
    validate_configuration(settings)


def test_production_requires_credentials():
    settings = Settings(environment="production", server={"session_secret": "s3cret"})

    with pytest.raises(RuntimeError, match="openai.api_key"):
        validate_configuration(settings)


def test_production_rejects_default_secret():
    settings = Settings(
        environment="production",
        server={"session_secret": DEFAULT_SESSION_SECRET},
        **FULL_CREDENTIALS,
    )

    with pytest.raises(RuntimeError, match="session_secret"):
        validate_configuration(settings)


@pytest.mark.parametrize("secret", ["change-me", "", "   ", "secret"])
def test_production_rejects_empty_or_example_secret(secret):
    settings = Settings(environment="production", server={"session_secret": secret}, **FULL_CREDENTIALS)

    with pytest.raises(RuntimeError, match="session_secret"):
        validate_configuration(settings)


def test_example_config_is_not_deployable_as_is():
    example = yaml.safe_load((Path(__file__).parents[2] / "config.example.yaml").read_text())
    settings = Settings(environment="production", server=example["server"], **FULL_CREDENTIALS)

    with pytest.raises(RuntimeError, match="session_secret"):
        validate_configuration(settings)


def test_production_fully_configured():
    settings = Settings(environment="production", server={"session_secret": "s3cret"}, **FULL_CREDENTIALS)

    assert missing_credentials(settings) == []
    validate_configuration(settings)


def test_vertex_project_counts_as_google_credentials():
    settings = Settings(
        **{**FULL_CREDENTIALS, "google": {"use_vertex_ai": True, "project_id": "proj"}},
    )

    assert "google.api_key" not in missing_credentials(settings)
