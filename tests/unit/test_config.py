"""Unit tests for core configuration."""

import os

from beacon.core.config import Settings, get_settings, settings


def test_settings_initialization():
    """Test settings are initialized properly."""
    assert settings.APP_NAME == "Beacon Policy Service"
    assert settings.APP_VERSION == "1.0.0"
    assert get_settings() is settings


def test_settings_read_from_test_environment():
    """conftest sets these before beacon is imported."""
    assert settings.ENVIRONMENT == "test"
    assert settings.is_sqlite
    assert settings.AI_BACKEND == "ollama"
    assert settings.AI_TEMPERATURE == 0.0


def test_settings_directories_created():
    assert settings.LOG_DIR.exists()


def test_settings_environment_defaults():
    """Test default environment values."""
    assert os.getenv("HOST", "0.0.0.0") == settings.HOST
    assert int(os.getenv("PORT", "3000")) == settings.PORT


def test_policy_defaults():
    assert settings.DEFAULT_RULE_PROMPT == "Block social media and news."
    assert settings.AI_BODY_SNIPPET_CHARS == 1500
    assert settings.STORE_TIMEOUT > 0


def test_allowed_origins_parsed_from_env(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "chrome-extension://abc, https://beaconblocker.com ,")

    fresh = Settings()

    assert fresh.ALLOWED_ORIGINS == ["chrome-extension://abc", "https://beaconblocker.com"]


def test_allowed_origins_default_is_permissive(monkeypatch):
    monkeypatch.delenv("ALLOWED_ORIGINS", raising=False)

    assert Settings().ALLOWED_ORIGINS == ["*"]


def test_validate_required_flags_unknown_backend():
    config = Settings()
    config.AI_BACKEND = "openai"

    issues = config.validate_required()

    assert any("AI_BACKEND" in issue for issue in issues)


def test_validate_required_flags_missing_gemini_key():
    config = Settings()
    config.AI_BACKEND = "gemini"
    config.GEMINI_API_KEY = ""

    issues = config.validate_required()

    assert any("GEMINI_API_KEY" in issue for issue in issues)


def test_validate_required_clean_for_test_setup():
    config = Settings()
    config.AI_BACKEND = "ollama"

    assert config.validate_required() == []
