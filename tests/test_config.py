"""
Tests for settings and logging setup.
"""

import pytest
import structlog
from pydantic import ValidationError

from ranging_broker.config import Settings, get_settings
from ranging_broker.observability.logging import configure_logging


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("RANGING_DIRECTORY_URL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.directory_url == "https://interaction.moutend.workers.dev"
        assert settings.request_timeout_seconds == 10.0
        assert settings.log_level == "INFO"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("RANGING_DIRECTORY_URL", "http://localhost:8787")
        monkeypatch.setenv("RANGING_REQUEST_TIMEOUT_SECONDS", "2.5")

        settings = Settings(_env_file=None)

        assert settings.directory_url == "http://localhost:8787"
        assert settings.request_timeout_seconds == 2.5

    def test_rejects_non_positive_timeout(self, monkeypatch):
        monkeypatch.setenv("RANGING_REQUEST_TIMEOUT_SECONDS", "0")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestLogging:
    """Tests for configure_logging()."""

    @pytest.mark.parametrize("level", ["DEBUG", "INFO"])
    def test_configures_structlog(self, level):
        configure_logging(level)

        assert structlog.is_configured()
        structlog.reset_defaults()
