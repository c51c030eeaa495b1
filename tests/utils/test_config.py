"""
Tests for centralized configuration system.
Verifies environment variable loading and default values.
"""
import pytest
from pydantic import ValidationError

from lead_signals.config import Settings, get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestConfigurationSystem:

    def test_default_values(self):
        settings = Settings(_env_file=None)

        assert settings.storage_backend in ["mongodb", "memory"]
        assert settings.hot_lead_threshold == 40
        assert settings.alert_throttle_minutes == 30
        assert settings.business_timezone == "UTC"
        assert settings.default_phone_region == "US"
        assert settings.signal_rules_path is None
        assert settings.log_level == "INFO"
        assert settings.enable_structured_logging is False

    def test_environment_variable_override(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("ALERT_THROTTLE_MINUTES", "15")
        monkeypatch.setenv("ALERT_TRANSPORT", "slack")
        monkeypatch.setenv("SLACK_ALERT_WEBHOOK_URL", "https://hooks.slack.com/services/T/B/X")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = get_settings()

        assert settings.storage_backend == "memory"
        assert settings.alert_throttle_minutes == 15
        assert settings.alert_transport == "slack"
        assert settings.log_level == "DEBUG"

    def test_settings_singleton(self):
        assert get_settings() is get_settings()

    def test_invalid_backend_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, storage_backend="redis")
