"""
Centralized Configuration System
Environment-aware settings for the signal pipeline, storage and alerting.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    """
    Loads from environment variables with sensible defaults.
    Every field can be overridden by its upper-case env var (e.g. MONGODB_URI).
    """

    # ============================================
    # STORAGE
    # ============================================
    storage_backend: Literal["mongodb", "memory"] = "mongodb"
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "lead_signals"
    mongodb_max_pool_size: int = 50
    mongodb_min_pool_size: int = 5
    mongodb_server_selection_timeout_ms: int = 5000

    # ============================================
    # SCORING & EXTRACTION
    # ============================================
    hot_lead_threshold: int = 40        # Alert threshold for tenants that set none
    signal_rules_path: Optional[str] = None  # JSON rule table; built-in table if unset
    recent_events_limit: int = 50

    # ============================================
    # ALERTING
    # ============================================
    alert_throttle_minutes: int = 30
    business_timezone: str = "UTC"      # Fallback when a tenant has no timezone
    default_phone_region: str = "US"
    alert_transport: Literal["auto", "twilio", "slack", "log"] = "auto"

    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_alert_from: Optional[str] = None

    slack_alert_webhook_url: Optional[str] = None

    # ============================================
    # OBSERVABILITY
    # ============================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    enable_structured_logging: bool = False  # Set to True for production JSON logs

    # ============================================
    # ENVIRONMENT
    # ============================================
    environment: Literal["development", "test", "staging", "production"] = "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Singleton pattern for settings.
    Uses LRU cache to ensure only one Settings instance exists.
    """
    return Settings()


# Convenience accessor for common use
settings = get_settings()
