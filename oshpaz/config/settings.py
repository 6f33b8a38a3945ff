"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "Oshpaz AI"
    app_version: str = "1.0.0"
    debug: bool = True

    # Security
    secret_key: str = "your-secret-key-change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days
    telegram_init_data_max_age_seconds: int = 60 * 60 * 24

    # Storage
    storage_type: str = "local"
    local_storage_path: str = "./data"

    # LLM Provider settings
    llm_provider: str = "openai"  # "openai" or "volcengine"
    llm_api_key: Optional[str] = None
    llm_model: Optional[str] = None  # uses provider default if not set
    llm_base_url: Optional[str] = None  # uses provider default if not set

    # Legacy key (still accepted, also used for Whisper transcription)
    openai_api_key: Optional[str] = None

    # Telegram bot
    telegram_bot_token: Optional[str] = None
    telegram_webhook_secret: Optional[str] = None
    mini_app_url: str = ""
    bot_username: str = "oshpaz_ai_bot"
    admin_tg_ids: list[str] = []

    # Domain
    reference_timezone: str = "Asia/Tashkent"
    default_calorie_goal: int = 2000
    free_daily_scan_limit: int = 3

    # Reminders
    reminders_enabled: bool = True
    reminder_poll_interval_seconds: float = 30.0

    # Social
    leaderboard_cache_ttl_seconds: float = 5 * 60

    # CORS
    cors_origins: list[str] = ["*"]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/oshpaz.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True  # Log all API requests/responses
    log_llm_calls: bool = True  # Log all LLM calls with token usage

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
