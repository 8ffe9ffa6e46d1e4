"""Application configuration using Pydantic settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Realtime provider
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_realtime_ws_url: str = "wss://api.openai.com/v1/realtime"
    realtime_model: str = "gpt-4o-realtime-preview"
    realtime_voice: str = "alloy"
    realtime_instructions: str = (
        "You are a professional interviewer conducting a realistic mock interview. "
        "Ask one question at a time and follow up on the candidate's answers."
    )

    # Server Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Auth
    token_secret: str = "vocahire_dev_secret_key_change_in_production"
    token_expiry_hours: int = 24 * 7
    enable_dev_login: bool = False

    # Session timing (seconds unless noted)
    session_timeout_seconds: int = 30 * 60
    cleanup_interval_seconds: int = 60
    prefetch_timeout_seconds: float = 20.0
    session_expiry_minutes: int = 60

    ice_servers: list[dict] = [{"urls": "stun:stun.l.google.com:19302"}]

    # Data Storage
    session_data_path: Path = Path("./session_data")

    def ensure_data_dirs(self) -> None:
        """Ensure required data directories exist."""
        self.session_data_path.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    settings = Settings()
    settings.ensure_data_dirs()
    return settings
