"""Application configuration pulled from environment variables via pydantic."""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the AirSense+ service."""
    model_config = SettingsConfigDict(env_prefix="AIRSENSE_", extra="ignore")

    data_source: str = "mock"  # options: mock, live
    http_timeout_seconds: float = 5.0
    geocoding_url: str = "https://geocoding-api.open-meteo.com/v1/search"
    weather_url: str = "https://api.open-meteo.com/v1/forecast"
    openaq_url: str = "https://api.openaq.org/v2/latest"
    openaq_api_key: str | None = None
    api_key: str | None = None
    session_ttl_seconds: int = 3600
    max_user_message_chars: int = 2000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @field_validator("geocoding_url", "weather_url", "openaq_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize endpoint URLs so query strings attach cleanly."""
        return str(v).rstrip("/")

    @field_validator("data_source", mode="after")
    @classmethod
    def lowercase_source(cls, v: str) -> str:
        """Accept MOCK/Live etc. from the environment."""
        return str(v).strip().lower()


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
