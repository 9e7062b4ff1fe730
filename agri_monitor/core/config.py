"""
Agri Monitor - Configuration
All settings loaded from environment variables
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings

RuleMode = Literal["persist", "advisory", "off"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "postgresql+asyncpg://agri_user:@localhost:5432/agri_db"

    # Logging
    log_level: str = "INFO"

    # MQTT (push of new readings to dashboards)
    mqtt_broker: str = "agri_mqtt"
    mqtt_port: int = 1883
    mqtt_publish_enabled: bool = True

    # Chat assistant (OpenAI-compatible endpoint)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"
    openai_timeout: int = 30

    # Rules that compare against more than the current reading's own fields
    erosion_rule_mode: RuleMode = "advisory"
    tilt_rule_mode: RuleMode = "advisory"

    class Config:
        env_file = ".env"  # Fallback for local development
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
