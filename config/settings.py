"""
Centralized configuration for Barista Bot.

All settings are loaded from environment variables via .env file.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    # Brand
    brand_name: str = Field(default="Barista Bot", env="BRAND_NAME")

    # Anthropic
    anthropic_api_key: str = Field(default="", env="ANTHROPIC_API_KEY")
    anthropic_api_url: str = Field(
        default="https://api.anthropic.com/v1/messages", env="ANTHROPIC_API_URL"
    )
    anthropic_version: str = Field(default="2023-06-01", env="ANTHROPIC_VERSION")
    llm_model_id: str = Field(default="claude-3-5-sonnet-20240620", env="LLM_MODEL_ID")
    max_tokens: int = Field(default=500, env="MAX_TOKENS")
    temperature: float = Field(default=0.0, env="TEMPERATURE")
    top_p: float = Field(default=0.1, env="TOP_P")

    # Resilience
    max_attempts: int = Field(default=3, env="MAX_ATTEMPTS")
    retry_initial_delay: float = Field(default=1.0, env="RETRY_INITIAL_DELAY")  # seconds
    request_timeout: float = Field(default=30.0, env="REQUEST_TIMEOUT")
    pipeline_deadline_seconds: float = Field(default=90.0, env="PIPELINE_DEADLINE_SECONDS")

    # Catalog / prompt
    catalog_path: str = Field(default="./coffee_data.json", env="CATALOG_PATH")
    prompt_template_path: Optional[str] = Field(default=None, env="PROMPT_TEMPLATE_PATH")

    # Telegram
    telegram_bot_token: Optional[str] = Field(default=None, env="TELEGRAM_BOT_TOKEN")
    telegram_log_bot_token: Optional[str] = Field(default=None, env="TELEGRAM_LOG_BOT_TOKEN")
    telegram_log_chat_id: Optional[str] = Field(default=None, env="TELEGRAM_LOG_CHAT_ID")
    telegram_order_bot_token: Optional[str] = Field(default=None, env="TELEGRAM_ORDER_BOT_TOKEN")
    telegram_order_chat_id: Optional[str] = Field(default=None, env="TELEGRAM_ORDER_CHAT_ID")

    # API
    api_host: str = Field(default="0.0.0.0", env="API_HOST")
    api_port: int = Field(default=8000, env="API_PORT")
    api_title: str = Field(default="Barista Bot API", env="API_TITLE")
    api_version: str = Field(default="1.0.0", env="API_VERSION")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def audit_enabled(self) -> bool:
        return bool(self.telegram_log_bot_token and self.telegram_log_chat_id)

    @property
    def order_delivery_enabled(self) -> bool:
        return bool(self.telegram_order_bot_token and self.telegram_order_chat_id)


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
