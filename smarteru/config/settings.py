from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.smarteru.com/apiv2/"


class Settings(BaseSettings):
    account_api: str = Field(default="", description="SmarterU account API key")
    user_api: str = Field(default="", description="SmarterU user API key")

    api_url: str = Field(default=DEFAULT_API_URL, description="SmarterU API endpoint")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="SMARTERU_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings_instance
    _settings_instance = None
