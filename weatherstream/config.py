"""
Process-wide configuration

Settings are read from environment variables (prefix OPENWEATHER_) or a
local .env file. They are immutable once loaded and shared by every scan.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.openweathermap.org/data/3.0"


class WeatherSettings(BaseSettings):
    """
    Configuration for the OpenWeather One Call API

    The API key is optional at load time so that schema inspection works
    without credentials; building a request without it raises Misconfigured.
    """

    model_config = SettingsConfigDict(
        env_prefix="OPENWEATHER_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        frozen=True,
    )

    api_key: str | None = Field(
        default=None,
        description="OpenWeather API key (One Call 3.0 subscription).",
    )
    api_url: str | None = Field(
        default=DEFAULT_API_URL,
        description="Base URL of the One Call API.",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for the outbound request (seconds).",
    )
    user_agent: str = Field(
        default="weatherstream/0.1.0",
        min_length=1,
        description="User-Agent header sent to the provider.",
    )

    def get(self, key: str) -> Any:
        """Return a setting, or None when it is unset or blank"""
        value = getattr(self, key, None)
        if isinstance(value, str) and not value.strip():
            return None
        return value


def load_settings(**overrides: Any) -> WeatherSettings:
    """
    Load settings from the environment, applying explicit overrides

    Overrides set to None are ignored so CLI options that were not given
    fall through to the environment.
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    return WeatherSettings(**values)
