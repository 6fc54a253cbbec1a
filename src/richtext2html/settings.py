"""Runtime configuration from ``RICHTEXT2HTML_*`` variables and ``.env``."""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    payment_recipient: str  # interpolated verbatim into payment forms
    payment_endpoint: str = "https://www.paypal.com/cgi-bin/webscr"
    currency_code: str = "USD"

    # Serve the lightbox module from a URL instead of inlining it
    lightbox_script_url: str | None = None

    # None waits indefinitely on spreadsheet downloads
    fetch_timeout_seconds: float | None = None

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="RICHTEXT2HTML_",
        env_file=[os.getenv("ENV_FILE", ""), ".env"],
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
