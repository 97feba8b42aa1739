"""
Process-wide settings.

All values can be overridden via ``MDWIKI_*`` environment variables or a .env file.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent


# -- settings --
class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="MDWIKI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # watching
    debounce_seconds: float = Field(default=1.0, ge=0)
    document_extension: str = ".md"
    html_extension: str = ".html"

    # layout
    custom_template: str = "Templates/Layout.html"   # relative to the input folder
    default_template: Path = PACKAGE_DIR / "Templates" / "Layout.html"

    # new documents created from dangling wiki links
    placeholder_body: str = "TODO"

    # activity log
    log_limit: Optional[int] = Field(default=None, gt=0)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    return Settings()
