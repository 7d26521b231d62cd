"""Library configuration via environment variables."""

from typing import Literal

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Validation settings loaded from FIELDCHECK_* environment variables."""

    # Logging
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    # Rule parsing
    STRICT_RULES: bool = True

    # Cross-field rules
    MISSING_REFERENCE_POLICY: Literal["raise", "fail"] = "raise"

    # Date rule, tried after YYYY-MM-DD
    DATE_FORMATS: list[str] = [
        "%Y/%m/%d",
        "%m/%d/%Y",
        "%d.%m.%Y",
        "%d-%m-%Y",
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%dT%H:%M:%S",
        "%B %d, %Y",
        "%b %d, %Y",
        "%d %B %Y",
        "%d %b %Y",
    ]

    model_config = {"env_prefix": "FIELDCHECK_", "env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
