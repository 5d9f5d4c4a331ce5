"""Configuration module for the WebCrawlerAPI client.

Provides Pydantic-based configuration management with environment variable
support. Every field can be set through a ``WEBCRAWLERAPI_`` prefixed
environment variable or a ``.env`` file in the working directory.

Example:
    >>> from webcrawlerapi.core.config import Settings
    >>> settings = Settings(api_key="sk-test")
    >>> print(settings.endpoint)
    'https://api.webcrawlerapi.com/v1'
"""

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.webcrawlerapi.com"
DEFAULT_API_VERSION = "v1"
DEFAULT_POLL_DELAY_SECONDS = 5
DEFAULT_MAX_POLLS = 100


class Settings(BaseSettings):
    """WebCrawlerAPI client configuration.

    Attributes:
        api_key: Bearer token sent with every API request
        base_url: API root URL, trailing slash removed
        api_version: Version path segment (default: "v1")
        timeout: HTTP request timeout in seconds
        default_poll_delay: Seconds between polls when the server gives no hint
        max_polls: Poll budget for blocking crawls
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path for a rotating log file

    Raises:
        ValidationError: If values are invalid

    Example:
        >>> settings = Settings(api_key="sk-test", max_polls=20)
        >>> settings.max_polls
        20
    """

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    api_version: str = DEFAULT_API_VERSION

    timeout: float = 60.0
    default_poll_delay: int = DEFAULT_POLL_DELAY_SECONDS
    max_polls: int = DEFAULT_MAX_POLLS

    log_level: str = "INFO"
    log_file: Path | None = None

    model_config = SettingsConfigDict(
        env_prefix="WEBCRAWLERAPI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    @property
    def endpoint(self) -> str:
        """Versioned API root, e.g. ``https://api.webcrawlerapi.com/v1``."""
        return f"{self.base_url}/{self.api_version}"

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls: type["Settings"], v: str) -> str:
        """Remove trailing slashes so paths can be appended directly."""
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls: type["Settings"], v: float) -> float:
        """Validate timeout is positive.

        Raises:
            ValueError: If timeout is zero or negative
        """
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("default_poll_delay")
    @classmethod
    def validate_default_poll_delay(cls: type["Settings"], v: int) -> int:
        """Validate default_poll_delay is not negative.

        Zero is allowed and means polling back to back.

        Raises:
            ValueError: If default_poll_delay is negative
        """
        if v < 0:
            raise ValueError("default_poll_delay must not be negative")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls: type["Settings"], v: str) -> str:
        """Normalize and validate the log level name.

        Raises:
            ValueError: If the level is not a standard logging level name
        """
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"log_level must be a logging level name, got {v!r}")
        return level
