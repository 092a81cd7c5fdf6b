"""Ingestion configuration loaded from environment variables.

All values have defaults matching the dashboard's backend deployment.
Bounds profiles are deliberately *not* configurable here: they are
static region definitions living in ``landcheck_gis.geodesy.bounds``.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any numeric
    value is out of its valid range, catching bad configuration at
    startup instead of mid-load.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from landcheck_gis.core.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_HTTP_TIMEOUT_S,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
)
from landcheck_gis.core.exceptions import LandCheckError

_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


class ConfigValidationError(LandCheckError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class IngestConfig:
    """Immutable ingestion configuration.

    Attributes:
        api_base_url: Base URL of the backend proxy serving layer chunks.
        page_size: Rows requested per chunk.
        http_timeout_s: Per-request timeout handed to the HTTP client.
        max_pages: Safety cap on pages per load (``0`` means unlimited).
        log_level: Root log level used by the CLI.
    """

    api_base_url: str = DEFAULT_API_BASE_URL
    page_size: int = DEFAULT_PAGE_SIZE
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    max_pages: int = 0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> IngestConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range or a
                required string value is empty.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``LANDCHECK_PAGE_SIZE=abc``).
        """
        config = cls(
            api_base_url=os.getenv("LANDCHECK_API_URL", DEFAULT_API_BASE_URL),
            page_size=int(os.getenv("LANDCHECK_PAGE_SIZE", str(DEFAULT_PAGE_SIZE))),
            http_timeout_s=float(
                os.getenv("LANDCHECK_HTTP_TIMEOUT_S", str(DEFAULT_HTTP_TIMEOUT_S))
            ),
            max_pages=int(os.getenv("LANDCHECK_MAX_PAGES", "0")),
            log_level=os.getenv("LANDCHECK_LOG_LEVEL", "INFO").upper(),
        )
        validate_config(config)
        return config

    @property
    def page_limit(self) -> int | None:
        """``max_pages`` as an optional limit (``None`` when unlimited)."""
        return self.max_pages or None


def validate_config(config: IngestConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not config.api_base_url:
        raise ConfigValidationError(
            "LANDCHECK_API_URL",
            config.api_base_url,
            "must not be empty",
        )

    if not 1 <= config.page_size <= MAX_PAGE_SIZE:
        raise ConfigValidationError(
            "LANDCHECK_PAGE_SIZE",
            config.page_size,
            f"must be between 1 and {MAX_PAGE_SIZE} (rows)",
        )

    if config.http_timeout_s <= 0:
        raise ConfigValidationError(
            "LANDCHECK_HTTP_TIMEOUT_S",
            config.http_timeout_s,
            "must be > 0 (seconds)",
        )

    if config.max_pages < 0:
        raise ConfigValidationError(
            "LANDCHECK_MAX_PAGES",
            config.max_pages,
            "must be >= 0 (0 = unlimited)",
        )

    if config.log_level not in _LOG_LEVELS:
        raise ConfigValidationError(
            "LANDCHECK_LOG_LEVEL",
            config.log_level,
            f"must be one of {', '.join(sorted(_LOG_LEVELS))}",
        )
