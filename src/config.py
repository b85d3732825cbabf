"""
Centralized configuration with environment variable overrides.

Time zone, slot granularity, store batching and query defaults are
configurable here. Collaborators receive these objects explicitly; the
resolution engine itself only takes its call arguments.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from src.engine.slots import MINUTES_PER_DAY
from src.logging_context import LOG_FORMAT, attach_request_id

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class SchedulingConfig:
    """Deployment-wide time zone and slot granularity."""

    timezone: str = os.getenv("TIMEZONE", "America/New_York")
    slot_minutes: int = _safe_int("SLOT_MINUTES", "30")

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class StoreConfig:
    """Backing store write settings."""

    batch_size: int = _safe_int("STORE_BATCH_SIZE", "10")


@dataclass(frozen=True)
class QueryConfig:
    """Defaults for availability lookups with no explicit window."""

    default_window_start: str = os.getenv("DEFAULT_WINDOW_START", "00:00")
    default_window_end: str = os.getenv("DEFAULT_WINDOW_END", "23:59")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "engineer-availability")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    try:
        config.scheduling.tzinfo
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"TIMEZONE is not a known time zone: {config.scheduling.timezone!r}"
        ) from None

    slot_minutes = config.scheduling.slot_minutes
    if slot_minutes < 1 or MINUTES_PER_DAY % slot_minutes != 0:
        raise ValueError(
            f"SLOT_MINUTES must be a positive divisor of {MINUTES_PER_DAY}, got {slot_minutes}"
        )
    if config.store.batch_size < 1:
        raise ValueError(
            f"STORE_BATCH_SIZE must be >= 1, got {config.store.batch_size}"
        )

    for name, value in [
        ("DEFAULT_WINDOW_START", config.query.default_window_start),
        ("DEFAULT_WINDOW_END", config.query.default_window_end),
    ]:
        hours, sep, minutes = value.partition(":")
        if not (sep and hours.isdigit() and minutes.isdigit()
                and 0 <= int(hours) < 24 and 0 <= int(minutes) < 60):
            raise ValueError(f"{name} must be an HH:MM time, got {value!r}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        attach_request_id(handler)
    logger.info(
        "Configuration loaded for '%s' (timezone=%s)",
        config.app_name, config.scheduling.timezone,
    )
    return config


# Singleton instance
settings = load_config()
