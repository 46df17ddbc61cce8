"""
Runtime settings for FinTrackLab.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from .errors import ConfigError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class TrackerSettings:
    """
    Settings shared by the dashboard layer and the CLI.

    Attributes:
        cache_ttl: Seconds a cached dashboard computation stays valid
        log_level: Name of the logging level configured by the CLI
        currency_symbol: Prefix used by the currency formatter

    Raises:
        ConfigError: If ``cache_ttl`` is negative or ``log_level`` unknown
    """

    cache_ttl: float = 60.0
    log_level: str = "WARNING"
    currency_symbol: str = "$"

    def __post_init__(self):
        if self.cache_ttl < 0:
            raise ConfigError(f"cache_ttl must be >= 0, got {self.cache_ttl}")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigError(
                f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {self.log_level!r}"
            )

    @property
    def logging_level(self) -> int:
        """Numeric level for ``logging.basicConfig``."""
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> TrackerSettings:
        """
        Build settings from ``FINTRACKLAB_*`` environment variables.

        Variables:
            FINTRACKLAB_CACHE_TTL: Float seconds
            FINTRACKLAB_LOG_LEVEL: Logging level name
            FINTRACKLAB_CURRENCY_SYMBOL: Currency prefix

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        kwargs: dict = {}

        raw_ttl = env.get("FINTRACKLAB_CACHE_TTL", "").strip()
        if raw_ttl:
            try:
                kwargs["cache_ttl"] = float(raw_ttl)
            except ValueError as e:
                raise ConfigError(f"FINTRACKLAB_CACHE_TTL must be a number, got {raw_ttl!r}") from e

        raw_level = env.get("FINTRACKLAB_LOG_LEVEL", "").strip()
        if raw_level:
            kwargs["log_level"] = raw_level.upper()

        symbol = env.get("FINTRACKLAB_CURRENCY_SYMBOL")
        if symbol is not None:
            kwargs["currency_symbol"] = symbol

        return cls(**kwargs)
