"""Runtime configuration for inversion and cache diagnostics.

Values can be overridden via environment variables prefixed with
``CACHEMATRIX_``.  For example, ``CACHEMATRIX_DEFAULT_METHOD=solve``.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration shared by the resolver and the CLI."""

    default_method: str = "lu"
    tolerance: Optional[float] = None
    eager_shape_check: bool = True
    log_cache_hits: bool = True
    hit_log_level: str = "DEBUG"

    class Config:
        env_prefix = "CACHEMATRIX_"

    @field_validator("hit_log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return normalized

    @field_validator("tolerance")
    @classmethod
    def _non_negative(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value < 0:
            raise ValueError("tolerance must be non-negative")
        return value

    @property
    def hit_log_levelno(self) -> int:
        return logging.getLevelName(self.hit_log_level)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, reading the environment on first use."""

    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next :func:`get_settings` re-reads the environment."""

    global _settings
    _settings = None
