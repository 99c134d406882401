"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local, .env.dev/.env.test/.env.prod
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `SAGASCRIBE_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    api_url : str
        Base URL of the timeline service used by the REST client and the CLI.
    http_timeout : float
        Per-request timeout in seconds for the REST client.
    seed_file : Path | None
        Optional JSON document loaded into the event store at startup.
    host, port :
        Bind address for `sagascribe serve` / `python -m sagascribe.api.server`.
    """

    environment: EnvName = Field(default="dev", alias="SAGASCRIBE_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    api_url: str = Field(default="http://127.0.0.1:8000", alias="SAGASCRIBE_API_URL")
    http_timeout: float = Field(default=10.0, gt=0, alias="SAGASCRIBE_HTTP_TIMEOUT")
    seed_file: Path | None = Field(default=None, alias="SAGASCRIBE_SEED_FILE")
    host: str = Field(default="127.0.0.1", alias="SAGASCRIBE_HOST")
    port: int = Field(default=8000, alias="SAGASCRIBE_PORT")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    @property
    def is_prod(self) -> bool:
        """Return True if running in the production environment."""
        return self.environment == "prod"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    Tests force a rebuild via `load_settings.cache_clear()` after mutating
    `os.environ`.
    """
    os.environ.setdefault("SAGASCRIBE_ENV", "dev")
    return Settings()


# Import-time read of env / .env files.
settings: Settings = load_settings()


def get_logger(name: str = "sagascribe") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
