#!/usr/bin/env python3
"""
Storyteller Configuration — Typed, Validated Settings

Loads pipeline configuration from environment variables (and an optional
.env file) into a pydantic-settings model.

Architecture:
    StorytellerConfig   — all settings (STORYTELLER_* prefix)
    get_config()        — @lru_cache factory; call this everywhere
    build_beautifier()  — StoryBeautifier wired from a config
    build_coordinator() — BatchCoordinator wired from a config

Usage:
    from storyteller.config import get_config, build_coordinator

    cfg = get_config()
    coordinator = build_coordinator(cfg)
    results = await coordinator.beautify_all(records)

    # Invalidate cache (e.g. in tests):
    get_config.cache_clear()

Environment:
    STORYTELLER_LOG_LEVEL              DEBUG | INFO | WARNING | ERROR | CRITICAL
    STORYTELLER_LOG_DIR                enables the JSON log file when set
    STORYTELLER_MAX_CONCURRENCY        records processed at once (default 8)
    STORYTELLER_RECORD_TIMEOUT_S       per-record timeout, unset for none
    STORYTELLER_WORDS_PER_MINUTE       reading speed (default 200)
    STORYTELLER_BEAUTIFICATION_VERSION version tag on output records
    STORYTELLER_RULES_FILE             YAML keyword rules override
    STORYTELLER_ENV_FILE               alternate .env path

Dependencies:
    pydantic>=2.10.0
    pydantic-settings>=2.1.0

Version: 0.1.0
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from storyteller.pipeline import BatchCoordinator, StoryBeautifier


class StorytellerConfig(BaseSettings):
    """Beautification pipeline settings.

    All fields are read from environment variables with the
    ``STORYTELLER_`` prefix.

    Attributes:
        log_level: Python logging level name (case-insensitive).
        log_dir: Directory for the rotating JSON log file.  When ``None``
            only console logging is configured.
        max_concurrency: Upper bound on records processed concurrently.
        record_timeout_s: Per-record wall-clock limit; ``None`` disables it.
        words_per_minute: Reading speed used for reading-time estimates.
        beautification_version: Version tag stamped on beautified records.
        rules_file: Optional YAML file overriding the keyword tables.

    Example:
        >>> cfg = StorytellerConfig()
        >>> cfg.max_concurrency
        8
    """

    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    max_concurrency: int = Field(8, ge=1)
    record_timeout_s: Optional[float] = Field(None, gt=0)
    words_per_minute: int = Field(200, ge=1)
    beautification_version: str = "1.0"
    rules_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="STORYTELLER_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and validate the logging level string.

        Raises:
            ValueError: If *v* is not a recognised Python logging level.
        """
        valid: set[str] = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = str(v).upper()
        if upper not in valid:
            raise ValueError(
                f"STORYTELLER_LOG_LEVEL must be one of {sorted(valid)}, got: {v!r}"
            )
        return upper


@lru_cache(maxsize=1)
def get_config() -> StorytellerConfig:
    """Return the cached configuration.

    Reads ``STORYTELLER_ENV_FILE`` (default ``./.env``) when it exists.

    Raises:
        pydantic.ValidationError: If a variable fails validation.
    """
    env_file = Path(os.getenv("STORYTELLER_ENV_FILE", ".env"))
    env_file_arg: Optional[str] = str(env_file) if env_file.is_file() else None
    return StorytellerConfig(_env_file=env_file_arg)


def build_beautifier(cfg: StorytellerConfig) -> "StoryBeautifier":
    """Build a StoryBeautifier from *cfg*.

    Raises:
        ConfigurationError: If ``rules_file`` is set but invalid.
    """
    from storyteller.enhancer import HeuristicEnhancer
    from storyteller.pipeline import StoryBeautifier
    from storyteller.rules import default_rules, load_rules

    rules = load_rules(cfg.rules_file) if cfg.rules_file else default_rules()
    return StoryBeautifier(
        enhancer=HeuristicEnhancer(rules),
        words_per_minute=cfg.words_per_minute,
    )


def build_coordinator(cfg: StorytellerConfig) -> "BatchCoordinator":
    """Build a BatchCoordinator (and its beautifier) from *cfg*."""
    from storyteller.pipeline import BatchCoordinator

    return BatchCoordinator(
        build_beautifier(cfg),
        max_concurrency=cfg.max_concurrency,
        record_timeout_s=cfg.record_timeout_s,
        version=cfg.beautification_version,
    )
