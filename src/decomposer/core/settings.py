"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local

Settings only *locate* domain configuration (e.g. the story-point mapping
file); the parsed mapping itself is loaded by :mod:`decomposer.core.mapping`
and passed explicitly to the parser and aggregator.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
ParserProvider = Literal["regexp", "llm"]


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    openai_api_key, anthropic_api_key : Optional[str]
        Provider keys for the LLM-backed parser and size proposer.
    mapping_path : Path
        JSON file with the T-shirt size -> story point mapping; maps from
        `ESTIMATION_MAPPING_PATH`.
    additional_risk_percent : int
        Extra risk buffer applied on top of the base estimate (0-100).
    parallelization_coefficient : float
        Number of engineers working in parallel; divides the working days.
    parser_provider : ParserProvider
        `regexp` for the deterministic parser, `llm` for the model-backed one.
    """

    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    anthropic_api_key: str | None = Field(default=None, alias="ANTHROPIC_API_KEY")

    mapping_path: Path = Field(
        default=Path("config/estimation-mapping.json"), alias="ESTIMATION_MAPPING_PATH"
    )
    additional_risk_percent: int = Field(default=20, ge=0, le=100, alias="ADDITIONAL_RISK_PERCENT")
    parallelization_coefficient: float = Field(
        default=1.0, gt=0, alias="PARALLELIZATION_COEFFICIENT"
    )
    parser_provider: ParserProvider = Field(default="regexp", alias="DECOMPOSER_PARSER")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def has_llm_credentials(self) -> bool:
        """Return True if at least one LLM provider key is configured."""
        return bool(self.openai_api_key or self.anthropic_api_key)

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    Tests force a rebuild via `load_settings.cache_clear()` after mutating
    `os.environ`.
    """
    return Settings()


settings: Settings = load_settings()


def get_logger(name: str = "decomposer") -> logging.Logger:
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


__all__ = ["Settings", "load_settings", "settings", "get_logger"]
