"""Typed smoke tests for the settings loader.

These tests verify four guarantees:
1) Importing the module-level `settings` yields a `Settings` instance.
2) Environment variables override defaults after clearing the loader cache.
3) Out-of-range estimation knobs are rejected by validation.
4) `get_logger()` respects the configured LOG_LEVEL when constructing loggers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from decomposer.core.settings import (
    Settings,
    get_logger,
    load_settings,
    settings,
)


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def test_settings_instance_type() -> None:
    """`settings` should be an instance of the typed `Settings` model."""
    assert isinstance(settings, Settings)


def test_env_overrides_with_cache_clear(monkeypatch: Any) -> None:
    """Changing env vars should take effect after `load_settings.cache_clear()`."""
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("ESTIMATION_MAPPING_PATH", "/etc/decomposer/mapping.json")
    monkeypatch.setenv("ADDITIONAL_RISK_PERCENT", "35")
    monkeypatch.setenv("PARALLELIZATION_COEFFICIENT", "2.5")
    monkeypatch.setenv("DECOMPOSER_PARSER", "llm")

    s = load_settings()

    assert s.log_level == "DEBUG"
    assert s.mapping_path == Path("/etc/decomposer/mapping.json")
    assert s.additional_risk_percent == 35
    assert s.parallelization_coefficient == 2.5
    assert s.parser_provider == "llm"


def test_llm_credentials_flag(monkeypatch: Any) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
    assert load_settings().has_llm_credentials


def test_invalid_knobs_are_rejected(monkeypatch: Any) -> None:
    monkeypatch.setenv("ADDITIONAL_RISK_PERCENT", "150")
    with pytest.raises(ValidationError):
        Settings()

    monkeypatch.setenv("ADDITIONAL_RISK_PERCENT", "20")
    monkeypatch.setenv("PARALLELIZATION_COEFFICIENT", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_get_logger_respects_level(monkeypatch: Any) -> None:
    """`get_logger()` should apply the numeric level derived from `LOG_LEVEL`.

    A unique logger name avoids side effects between tests.
    """
    monkeypatch.setenv("LOG_LEVEL", "ERROR")

    logger = get_logger("decomposer.tests.settings")

    assert logger.level == logging.ERROR
    assert logger.handlers, "Expected at least one StreamHandler to be attached."
    assert logger.propagate is False
