"""Tests for repository tag categorisation."""

from __future__ import annotations

from decomposer.core.parsing import parse_blocks
from decomposer.core.repositories import categorize_repository, count_by_category


def test_default_table() -> None:
    assert categorize_repository("xhh") == "Frontend"
    assert categorize_repository("XHH") == "Frontend"
    assert categorize_repository("deploy") == "Configs"
    assert categorize_repository("dbscripts") == "DB"
    assert categorize_repository("hh.ru") == "Backend"


def test_unknown_or_missing_tags() -> None:
    assert categorize_repository("mystery") is None
    assert categorize_repository(None) is None
    assert categorize_repository("") is None


def test_custom_table_is_injectable() -> None:
    table = {"Mobile": ["ios", "android"]}
    assert categorize_repository("ios", table) == "Mobile"
    assert categorize_repository("xhh", table) is None


def test_count_by_category_ignores_text_blocks() -> None:
    blocks = parse_blocks("intro\nS [xhh] A\nM [billing] B\nL [mystery] C\nXS D")
    assert count_by_category(blocks) == {"Frontend": 1, "Backend": 1, "Other": 2}
