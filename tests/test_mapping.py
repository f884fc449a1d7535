"""Tests for the size -> story point mapping."""

from __future__ import annotations

from pathlib import Path

import pytest

from decomposer.core.contracts import Block, TaskInfo
from decomposer.core.errors import MappingConfigError
from decomposer.core.mapping import (
    DEFAULT_SP_MAPPING,
    SPMapping,
    load_mapping,
    refresh_story_points,
)

REPO_MAPPING = Path(__file__).resolve().parents[1] / "config" / "estimation-mapping.json"


def test_default_scale() -> None:
    mapping = SPMapping.default()
    assert mapping.as_dict() == {"XS": 0.5, "S": 1, "M": 2, "L": 3, "XL": 5}
    assert mapping.resolve("m") == 2
    assert mapping.resolve(None) is None


def test_from_dict_normalises_keys_and_allows_partial_scales() -> None:
    mapping = SPMapping.from_dict({"xs": 1, " M ": 3})
    assert mapping.as_dict() == {"XS": 1, "M": 3}
    assert mapping.resolve("L") is None


@pytest.mark.parametrize("raw", [{"XXL": 8}, {"M": -1}, {"M": "two"}, ["M", 2]])
def test_from_dict_rejects_bad_input(raw: object) -> None:
    with pytest.raises(MappingConfigError):
        SPMapping.from_dict(raw)


def test_mapping_is_read_only() -> None:
    mapping = SPMapping.from_dict({"M": 2})
    with pytest.raises(TypeError):
        mapping.points["M"] = 5  # type: ignore[index]
    with pytest.raises(TypeError):
        DEFAULT_SP_MAPPING["M"] = 5  # type: ignore[index]


def test_from_file_and_repo_config(tmp_path: Path) -> None:
    path = tmp_path / "mapping.json"
    path.write_text('{"S": 1, "M": 3}', encoding="utf-8")
    assert SPMapping.from_file(path).as_dict() == {"S": 1, "M": 3}
    assert load_mapping(REPO_MAPPING) == SPMapping.default()


def test_from_file_with_broken_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "mapping.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(MappingConfigError):
        load_mapping(path)


def test_load_mapping_falls_back_when_missing(tmp_path: Path) -> None:
    assert load_mapping(tmp_path / "nope.json") == SPMapping.default()
    assert load_mapping(None) == SPMapping.default()


def test_refresh_story_points_recomputes_from_mapping() -> None:
    blocks = (
        Block.of_text("intro"),
        Block.of_task("", TaskInfo(title="a", estimation="M", risk="S", estimation_sp=99)),
        Block.of_task("", TaskInfo(title="b", estimation="?", estimation_sp=1)),
    )

    refreshed = refresh_story_points(blocks, SPMapping({"M": 4, "S": 2}))

    assert refreshed[0] == blocks[0]
    assert refreshed[1].task_info is not None
    assert (refreshed[1].task_info.estimation_sp, refreshed[1].task_info.risk_sp) == (4, 2)
    assert refreshed[2].task_info is not None
    assert refreshed[2].task_info.estimation_sp is None
