"""Tests for the story-point aggregator and formula rendering."""

from __future__ import annotations

import pytest

from decomposer.core.contracts import Block, LLMEstimation, TaskInfo
from decomposer.core.estimation import calculate_estimation, format_points, render_formula
from decomposer.core.mapping import SPMapping
from decomposer.core.parsing import parse_blocks

SMALL_SCALE = SPMapping({"XS": 0.5, "S": 1, "M": 2})


def _task(estimation: str | None = None, risk: str | None = None, llm: str | None = None) -> Block:
    info = TaskInfo(
        title="t",
        estimation=estimation,
        risk=risk,
        estimation_by_llm=LLMEstimation(estimation=llm) if llm else None,
    )
    return Block.of_task("", info)


def test_sums_sizes_and_risks_with_grouped_formulas() -> None:
    blocks = parse_blocks("M [a] One\nM [b] Two\nS+XS [c] Three\nsome prose")

    estimation = calculate_estimation(blocks, SMALL_SCALE)

    assert estimation.base_estimation == 5
    assert estimation.formula == "2M + S = 5 SP"
    assert estimation.risks == 0.5
    assert estimation.risk_formula == "XS = 0.5 SP"
    assert estimation.task_count == 3
    assert estimation.tasks_without_estimation == 0
    assert estimation.llm is None


def test_empty_sequence_renders_zero() -> None:
    estimation = calculate_estimation(())
    assert estimation.base_estimation == 0
    assert estimation.formula == "0 SP"
    assert estimation.risk_formula == "0 SP"
    assert estimation.task_count == 0


def test_formula_orders_largest_first() -> None:
    assert render_formula(["S", "XL", "XS", "L", "M", "XL"], 16.5) == "2XL + L + M + S + XS = 16.5 SP"


def test_format_points_drops_trailing_zero() -> None:
    assert format_points(5.0) == "5"
    assert format_points(0.5) == "0.5"
    assert format_points(2.25) == "2.25"


def test_unreadable_and_unmapped_sizes_count_as_without_estimation() -> None:
    blocks = (_task("?"), _task("L"), _task("S"))

    estimation = calculate_estimation(blocks, SMALL_SCALE)

    assert estimation.base_estimation == 1
    assert estimation.formula == "S = 1 SP"
    assert estimation.tasks_without_estimation == 2


def test_llm_size_fills_only_tasks_without_a_human_size() -> None:
    blocks = (_task(llm="M"), _task("S", llm="XL"), _task("?", llm="S"), _task())

    estimation = calculate_estimation(blocks)

    # M (substituted) + S (human); "?" is never substituted
    assert estimation.base_estimation == 3
    assert estimation.formula == "M + S = 3 SP"
    assert estimation.tasks_with_llm_estimation == 1
    assert estimation.tasks_without_estimation == 2
    assert estimation.llm is not None
    assert estimation.llm.base_estimation == 8
    assert estimation.llm.formula == "XL + M + S = 8 SP"


def test_aggregation_is_idempotent_and_ignores_cached_points() -> None:
    blocks = parse_blocks("M [a] One\nS+ [b] Two", SPMapping({"M": 100, "S": 100, "XS": 100}))

    first = calculate_estimation(blocks)
    second = calculate_estimation(blocks)

    assert first == second
    assert first.base_estimation == 3
    assert first.risks == 0.5


def test_task_block_without_info_fails_fast() -> None:
    broken = Block.model_construct(type="task", content="", task_info=None)
    with pytest.raises(ValueError):
        calculate_estimation([broken])
