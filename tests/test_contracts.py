"""Contract tests for blocks, task info and estimation models.

Covers the wire shape (camelCase aliases), normalisation of loosely
formatted values and the task/taskInfo invariant.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from decomposer.core.contracts import Block, Estimation, LLMEstimation, TaskInfo


def test_block_accepts_wire_shape_and_normalises_values() -> None:
    block = Block.model_validate(
        {
            "type": "task",
            "content": "body",
            "taskInfo": {
                "title": "Sidebar",
                "repository": " XHH ",
                "estimation": "m",
                "risk": "xs",
                "estimationSP": 2,
                "estimationByLLM": {"estimation": "l", "reasoning": "big"},
            },
        }
    )

    assert block.is_task
    assert block.task_info is not None
    assert block.task_info.repository == "xhh"
    assert block.task_info.estimation == "M"
    assert block.task_info.risk == "XS"
    assert block.task_info.estimation_sp == 2
    assert block.task_info.estimation_by_llm == LLMEstimation(estimation="L", reasoning="big")


def test_dump_by_alias_restores_wire_names() -> None:
    block = Block.of_task("", TaskInfo(title="T", estimation="S", estimation_sp=1))
    dumped = block.model_dump(by_alias=True)

    assert set(dumped) == {"type", "content", "taskInfo"}
    assert dumped["taskInfo"]["estimationSP"] == 1
    assert "estimationByLLM" in dumped["taskInfo"]


def test_task_block_requires_task_info() -> None:
    with pytest.raises(ValidationError):
        Block(type="task", content="x")


def test_text_block_rejects_task_info() -> None:
    with pytest.raises(ValidationError):
        Block(type="text", content="x", task_info=TaskInfo(title="T"))


def test_unknown_sizes_are_rejected_but_question_mark_is_allowed() -> None:
    assert TaskInfo(title="T", estimation="?").estimation == "?"
    assert not TaskInfo(title="T", estimation="?").has_human_estimate
    with pytest.raises(ValidationError):
        TaskInfo(title="T", estimation="XXL")
    with pytest.raises(ValidationError):
        TaskInfo(title="T", risk="?")


def test_blank_strings_mean_absent() -> None:
    info = TaskInfo(title="T", estimation=" ", repository="")
    assert info.estimation is None
    assert info.repository is None


def test_contracts_are_frozen() -> None:
    info = TaskInfo(title="T")
    with pytest.raises(ValidationError):
        info.title = "other"  # type: ignore[misc]


def test_estimation_defaults_and_aliases() -> None:
    estimation = Estimation()
    dumped = estimation.model_dump(by_alias=True)
    assert dumped["baseEstimation"] == 0
    assert dumped["formula"] == "0 SP"
    assert dumped["riskFormula"] == "0 SP"
    assert dumped["tasksWithoutEstimation"] == 0
    assert dumped["llm"] is None
