"""
Block Contract

Pydantic models describing the output of the decomposition parser. A
decomposition document is split into an ordered sequence of :class:`Block`
objects: prose (``"text"``) and task declarations (``"task"``). Task blocks
carry a :class:`TaskInfo` with the extracted title, repository tag and
T-shirt estimate.

The same models are the validation boundary for model-backed producers:
JSON returned by an LLM is parsed with these classes before it reaches the
aggregator, so both producers are interchangeable.

Wire format
-----------
Python attributes are snake_case; the JSON shape uses camelCase aliases
(``taskInfo``, ``estimationSP``, ``estimationByLLM``). Dump with
``model_dump(by_alias=True)`` to get the wire shape back.
"""

from __future__ import annotations

from typing import Annotated, Any, Final, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


def _upper_or_none(value: Any) -> Any:
    """Accept ``"m"``/``" M "`` from loosely formatted producers; blank means absent."""
    if isinstance(value, str):
        cleaned = value.strip().upper()
        return cleaned or None
    return value


def _lower_or_none(value: Any) -> Any:
    if isinstance(value, str):
        cleaned = value.strip().lower()
        return cleaned or None
    return value


TShirt = Literal["XS", "S", "M", "L", "XL"]
EstimationLabel = Literal["XS", "S", "M", "L", "XL", "?"]
BlockType = Literal["text", "task"]

SizeField = Annotated[TShirt | None, BeforeValidator(_upper_or_none)]
EstimationField = Annotated[EstimationLabel | None, BeforeValidator(_upper_or_none)]
RepositoryField = Annotated[str | None, BeforeValidator(_lower_or_none)]

#: Sizes in ascending order.
TSHIRT_SIZES: Final[tuple[TShirt, ...]] = ("XS", "S", "M", "L", "XL")

#: Marker for "a size token was present but could not be read".
UNPARSED_ESTIMATION: Final = "?"

#: Ordering used when rendering formulas (largest first).
SIZE_RANK: Final[dict[str, int]] = {"XL": 5, "L": 4, "M": 3, "S": 2, "XS": 1}


class _Contract(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class LLMEstimation(_Contract):
    """Size proposed by a model for a single task, kept for comparison."""

    estimation: SizeField = Field(default=None, description="Proposed base size.")
    risk: SizeField = Field(default=None, description="Proposed risk size.")
    reasoning: str | None = Field(default=None, description="Short model justification.")


class TaskInfo(_Contract):
    """Structured metadata extracted from a task declaration line."""

    title: str = Field(..., description="Markup-cleaned task name.")
    repository: RepositoryField = Field(default=None, description="Lowercase repository tag.")
    estimation: EstimationField = Field(
        default=None,
        description="Human size; '?' when a token was present but unreadable.",
    )
    risk: SizeField = Field(default=None, description="Risk size bundled with the estimate.")
    estimation_sp: float | None = Field(default=None, alias="estimationSP")
    risk_sp: float | None = Field(default=None, alias="riskSP")
    estimation_by_llm: LLMEstimation | None = Field(default=None, alias="estimationByLLM")

    @property
    def has_human_estimate(self) -> bool:
        """True when the estimate is a real size (neither missing nor '?')."""
        return self.estimation is not None and self.estimation != UNPARSED_ESTIMATION


class Block(_Contract):
    """One contiguous unit of a decomposition document."""

    type: BlockType = Field(..., description="'text' for prose, 'task' for a task declaration.")
    content: str = Field(
        default="",
        description="Block body. For tasks this excludes the title line itself.",
    )
    task_info: TaskInfo | None = Field(default=None, alias="taskInfo")

    @model_validator(mode="after")
    def _task_info_iff_task(self) -> Block:
        if self.type == "task" and self.task_info is None:
            raise ValueError("task blocks require taskInfo")
        if self.type == "text" and self.task_info is not None:
            raise ValueError("text blocks must not carry taskInfo")
        return self

    @classmethod
    def of_text(cls, content: str) -> Block:
        """Build a prose block."""
        return cls(type="text", content=content)

    @classmethod
    def of_task(cls, content: str, task_info: TaskInfo) -> Block:
        """Build a task block."""
        return cls(type="task", content=content, task_info=task_info)

    @property
    def is_task(self) -> bool:
        return self.type == "task"


__all__ = [
    "Block",
    "BlockType",
    "EstimationLabel",
    "LLMEstimation",
    "SIZE_RANK",
    "TSHIRT_SIZES",
    "TShirt",
    "TaskInfo",
    "UNPARSED_ESTIMATION",
]
