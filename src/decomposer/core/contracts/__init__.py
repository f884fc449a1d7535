"""Pydantic contracts shared by parsers, agents and the aggregator."""

from __future__ import annotations

from .block import (
    SIZE_RANK,
    TSHIRT_SIZES,
    UNPARSED_ESTIMATION,
    Block,
    LLMEstimation,
    TaskInfo,
    TShirt,
)
from .estimation import Estimation, EstimationTotals, Schedule

__all__ = [
    "Block",
    "Estimation",
    "EstimationTotals",
    "LLMEstimation",
    "SIZE_RANK",
    "Schedule",
    "TSHIRT_SIZES",
    "TShirt",
    "TaskInfo",
    "UNPARSED_ESTIMATION",
]
