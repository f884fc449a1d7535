"""Regex-based decomposition parser.

Pipeline: :func:`classify_line` per line -> :func:`parse_blocks` fold ->
``tuple[Block, ...]``. Size tokens are read by :func:`extract_estimation`.
"""

from __future__ import annotations

from .lines import ClassifiedLine, LineKind, classify_line, classify_lines
from .structure import UNBOUNDED, iter_blocks, parse_blocks
from .tokens import DEFAULT_RISK_BUMP, ExtractedEstimation, build_task_info, extract_estimation

__all__ = [
    "ClassifiedLine",
    "DEFAULT_RISK_BUMP",
    "ExtractedEstimation",
    "LineKind",
    "UNBOUNDED",
    "build_task_info",
    "classify_line",
    "classify_lines",
    "extract_estimation",
    "iter_blocks",
    "parse_blocks",
]
