"""Estimation token extractor.

Grammar (case-insensitive)::

    TOKEN := SIZE | SIZE '+' | SIZE '+' SIZE
    SIZE  := XS | S | M | L | XL

``SIZE1+SIZE2`` bundles a risk of ``SIZE2``; a bare ``SIZE+`` bumps the risk
by :data:`DEFAULT_RISK_BUMP`. Anything else that reached the extractor is a
token we saw but could not read, reported as the ``"?"`` estimate.

The extractor knows nothing about story points. :func:`resolve_story_points`
applies an injected :class:`~decomposer.core.mapping.SPMapping`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from decomposer.core.contracts.block import UNPARSED_ESTIMATION, TaskInfo
from decomposer.core.mapping import SPMapping

#: Risk attached to ``SIZE+`` tokens.
DEFAULT_RISK_BUMP: Final = "XS"

_TOKEN = re.compile(
    r"^(?P<size>XS|XL|S|M|L)(?:(?P<plus>\+)(?P<risk>XS|XL|S|M|L)?)?$",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class ExtractedEstimation:
    """Estimation/risk pair read from a token (labels only, no story points)."""

    estimation: str | None
    risk: str | None = None

    @property
    def is_unparsed(self) -> bool:
        return self.estimation == UNPARSED_ESTIMATION


NO_ESTIMATION: Final = ExtractedEstimation(estimation=None)
UNPARSED: Final = ExtractedEstimation(estimation=UNPARSED_ESTIMATION)


def extract_estimation(token: str | None) -> ExtractedEstimation:
    """Parse a size token.

    >>> extract_estimation("S+")
    ExtractedEstimation(estimation='S', risk='XS')
    >>> extract_estimation("m+s")
    ExtractedEstimation(estimation='M', risk='S')
    >>> extract_estimation("weird")
    ExtractedEstimation(estimation='?', risk=None)
    >>> extract_estimation(None)
    ExtractedEstimation(estimation=None, risk=None)
    """
    if token is None:
        return NO_ESTIMATION
    match = _TOKEN.match(token.strip())
    if match is None:
        return UNPARSED
    size = match.group("size").upper()
    if match.group("risk"):
        return ExtractedEstimation(estimation=size, risk=match.group("risk").upper())
    if match.group("plus"):
        return ExtractedEstimation(estimation=size, risk=DEFAULT_RISK_BUMP)
    return ExtractedEstimation(estimation=size)


def resolve_story_points(
    extracted: ExtractedEstimation, mapping: SPMapping
) -> tuple[float | None, float | None]:
    """Return ``(estimation_sp, risk_sp)``; the ``"?"`` sentinel resolves to nothing."""
    if extracted.estimation is None or extracted.is_unparsed:
        return None, None
    return mapping.resolve(extracted.estimation), mapping.resolve(extracted.risk)


def build_task_info(
    title: str,
    token: str | None,
    mapping: SPMapping,
    *,
    repository: str | None = None,
) -> TaskInfo:
    """Assemble a :class:`TaskInfo` from the pieces of a task line."""
    extracted = extract_estimation(token)
    estimation_sp, risk_sp = resolve_story_points(extracted, mapping)
    return TaskInfo(
        title=title,
        repository=repository,
        estimation=extracted.estimation,
        risk=extracted.risk,
        estimation_sp=estimation_sp,
        risk_sp=risk_sp,
    )


__all__ = [
    "DEFAULT_RISK_BUMP",
    "ExtractedEstimation",
    "build_task_info",
    "extract_estimation",
    "resolve_story_points",
]
