"""Estimation aggregator: block sequence -> :class:`Estimation`.

For each task block:

1. A human size (anything but ``None``/``"?"``) resolved through the mapping
   goes into the primary totals; its risk, if mapped, into ``risks``.
2. A task with no human size at all falls back to the model-proposed size
   from ``estimation_by_llm`` and is counted in ``tasks_with_llm_estimation``.
   This is the only way model output reaches the primary totals.
3. Everything else (``"?"``, unmapped sizes, nothing to substitute) adds 0
   and is counted in ``tasks_without_estimation``.

Independently, every model-proposed size feeds a secondary ``llm`` aggregate
used to compare the model with the humans.

Formulas group sizes by label, largest first, e.g. ``"2M + S = 5 SP"``.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from decomposer.core.contracts.block import SIZE_RANK, Block
from decomposer.core.contracts.estimation import Estimation, EstimationTotals
from decomposer.core.mapping import SPMapping
from decomposer.core.settings import get_logger

logger = get_logger(__name__)


def format_points(value: float) -> str:
    """Render story points without a trailing ``.0`` (``5``, ``0.5``, ``2.5``)."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def render_formula(sizes: Iterable[str], total: float) -> str:
    """Render ``sizes`` grouped by label, largest first, followed by ``= total SP``.

    >>> render_formula(["M", "S", "M"], 5)
    '2M + S = 5 SP'
    >>> render_formula([], 0)
    '0 SP'
    """
    counts = Counter(sizes)
    if not counts:
        return "0 SP"
    groups = sorted(counts.items(), key=lambda item: (-SIZE_RANK.get(item[0], 0), item[0]))
    parts = [size if count == 1 else f"{count}{size}" for size, count in groups]
    return f"{' + '.join(parts)} = {format_points(total)} SP"


@dataclass
class _Tally:
    base: float = 0
    risks: float = 0
    sizes: list[str] = field(default_factory=list)
    risk_sizes: list[str] = field(default_factory=list)

    def add(self, size: str, points: float) -> None:
        self.base += points
        self.sizes.append(size)

    def add_risk(self, size: str | None, mapping: SPMapping) -> None:
        points = mapping.resolve(size)
        if size is None or points is None:
            return
        self.risks += points
        self.risk_sizes.append(size)

    def totals(self) -> EstimationTotals:
        return EstimationTotals(
            base_estimation=self.base,
            risks=self.risks,
            formula=render_formula(self.sizes, self.base),
            risk_formula=render_formula(self.risk_sizes, self.risks),
        )


def calculate_estimation(
    blocks: Iterable[Block],
    mapping: SPMapping | None = None,
) -> Estimation:
    """Reduce ``blocks`` to story-point totals, formulas and task counters.

    Story points are always resolved from ``mapping`` (default scale when
    omitted); SP values cached on the blocks are ignored.

    Raises
    ------
    ValueError
        If a task block carries no ``task_info`` (only possible for blocks
        built without validation).
    """
    mapping = mapping or SPMapping.default()
    primary = _Tally()
    proposed = _Tally()
    task_count = without_estimation = with_llm = llm_seen = 0

    for block in blocks:
        if not block.is_task:
            continue
        info = block.task_info
        if info is None:
            raise ValueError("task block without task_info")
        task_count += 1
        suggestion = info.estimation_by_llm

        if info.estimation is None:
            points = mapping.resolve(suggestion.estimation) if suggestion else None
            if suggestion is not None and suggestion.estimation and points is not None:
                primary.add(suggestion.estimation, points)
                primary.add_risk(suggestion.risk, mapping)
                with_llm += 1
            else:
                without_estimation += 1
        else:
            points = mapping.resolve(info.estimation) if info.has_human_estimate else None
            if info.estimation is not None and points is not None:
                primary.add(info.estimation, points)
                primary.add_risk(info.risk, mapping)
            else:
                logger.debug("No story points for %r (estimation=%r)", info.title, info.estimation)
                without_estimation += 1

        if suggestion is not None and suggestion.estimation:
            llm_seen += 1
            llm_points = mapping.resolve(suggestion.estimation)
            if llm_points is not None:
                proposed.add(suggestion.estimation, llm_points)
                proposed.add_risk(suggestion.risk, mapping)

    totals = primary.totals()
    return Estimation(
        base_estimation=totals.base_estimation,
        risks=totals.risks,
        formula=totals.formula,
        risk_formula=totals.risk_formula,
        task_count=task_count,
        tasks_without_estimation=without_estimation,
        tasks_with_llm_estimation=with_llm,
        llm=proposed.totals() if llm_seen else None,
    )


__all__ = ["calculate_estimation", "format_points", "render_formula"]
