"""Schedule helpers derived from an :class:`Estimation`.

- additional risks: ``base * percent / 100`` rounded to the nearest 0.5 SP
- working days: ``ceil(total_sp * 2 / parallelization)`` (1 SP = 2 days)
- delivery date: start date plus that many business days (Mon-Fri)
"""

from __future__ import annotations

import math
from datetime import date, timedelta

from decomposer.core.contracts.estimation import Estimation, Schedule

DAYS_PER_STORY_POINT = 2
_SATURDAY = 5


def additional_risks(base_estimation: float, percent: float) -> float:
    """Extra risk buffer, rounded half-up to the nearest 0.5 SP.

    >>> additional_risks(7, 20)
    1.5
    >>> additional_risks(5, 15)
    1.0
    """
    doubled = base_estimation * percent / 100 * 2
    return math.floor(round(doubled, 9) + 0.5) / 2


def working_days(total_sp: float, parallelization: float = 1.0) -> int:
    """Working days for ``total_sp`` split across ``parallelization`` engineers."""
    if parallelization <= 0:
        raise ValueError(f"parallelization must be positive, got {parallelization}")
    # 4.000000000001 counts as 4
    return math.ceil(round(total_sp * DAYS_PER_STORY_POINT / parallelization, 9))


def add_business_days(start: date, days: int) -> date:
    """Move forward ``days`` business days from ``start``, skipping weekends."""
    current = start
    remaining = max(0, days)
    while remaining > 0:
        current += timedelta(days=1)
        if current.weekday() < _SATURDAY:
            remaining -= 1
    return current


def build_schedule(
    estimation: Estimation,
    *,
    additional_risk_percent: float = 20,
    parallelization: float = 1.0,
    today: date | None = None,
) -> Schedule:
    """Combine totals, the extra risk buffer and the calendar into a :class:`Schedule`."""
    extra = additional_risks(estimation.base_estimation, additional_risk_percent)
    total = estimation.base_estimation + estimation.risks + extra
    days = working_days(total, parallelization)
    start = today or date.today()
    return Schedule(
        additional_risk_percent=additional_risk_percent,
        additional_risks=extra,
        total=total,
        parallelization_coefficient=parallelization,
        working_days=days,
        delivery_date=add_business_days(start, days),
    )


__all__ = [
    "DAYS_PER_STORY_POINT",
    "add_business_days",
    "additional_risks",
    "build_schedule",
    "working_days",
]
