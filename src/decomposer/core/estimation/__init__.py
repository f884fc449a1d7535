"""Story-point aggregation and schedule helpers."""

from __future__ import annotations

from .aggregator import calculate_estimation, format_points, render_formula
from .schedule import add_business_days, additional_risks, build_schedule, working_days

__all__ = [
    "add_business_days",
    "additional_risks",
    "build_schedule",
    "calculate_estimation",
    "format_points",
    "render_formula",
    "working_days",
]
