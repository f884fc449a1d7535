"""Aggregate estimation contracts.

:class:`Estimation` is what the aggregator returns for a block sequence;
:class:`Schedule` adds the derived planning figures (extra risk buffer,
working days, delivery date) a consumer shows next to it.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class _Contract(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class EstimationTotals(_Contract):
    """Story-point totals and their rendered formulas."""

    base_estimation: float = Field(default=0, alias="baseEstimation")
    risks: float = Field(default=0)
    formula: str = Field(default="0 SP")
    risk_formula: str = Field(default="0 SP", alias="riskFormula")


class Estimation(EstimationTotals):
    """Primary aggregate plus task counters and the LLM-only comparison."""

    task_count: int = Field(default=0, ge=0, alias="taskCount")
    tasks_without_estimation: int = Field(default=0, ge=0, alias="tasksWithoutEstimation")
    tasks_with_llm_estimation: int = Field(default=0, ge=0, alias="tasksWithLLMEstimation")
    llm: EstimationTotals | None = Field(
        default=None,
        description="Totals computed purely from model-proposed sizes, if any.",
    )


class Schedule(_Contract):
    """Delivery planning derived from an :class:`Estimation`."""

    additional_risk_percent: float = Field(..., ge=0, le=100, alias="additionalRiskPercent")
    additional_risks: float = Field(..., alias="additionalRisks")
    total: float = Field(..., description="Base + risks + additional risks, in SP.")
    parallelization_coefficient: float = Field(..., gt=0, alias="parallelizationCoefficient")
    working_days: int = Field(..., ge=0, alias="workingDays")
    delivery_date: date = Field(..., alias="deliveryDate")


__all__ = ["Estimation", "EstimationTotals", "Schedule"]
