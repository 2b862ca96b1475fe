"""Raw data, evaluation and summary models."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from .base import Period


class RawDataRecord(BaseModel):
    """Quarterly measurement inputs submitted for one staff member and KPI."""

    staff_id: int
    kpi_id: int
    period_year: int
    period_quarter: int = Field(..., ge=1, le=4)
    values: dict[str, int | float | str | date | None] = Field(default_factory=dict)

    @property
    def period(self) -> Period:
        return Period(year=self.period_year, quarter=self.period_quarter)


class Evaluation(BaseModel):
    """Computed value and score of one KPI for a staff member and period.

    Keyed by (staff_id, kpi_id, period_year, period_quarter). Re-evaluating
    the same key replaces the stored values.
    """

    staff_id: int
    kpi_id: int
    period_year: int
    period_quarter: int = Field(..., ge=1, le=4)
    calculated_value: float
    score: int = Field(..., ge=1, le=5)
    target_value: float | None = Field(default=None, allow_inf_nan=False)
    weight: float = Field(..., gt=0, allow_inf_nan=False)
    updated_at: datetime | None = None

    @property
    def period(self) -> Period:
        return Period(year=self.period_year, quarter=self.period_quarter)

    @property
    def target_achievement(self) -> float | None:
        """Calculated value as a percentage of the target."""
        if not self.target_value:
            return None
        return self.calculated_value / self.target_value * 100


class EvaluationSummary(BaseModel):
    """Weighted summary of all KPI evaluations of a staff member in a period."""

    staff_id: int
    period_year: int
    period_quarter: int = Field(..., ge=1, le=4)
    total_weighted_score: float
    max_possible_score: float
    percentage_score: float
    grade: str
    updated_at: datetime | None = None

    @property
    def period(self) -> Period:
        return Period(year=self.period_year, quarter=self.period_quarter)
