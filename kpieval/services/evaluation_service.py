"""KPI evaluation orchestration over raw data and KPI definitions."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable

from ..errors import (
    AmbiguousRawDataError,
    InvalidVariableTypeError,
    KPIEvalError,
    KPINotFoundError,
    MissingVariableError,
    NoEvaluationsError,
    NoMatchingRawDataError,
)
from ..formula import evaluate
from ..models import (
    MAX_SCORE,
    MIN_SCORE,
    Evaluation,
    EvaluationSummary,
    KPIDefinition,
    Period,
    RawDataRecord,
    WeightedScore,
)
from ..scoring import aggregate_weighted, classify, grade_from_percentage
from .stores import EvaluationStore, EvaluationSummaryStore, KPIStore, RawDataStore

logger = logging.getLogger(__name__)

# Score given when a KPI has neither scoring criteria nor a target
DEFAULT_SCORE = 3


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def score_against_target(value: float, target: float) -> int:
    """Score a value by its achievement of a target, 20 points per step.

    Achievements too large to represent clamp to the ends of the scale.

    Raises:
        InvalidVariableTypeError: If value or target is not a finite number
    """
    if not math.isfinite(value):
        raise InvalidVariableTypeError("value", value)
    if not math.isfinite(target):
        raise InvalidVariableTypeError("target_value", target)

    achievement = value / target * 100
    if math.isinf(achievement):
        return MAX_SCORE if achievement > 0 else MIN_SCORE
    score = math.floor(achievement / 20 + 0.5)
    return min(MAX_SCORE, max(MIN_SCORE, score))


def score_value(kpi: KPIDefinition, value: float) -> int:
    """Score a calculated value with the KPI's criteria, target or default."""
    if kpi.scoring_criteria is not None:
        return classify(value, kpi.scoring_criteria)
    if kpi.target_value:
        return score_against_target(value, kpi.target_value)
    return DEFAULT_SCORE


def calculate_value(kpi: KPIDefinition, record: RawDataRecord) -> float:
    """Compute a KPI's value from a raw data record.

    With a formula, each declared variable is read from the record. Without
    one, the record must hold exactly one numeric field.

    Raises:
        MissingVariableError: If a formula variable has no numeric raw value
        AmbiguousRawDataError: If a formula-less record does not hold exactly one field
        InvalidVariableTypeError: If the single raw value is not a finite number
        FormulaError: If formula evaluation fails
    """
    if kpi.formula is not None:
        context: dict[str, float] = {}
        for variable in kpi.formula.variables:
            value = record.values.get(variable)
            if not _is_number(value):
                raise MissingVariableError(
                    variable, f"Raw data has no numeric value for variable: {variable}"
                )
            context[variable] = value
        return evaluate(kpi.formula, context)

    fields = list(record.values)
    if len(fields) != 1:
        raise AmbiguousRawDataError(kpi.id, fields)
    value = record.values[fields[0]]
    if not _is_number(value) or not math.isfinite(value):
        raise InvalidVariableTypeError(fields[0], value)
    return float(value)


@dataclass
class RecomputeFailure:
    """A key that could not be evaluated or summarized."""

    staff_id: int
    kpi_id: int | None  # None for summary failures
    error: KPIEvalError


@dataclass
class RecomputeResult:
    """Outcome of recomputing every evaluation of a period."""

    period: Period
    evaluations: list[Evaluation] = field(default_factory=list)
    summaries: list[EvaluationSummary] = field(default_factory=list)
    failures: list[RecomputeFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class EvaluationService:
    """Compute and persist KPI evaluations and period summaries.

    Both operations read, compute, then write once; nothing is written when
    a computation raises, and repeating an operation overwrites the row for
    its natural key.
    """

    def __init__(
        self,
        kpi_store: KPIStore,
        raw_data_store: RawDataStore,
        evaluation_store: EvaluationStore,
        summary_store: EvaluationSummaryStore,
    ):
        self.kpi_store = kpi_store
        self.raw_data_store = raw_data_store
        self.evaluation_store = evaluation_store
        self.summary_store = summary_store

    def evaluate_kpi(self, staff_id: int, kpi_id: int, period: Period) -> Evaluation:
        """Evaluate one KPI for a staff member and period and store the result.

        Raises:
            KPINotFoundError: If the KPI does not exist
            NoMatchingRawDataError: If no raw data was submitted for the key
            KPIEvalError: If value calculation or scoring fails
        """
        kpi = self.kpi_store.find_by_id(kpi_id)
        if kpi is None:
            raise KPINotFoundError(kpi_id)

        record = self.raw_data_store.find(staff_id, kpi_id, period.year, period.quarter)
        if record is None:
            raise NoMatchingRawDataError(staff_id, kpi_id, period.year, period.quarter)

        calculated_value = calculate_value(kpi, record)
        score = score_value(kpi, calculated_value)
        logger.debug(
            f"KPI {kpi_id} for staff {staff_id} in {period}: value={calculated_value} score={score}"
        )

        evaluation = self.evaluation_store.upsert(
            Evaluation(
                staff_id=staff_id,
                kpi_id=kpi_id,
                period_year=period.year,
                period_quarter=period.quarter,
                calculated_value=calculated_value,
                score=score,
                target_value=kpi.target_value,
                weight=kpi.weight,
            )
        )
        logger.info(f"Stored evaluation of KPI {kpi_id} for staff {staff_id} in {period}")
        return evaluation

    def summarize_staff_period(self, staff_id: int, period: Period) -> EvaluationSummary:
        """Aggregate a staff member's evaluations for a period and store the summary.

        Raises:
            NoEvaluationsError: If the staff member has no evaluations in the period
        """
        evaluations = self.evaluation_store.find_for_staff_period(
            staff_id, period.year, period.quarter
        )
        if not evaluations:
            raise NoEvaluationsError(staff_id, period.year, period.quarter)

        aggregate = aggregate_weighted(
            WeightedScore(score=e.score, weight=e.weight) for e in evaluations
        )
        grade = grade_from_percentage(aggregate.percentage)

        summary = self.summary_store.upsert(
            EvaluationSummary(
                staff_id=staff_id,
                period_year=period.year,
                period_quarter=period.quarter,
                total_weighted_score=aggregate.total_weighted,
                max_possible_score=aggregate.max_possible,
                percentage_score=aggregate.percentage,
                grade=grade,
            )
        )
        logger.info(
            f"Stored summary for staff {staff_id} in {period}: "
            f"{aggregate.percentage}% grade {grade}"
        )
        return summary

    def recompute_period(
        self,
        period: Period,
        keys: Iterable[tuple[int, int]] | None = None,
    ) -> RecomputeResult:
        """Re-evaluate (staff_id, kpi_id) keys of a period, then re-summarize.

        Keys are processed one at a time. When no keys are given, every raw
        data record of the period is evaluated. Failures do not stop the
        batch; they are logged and returned in the result.
        """
        if keys is None:
            records = self.raw_data_store.find_for_period(period.year, period.quarter)
            keys = [(r.staff_id, r.kpi_id) for r in records]

        result = RecomputeResult(period=period)
        evaluated_staff: dict[int, None] = {}

        for staff_id, kpi_id in dict.fromkeys(keys):
            try:
                result.evaluations.append(self.evaluate_kpi(staff_id, kpi_id, period))
            except KPIEvalError as e:
                logger.warning(f"Failed to evaluate KPI {kpi_id} for staff {staff_id} in {period}: {e}")
                result.failures.append(RecomputeFailure(staff_id, kpi_id, e))
                continue
            evaluated_staff.setdefault(staff_id, None)

        for staff_id in evaluated_staff:
            try:
                result.summaries.append(self.summarize_staff_period(staff_id, period))
            except KPIEvalError as e:
                logger.warning(f"Failed to summarize staff {staff_id} in {period}: {e}")
                result.failures.append(RecomputeFailure(staff_id, None, e))

        logger.info(
            f"Recomputed {period}: {len(result.evaluations)} evaluations, "
            f"{len(result.summaries)} summaries, {len(result.failures)} failures"
        )
        return result
