"""Weighted score aggregation and letter grades."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Iterable

from ..errors import EmptyScoreSetError, InvalidScoreError, InvalidWeightError
from ..models.scoring import MAX_SCORE, MIN_SCORE, WeightedAggregate, WeightedScore

CENT = Decimal("0.01")

# Enough significant digits to quantize any finite float to cents
ROUND_PRECISION = 330

# Grade thresholds, highest first: (minimum percentage, grade)
GRADE_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (90.0, "A"),
    (85.0, "B+"),
    (80.0, "B"),
    (75.0, "C+"),
    (70.0, "C"),
    (65.0, "D+"),
    (60.0, "D"),
)
FAILING_GRADE = "F"


def round2(value: float) -> float:
    """Round to two decimals, halves away from zero."""
    with localcontext() as ctx:
        ctx.prec = ROUND_PRECISION
        return float(Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP))


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def aggregate_weighted(
    scores: Iterable[WeightedScore | tuple[int, float]],
) -> WeightedAggregate:
    """Combine weighted scores into a total, maximum and percentage.

    total_weighted = sum(score * weight)
    max_possible   = sum(weight * 5)
    percentage     = total_weighted / max_possible * 100

    Each figure is rounded to two decimals.

    Raises:
        EmptyScoreSetError: If no scores are given
        InvalidWeightError: If a weight is not a positive number
        InvalidScoreError: If a score is not an integer between 1 and 5
    """
    total_weighted = 0.0
    total_weight = 0.0
    count = 0

    for item in scores:
        if isinstance(item, WeightedScore):
            score, weight = item.score, item.weight
        else:
            score, weight = item

        if not _is_number(score) or not float(score).is_integer() or not MIN_SCORE <= score <= MAX_SCORE:
            raise InvalidScoreError(score)
        if not _is_number(weight) or not math.isfinite(weight) or weight <= 0:
            raise InvalidWeightError(weight)

        total_weighted += score * weight
        total_weight += weight
        count += 1

    if count == 0:
        raise EmptyScoreSetError("Cannot aggregate an empty set of scores")

    max_possible = total_weight * MAX_SCORE
    if not math.isfinite(max_possible):
        raise InvalidWeightError(total_weight)
    percentage = total_weighted / max_possible * 100

    return WeightedAggregate(
        total_weighted=round2(total_weighted),
        max_possible=round2(max_possible),
        percentage=round2(percentage),
    )


def grade_from_percentage(percentage: float) -> str:
    """Get the letter grade for a percentage score."""
    for threshold, grade in GRADE_THRESHOLDS:
        if percentage >= threshold:
            return grade
    return FAILING_GRADE
