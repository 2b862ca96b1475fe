"""Scoring module: range classification and weighted aggregation."""

from .aggregate import GRADE_THRESHOLDS, aggregate_weighted, grade_from_percentage, round2
from .criteria import (
    PERCENTAGE_CRITERIA,
    build_inverse,
    build_linear,
    build_percentage,
    classify,
    validate_criteria,
)

__all__ = [
    "GRADE_THRESHOLDS",
    "aggregate_weighted",
    "grade_from_percentage",
    "round2",
    "PERCENTAGE_CRITERIA",
    "build_inverse",
    "build_linear",
    "build_percentage",
    "classify",
    "validate_criteria",
]
