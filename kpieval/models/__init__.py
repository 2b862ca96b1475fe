"""Pydantic models for KPIs, raw data and evaluations."""

from .base import Period
from .formula import Formula, FormulaKind
from .scoring import (
    MAX_SCORE,
    MIN_SCORE,
    ScoringCriteria,
    ScoringRange,
    WeightedAggregate,
    WeightedScore,
)
from .kpi import FieldType, KPIDefinition, RawDataField, RawDataSchema
from .evaluation import Evaluation, EvaluationSummary, RawDataRecord

__all__ = [
    "Period",
    "Formula",
    "FormulaKind",
    "MAX_SCORE",
    "MIN_SCORE",
    "ScoringCriteria",
    "ScoringRange",
    "WeightedAggregate",
    "WeightedScore",
    "FieldType",
    "KPIDefinition",
    "RawDataField",
    "RawDataSchema",
    "Evaluation",
    "EvaluationSummary",
    "RawDataRecord",
]
