"""Evaluation services and KPI authoring support."""

from .authoring import (
    KPIPreview,
    build_formula,
    derive_raw_data_schema,
    load_kpi,
    preview_kpi,
    validate_formula,
    validate_kpi,
    validate_raw_data_schema,
)
from .evaluation_service import (
    DEFAULT_SCORE,
    EvaluationService,
    RecomputeFailure,
    RecomputeResult,
    calculate_value,
    score_against_target,
    score_value,
)
from .stores import EvaluationStore, EvaluationSummaryStore, KPIStore, RawDataStore

__all__ = [
    "KPIPreview",
    "build_formula",
    "derive_raw_data_schema",
    "load_kpi",
    "preview_kpi",
    "validate_formula",
    "validate_kpi",
    "validate_raw_data_schema",
    "DEFAULT_SCORE",
    "EvaluationService",
    "RecomputeFailure",
    "RecomputeResult",
    "calculate_value",
    "score_against_target",
    "score_value",
    "EvaluationStore",
    "EvaluationSummaryStore",
    "KPIStore",
    "RawDataStore",
]
