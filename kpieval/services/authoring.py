"""Validation and helpers for authoring KPI definitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from ..errors import FormulaError, InvalidKPIDefinitionError
from ..formula import check_call, compile_expression, evaluate, extract_variables, infer_kind
from ..formula.parser import FunctionCall, iter_variables
from ..models import (
    FieldType,
    Formula,
    FormulaKind,
    KPIDefinition,
    RawDataField,
    RawDataSchema,
)
from ..scoring import validate_criteria
from .evaluation_service import score_value

logger = logging.getLogger(__name__)


def build_formula(expression: str, kind: FormulaKind | None = None) -> Formula:
    """Create a formula whose variables are derived from its expression.

    Raises:
        InvalidKPIDefinitionError: If the expression references no variables
        FormulaSyntaxError: On characters outside the formula grammar
    """
    expression = expression.strip()
    variables = extract_variables(expression)
    if not variables:
        raise InvalidKPIDefinitionError("Formula must contain at least one variable")
    return Formula(
        kind=kind or infer_kind(expression),
        expression=expression,
        variables=variables,
    )


def derive_raw_data_schema(formula: Formula) -> RawDataSchema:
    """Build a raw data schema with one required number field per variable."""
    return RawDataSchema(
        fields=[
            RawDataField(name=name, type=FieldType.NUMBER, required=True)
            for name in formula.variables
        ]
    )


def validate_formula(formula: Formula) -> list[str]:
    """Check a formula's declared variables against its expression."""
    errors: list[str] = []
    try:
        tree = compile_expression(formula.kind, formula.expression)
    except FormulaError as e:
        return [f"Formula does not parse: {e}"]

    referenced = set(iter_variables(tree))
    declared = set(formula.variables)
    for name in sorted(referenced - declared):
        errors.append(f"Formula references undeclared variable: {name}")
    for name in sorted(declared - referenced):
        errors.append(f"Formula declares unused variable: {name}")

    if isinstance(tree, FunctionCall):
        try:
            check_call(tree)
        except FormulaError as e:
            errors.append(str(e))
    return errors


def validate_raw_data_schema(schema: RawDataSchema) -> list[str]:
    """Check a raw data schema for missing or duplicate fields."""
    if not schema.fields:
        return ["Raw data schema must have at least one field"]

    errors: list[str] = []
    seen: set[str] = set()
    for i, f in enumerate(schema.fields, start=1):
        if f.name in seen:
            errors.append(f"Field {i}: duplicate field name {f.name!r}")
        seen.add(f.name)
    return errors


def validate_kpi(kpi: KPIDefinition) -> list[str]:
    """Check a KPI definition and describe every problem found.

    Returns:
        List of problem descriptions (empty when the KPI is valid)
    """
    errors: list[str] = []
    if kpi.weight <= 0:
        errors.append("KPI weight must be a positive number")

    if kpi.formula is not None:
        errors.extend(validate_formula(kpi.formula))

    if kpi.raw_data_schema is not None:
        errors.extend(validate_raw_data_schema(kpi.raw_data_schema))

    if kpi.scoring_criteria is not None:
        errors.extend(validate_criteria(kpi.scoring_criteria))

    if kpi.formula is not None and kpi.raw_data_schema is not None:
        fields = {f.name: f for f in kpi.raw_data_schema.fields}
        for name in kpi.formula.variables:
            if name not in fields:
                errors.append(f"Formula variable {name!r} not found in raw data schema")
            elif fields[name].type != FieldType.NUMBER:
                errors.append(f"Formula variable {name!r} must be a number field")

    if errors:
        logger.debug(f"KPI {kpi.id} has {len(errors)} validation problem(s)")
    return errors


def load_kpi(data: Mapping[str, Any]) -> KPIDefinition:
    """Validate raw KPI data into a definition.

    Raises:
        InvalidKPIDefinitionError: If the data does not form a valid KPI
    """
    try:
        kpi = KPIDefinition.model_validate(data)
    except ValueError as e:
        raise InvalidKPIDefinitionError(f"Invalid KPI definition: {e}") from e

    errors = validate_kpi(kpi)
    if errors:
        raise InvalidKPIDefinitionError(f"Invalid KPI definition: {'; '.join(errors)}")
    return kpi


@dataclass
class KPIPreview:
    """Result of trying a KPI against sample values."""

    value: float
    score: int
    target_achievement: float | None


def preview_kpi(kpi: KPIDefinition, context: Mapping[str, Any]) -> KPIPreview:
    """Run a KPI's formula and scoring on sample values without storing anything.

    Raises:
        InvalidKPIDefinitionError: If the KPI has no formula
        FormulaError: If evaluation fails
    """
    if kpi.formula is None:
        raise InvalidKPIDefinitionError(f"KPI {kpi.id} has no formula to preview")

    value = evaluate(kpi.formula, context)
    target_achievement = None
    if kpi.target_value:
        target_achievement = value / kpi.target_value * 100
    return KPIPreview(value=value, score=score_value(kpi, value), target_achievement=target_achievement)
