"""Formula models for KPI definitions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FormulaKind(str, Enum):
    """Supported formula kinds."""

    ARITHMETIC = "arithmetic"
    FUNCTION = "function"


class Formula(BaseModel):
    """A KPI formula and the variables it reads from raw data."""

    model_config = ConfigDict(frozen=True)

    kind: FormulaKind = Field(..., description="Arithmetic expression or single function call")
    expression: str = Field(..., min_length=1, description="Formula text")
    variables: list[str] = Field(
        default_factory=list,
        description="Identifiers the expression reads (raw data field names)",
    )

    @field_validator("variables")
    @classmethod
    def _distinct_variables(cls, value: list[str]) -> list[str]:
        if len(set(value)) != len(value):
            raise ValueError("Formula variables must be unique")
        return value
