"""KPI definition models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from .formula import Formula
from .scoring import ScoringCriteria


class FieldType(str, Enum):
    """Value type of a raw data field."""

    NUMBER = "number"
    STRING = "string"
    DATE = "date"


class RawDataField(BaseModel):
    """A field staff fill in when submitting raw data for a KPI."""

    name: str = Field(..., min_length=1, description="Field name (formula variable)")
    type: FieldType = Field(default=FieldType.NUMBER)
    required: bool = Field(default=True)
    description: str | None = Field(default=None)


class RawDataSchema(BaseModel):
    """Expected shape of the raw data submitted for a KPI."""

    fields: list[RawDataField] = Field(default_factory=list)

    def field_names(self) -> list[str]:
        """Get field names in declaration order."""
        return [f.name for f in self.fields]


class KPIDefinition(BaseModel):
    """A named, weighted performance metric.

    A KPI may carry a formula (computed from raw data fields), scoring
    criteria (value ranges mapped to scores 1-5) and a target value used
    as a scoring fallback when no criteria exist.
    """

    id: int = Field(..., description="KPI id")
    name: str = Field(..., min_length=1, description="Human-readable name")
    description: str | None = Field(default=None)
    weight: float = Field(default=1.0, gt=0, allow_inf_nan=False, description="Weight in period summaries")
    target_value: float | None = Field(default=None, allow_inf_nan=False)
    formula: Formula | None = Field(default=None)
    raw_data_schema: RawDataSchema | None = Field(default=None)
    scoring_criteria: ScoringCriteria | None = Field(default=None)
    active: bool = Field(default=True)
