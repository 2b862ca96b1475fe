"""Base value types shared by the KPI models."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

_PERIOD_PATTERN = re.compile(r"^\s*(\d{4})\s*-?\s*[Qq]([1-4])\s*$")


class Period(BaseModel):
    """Reporting interval identified by year and quarter."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1900, le=9999, description="Calendar year")
    quarter: int = Field(..., ge=1, le=4, description="Quarter of the year (1-4)")

    def __str__(self) -> str:
        return f"{self.year}-Q{self.quarter}"

    @classmethod
    def parse(cls, value: str) -> "Period":
        """Parse period string.

        Formats:
        - 2024-Q1
        - 2024Q1
        """
        match = _PERIOD_PATTERN.match(value)
        if not match:
            raise ValueError(f"Invalid period: {value!r} (expected YYYY-Qn)")
        return cls(year=int(match.group(1)), quarter=int(match.group(2)))
