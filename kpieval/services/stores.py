"""Storage collaborators used by the evaluation service."""

from __future__ import annotations

from typing import Protocol

from ..models import Evaluation, EvaluationSummary, KPIDefinition, RawDataRecord


class KPIStore(Protocol):
    def find_by_id(self, kpi_id: int) -> KPIDefinition | None: ...


class RawDataStore(Protocol):
    def find(
        self, staff_id: int, kpi_id: int, period_year: int, period_quarter: int
    ) -> RawDataRecord | None: ...

    def find_for_period(self, period_year: int, period_quarter: int) -> list[RawDataRecord]: ...


class EvaluationStore(Protocol):
    def upsert(self, evaluation: Evaluation) -> Evaluation: ...

    def find_for_staff_period(
        self, staff_id: int, period_year: int, period_quarter: int
    ) -> list[Evaluation]: ...


class EvaluationSummaryStore(Protocol):
    def upsert(self, summary: EvaluationSummary) -> EvaluationSummary: ...
