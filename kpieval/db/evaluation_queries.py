"""SQL queries for evaluations and period summaries."""

from __future__ import annotations

import duckdb

from ..models import Evaluation, EvaluationSummary

_EVALUATION_COLUMNS = """
    staff_id, kpi_id, period_year, period_quarter,
    calculated_value, score, target_value, weight, updated_at
"""

_SUMMARY_COLUMNS = """
    staff_id, period_year, period_quarter, total_weighted_score,
    max_possible_score, percentage_score, grade, updated_at
"""


class EvaluationQueries:
    """SQL queries for per-KPI evaluations."""

    def __init__(self, conn: duckdb.DuckDBPyConnection):
        self.conn = conn

    def upsert(self, evaluation: Evaluation) -> Evaluation:
        """Insert or replace the evaluation for its natural key.

        Returns:
            The stored evaluation, including its update timestamp
        """
        self.conn.execute(
            """
            INSERT INTO evaluations (staff_id, kpi_id, period_year, period_quarter,
                                     calculated_value, score, target_value, weight, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, current_timestamp)
            ON CONFLICT (staff_id, kpi_id, period_year, period_quarter) DO UPDATE SET
                calculated_value = excluded.calculated_value,
                score = excluded.score,
                target_value = excluded.target_value,
                weight = excluded.weight,
                updated_at = excluded.updated_at
        """,
            [
                evaluation.staff_id,
                evaluation.kpi_id,
                evaluation.period_year,
                evaluation.period_quarter,
                evaluation.calculated_value,
                evaluation.score,
                evaluation.target_value,
                evaluation.weight,
            ],
        )
        stored = self.find(
            evaluation.staff_id,
            evaluation.kpi_id,
            evaluation.period_year,
            evaluation.period_quarter,
        )
        return stored or evaluation

    def find(
        self, staff_id: int, kpi_id: int, period_year: int, period_quarter: int
    ) -> Evaluation | None:
        """Get the evaluation for one key."""
        row = self.conn.execute(
            f"""
            SELECT {_EVALUATION_COLUMNS} FROM evaluations
            WHERE staff_id = ? AND kpi_id = ? AND period_year = ? AND period_quarter = ?
        """,
            [staff_id, kpi_id, period_year, period_quarter],
        ).fetchone()
        return self._to_evaluation(row) if row else None

    def find_for_staff_period(
        self, staff_id: int, period_year: int, period_quarter: int
    ) -> list[Evaluation]:
        """Get a staff member's evaluations for a quarter ordered by KPI."""
        result = self.conn.execute(
            f"""
            SELECT {_EVALUATION_COLUMNS} FROM evaluations
            WHERE staff_id = ? AND period_year = ? AND period_quarter = ?
            ORDER BY kpi_id
        """,
            [staff_id, period_year, period_quarter],
        ).fetchall()
        return [self._to_evaluation(row) for row in result]

    def find_for_period(self, period_year: int, period_quarter: int) -> list[Evaluation]:
        """Get every evaluation of a quarter."""
        result = self.conn.execute(
            f"""
            SELECT {_EVALUATION_COLUMNS} FROM evaluations
            WHERE period_year = ? AND period_quarter = ?
            ORDER BY staff_id, kpi_id
        """,
            [period_year, period_quarter],
        ).fetchall()
        return [self._to_evaluation(row) for row in result]

    def delete_for_period(self, period_year: int, period_quarter: int) -> None:
        """Delete every evaluation of a quarter."""
        self.conn.execute(
            "DELETE FROM evaluations WHERE period_year = ? AND period_quarter = ?",
            [period_year, period_quarter],
        )

    def _to_evaluation(self, row: tuple) -> Evaluation:
        return Evaluation(
            staff_id=row[0],
            kpi_id=row[1],
            period_year=row[2],
            period_quarter=row[3],
            calculated_value=row[4],
            score=row[5],
            target_value=row[6],
            weight=row[7],
            updated_at=row[8],
        )


class SummaryQueries:
    """SQL queries for per-period evaluation summaries."""

    def __init__(self, conn: duckdb.DuckDBPyConnection):
        self.conn = conn

    def upsert(self, summary: EvaluationSummary) -> EvaluationSummary:
        """Insert or replace the summary for a staff member and quarter."""
        self.conn.execute(
            """
            INSERT INTO evaluation_summaries (staff_id, period_year, period_quarter,
                                              total_weighted_score, max_possible_score,
                                              percentage_score, grade, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, current_timestamp)
            ON CONFLICT (staff_id, period_year, period_quarter) DO UPDATE SET
                total_weighted_score = excluded.total_weighted_score,
                max_possible_score = excluded.max_possible_score,
                percentage_score = excluded.percentage_score,
                grade = excluded.grade,
                updated_at = excluded.updated_at
        """,
            [
                summary.staff_id,
                summary.period_year,
                summary.period_quarter,
                summary.total_weighted_score,
                summary.max_possible_score,
                summary.percentage_score,
                summary.grade,
            ],
        )
        stored = self.find(summary.staff_id, summary.period_year, summary.period_quarter)
        return stored or summary

    def find(
        self, staff_id: int, period_year: int, period_quarter: int
    ) -> EvaluationSummary | None:
        """Get the summary of a staff member for a quarter."""
        row = self.conn.execute(
            f"""
            SELECT {_SUMMARY_COLUMNS} FROM evaluation_summaries
            WHERE staff_id = ? AND period_year = ? AND period_quarter = ?
        """,
            [staff_id, period_year, period_quarter],
        ).fetchone()
        return self._to_summary(row) if row else None

    def find_for_period(self, period_year: int, period_quarter: int) -> list[EvaluationSummary]:
        """Get every summary of a quarter, best percentage first."""
        result = self.conn.execute(
            f"""
            SELECT {_SUMMARY_COLUMNS} FROM evaluation_summaries
            WHERE period_year = ? AND period_quarter = ?
            ORDER BY percentage_score DESC, staff_id
        """,
            [period_year, period_quarter],
        ).fetchall()
        return [self._to_summary(row) for row in result]

    def delete_for_period(self, period_year: int, period_quarter: int) -> None:
        """Delete every summary of a quarter."""
        self.conn.execute(
            "DELETE FROM evaluation_summaries WHERE period_year = ? AND period_quarter = ?",
            [period_year, period_quarter],
        )

    def _to_summary(self, row: tuple) -> EvaluationSummary:
        return EvaluationSummary(
            staff_id=row[0],
            period_year=row[1],
            period_quarter=row[2],
            total_weighted_score=row[3],
            max_possible_score=row[4],
            percentage_score=row[5],
            grade=row[6],
            updated_at=row[7],
        )
