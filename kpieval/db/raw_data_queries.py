"""SQL queries for submitted raw data."""

from __future__ import annotations

import json

import duckdb
from pydantic import ValidationError

from ..errors import InvalidRawDataError
from ..models import RawDataRecord


class RawDataQueries:
    """SQL queries for raw data entries."""

    def __init__(self, conn: duckdb.DuckDBPyConnection):
        self.conn = conn

    def upsert_entry(self, record: RawDataRecord) -> RawDataRecord:
        """Insert or replace the raw data of one staff member, KPI and quarter."""
        values = record.model_dump(mode="json")["values"]
        self.conn.execute(
            """
            INSERT INTO raw_data_entries (staff_id, kpi_id, period_year, period_quarter, data_values, updated_at)
            VALUES (?, ?, ?, ?, ?, current_timestamp)
            ON CONFLICT (staff_id, kpi_id, period_year, period_quarter) DO UPDATE SET
                data_values = excluded.data_values,
                updated_at = excluded.updated_at
        """,
            [
                record.staff_id,
                record.kpi_id,
                record.period_year,
                record.period_quarter,
                json.dumps(values),
            ],
        )
        return record

    def find(
        self, staff_id: int, kpi_id: int, period_year: int, period_quarter: int
    ) -> RawDataRecord | None:
        """Get the raw data for one key."""
        row = self.conn.execute(
            """
            SELECT staff_id, kpi_id, period_year, period_quarter, data_values
            FROM raw_data_entries
            WHERE staff_id = ? AND kpi_id = ? AND period_year = ? AND period_quarter = ?
        """,
            [staff_id, kpi_id, period_year, period_quarter],
        ).fetchone()
        if row is None:
            return None
        return self._to_record(row)

    def find_for_period(self, period_year: int, period_quarter: int) -> list[RawDataRecord]:
        """Get all raw data of a quarter ordered by staff and KPI."""
        result = self.conn.execute(
            """
            SELECT staff_id, kpi_id, period_year, period_quarter, data_values
            FROM raw_data_entries
            WHERE period_year = ? AND period_quarter = ?
            ORDER BY staff_id, kpi_id
        """,
            [period_year, period_quarter],
        ).fetchall()
        return [self._to_record(row) for row in result]

    def _to_record(self, row: tuple) -> RawDataRecord:
        values = row[4]
        try:
            if isinstance(values, str):
                values = json.loads(values)
            return RawDataRecord(
                staff_id=row[0],
                kpi_id=row[1],
                period_year=row[2],
                period_quarter=row[3],
                values=values,
            )
        except (ValidationError, json.JSONDecodeError) as e:
            raise InvalidRawDataError(
                f"Stored raw data for staff {row[0]}, KPI {row[1]} is invalid: {e}"
            ) from e
