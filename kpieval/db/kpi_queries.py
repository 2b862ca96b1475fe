"""SQL queries for KPI definitions."""

from __future__ import annotations

import json
import logging
from typing import Any

import duckdb
from pydantic import ValidationError

from ..errors import InvalidKPIDefinitionError
from ..models import KPIDefinition
from ..services.authoring import validate_kpi

logger = logging.getLogger(__name__)

_KPI_COLUMNS = """
    id, name, description, weight, target_value,
    formula, raw_data_schema, scoring_criteria, active
"""


def _load_json(value: Any) -> Any:
    if isinstance(value, str):
        return json.loads(value)
    return value


def _dump_json(model: Any) -> str | None:
    if model is None:
        return None
    return json.dumps(model.model_dump(mode="json"))


class KPIQueries:
    """SQL queries for KPI definitions."""

    def __init__(self, conn: duckdb.DuckDBPyConnection):
        self.conn = conn

    def save(self, kpi: KPIDefinition) -> KPIDefinition:
        """Insert or replace a KPI definition.

        Raises:
            InvalidKPIDefinitionError: If the KPI does not pass validation
        """
        errors = validate_kpi(kpi)
        if errors:
            raise InvalidKPIDefinitionError(
                f"Invalid KPI definition {kpi.id}: {'; '.join(errors)}"
            )

        self.conn.execute(
            """
            INSERT INTO kpis (id, name, description, weight, target_value,
                              formula, raw_data_schema, scoring_criteria, active, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, current_timestamp)
            ON CONFLICT (id) DO UPDATE SET
                name = excluded.name,
                description = excluded.description,
                weight = excluded.weight,
                target_value = excluded.target_value,
                formula = excluded.formula,
                raw_data_schema = excluded.raw_data_schema,
                scoring_criteria = excluded.scoring_criteria,
                active = excluded.active,
                updated_at = excluded.updated_at
        """,
            [
                kpi.id,
                kpi.name,
                kpi.description,
                kpi.weight,
                kpi.target_value,
                _dump_json(kpi.formula),
                _dump_json(kpi.raw_data_schema),
                _dump_json(kpi.scoring_criteria),
                kpi.active,
            ],
        )
        logger.debug(f"Saved KPI {kpi.id} ({kpi.name})")
        return kpi

    def find_by_id(self, kpi_id: int) -> KPIDefinition | None:
        """Get a KPI definition by id."""
        row = self.conn.execute(
            f"SELECT {_KPI_COLUMNS} FROM kpis WHERE id = ?", [kpi_id]
        ).fetchone()
        if row is None:
            return None
        return self._to_kpi(row)

    def find_active(self) -> list[KPIDefinition]:
        """Get all active KPI definitions ordered by id."""
        result = self.conn.execute(
            f"SELECT {_KPI_COLUMNS} FROM kpis WHERE active ORDER BY id"
        ).fetchall()
        return [self._to_kpi(row) for row in result]

    def _to_kpi(self, row: tuple) -> KPIDefinition:
        """Validate a stored row into a KPI definition.

        Raises:
            InvalidKPIDefinitionError: If a stored JSON column is malformed
        """
        try:
            return KPIDefinition.model_validate({
                "id": row[0],
                "name": row[1],
                "description": row[2],
                "weight": row[3],
                "target_value": row[4],
                "formula": _load_json(row[5]),
                "raw_data_schema": _load_json(row[6]),
                "scoring_criteria": _load_json(row[7]),
                "active": row[8],
            })
        except (ValidationError, json.JSONDecodeError) as e:
            raise InvalidKPIDefinitionError(f"Stored KPI {row[0]} is invalid: {e}") from e
