"""DuckDB storage for KPIs, raw data and evaluations."""

from .evaluation_queries import EvaluationQueries, SummaryQueries
from .kpi_queries import KPIQueries
from .raw_data_queries import RawDataQueries
from .schema import create_schema, drop_schema, get_connection

__all__ = [
    "create_schema",
    "drop_schema",
    "get_connection",
    "EvaluationQueries",
    "KPIQueries",
    "RawDataQueries",
    "SummaryQueries",
]
