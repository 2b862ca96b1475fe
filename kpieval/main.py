"""Entry point for recomputing a quarter's KPI evaluations."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .config import ConfigLoader, LoggingSettings
from .db import (
    EvaluationQueries,
    KPIQueries,
    RawDataQueries,
    SummaryQueries,
    create_schema,
    get_connection,
)
from .models import Period
from .services import EvaluationService

logger = logging.getLogger(__name__)

USAGE = "usage: kpieval-recompute YEAR QUARTER [PROJECT_DIR]"


def configure_logging(settings: LoggingSettings) -> None:
    """Configure the root logger from logging settings."""
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=settings.format)


def parse_period(year: str, quarter: str) -> Period:
    """Build a period from command line year and quarter ("2" or "Q2")."""
    return Period(year=int(year), quarter=int(quarter.upper().removeprefix("Q")))


def main(argv: list[str] | None = None) -> int:
    """Recompute every evaluation and summary of a quarter.

    Returns:
        Process exit code: 0 on success, 1 when any key failed, 2 on bad usage
    """
    args = sys.argv[1:] if argv is None else argv
    if len(args) not in (2, 3):
        print(USAGE, file=sys.stderr)
        return 2

    try:
        period = parse_period(args[0], args[1])
    except (ValueError, ValidationError):
        print(f"invalid period: {args[0]} {args[1]}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return 2

    project_path = Path(args[2]).resolve() if len(args) == 3 else Path.cwd()
    loader = ConfigLoader(project_path)
    config = loader.load()
    configure_logging(config.logging)

    conn = get_connection(loader.database_path(config))
    try:
        create_schema(conn)
        service = EvaluationService(
            kpi_store=KPIQueries(conn),
            raw_data_store=RawDataQueries(conn),
            evaluation_store=EvaluationQueries(conn),
            summary_store=SummaryQueries(conn),
        )
        result = service.recompute_period(period)
    finally:
        conn.close()

    for summary in result.summaries:
        logger.info(
            f"Staff {summary.staff_id}: {summary.percentage_score}% "
            f"({summary.total_weighted_score}/{summary.max_possible_score}) grade {summary.grade}"
        )
    for failure in result.failures:
        target = f"KPI {failure.kpi_id}" if failure.kpi_id is not None else "summary"
        logger.error(f"Staff {failure.staff_id} {target}: {failure.error}")

    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
