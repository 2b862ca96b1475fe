import pytest

from kpieval.db import (
    EvaluationQueries,
    KPIQueries,
    RawDataQueries,
    SummaryQueries,
    create_schema,
    get_connection,
)
from kpieval.models import (
    Formula,
    FormulaKind,
    KPIDefinition,
    Period,
    RawDataRecord,
    ScoringCriteria,
    ScoringRange,
)
from kpieval.services import EvaluationService, derive_raw_data_schema

BUDGET_EXPRESSION = "(budget - actual_cost) / budget * 100"

BUDGET_RANGES = [
    ScoringRange(min=-5, max=0, score=1),
    ScoringRange(min=0, max=2, score=2),
    ScoringRange(min=2, max=4, score=3),
    ScoringRange(min=4, max=7, score=4),
    ScoringRange(min=7, max=15, score=5),
]


@pytest.fixture
def period():
    return Period(year=2024, quarter=2)


@pytest.fixture
def conn():
    connection = get_connection()
    create_schema(connection)
    yield connection
    connection.close()


@pytest.fixture
def kpi_queries(conn):
    return KPIQueries(conn)


@pytest.fixture
def raw_data_queries(conn):
    return RawDataQueries(conn)


@pytest.fixture
def evaluation_queries(conn):
    return EvaluationQueries(conn)


@pytest.fixture
def summary_queries(conn):
    return SummaryQueries(conn)


@pytest.fixture
def service(kpi_queries, raw_data_queries, evaluation_queries, summary_queries):
    return EvaluationService(
        kpi_store=kpi_queries,
        raw_data_store=raw_data_queries,
        evaluation_store=evaluation_queries,
        summary_store=summary_queries,
    )


@pytest.fixture
def budget_formula():
    return Formula(
        kind=FormulaKind.ARITHMETIC,
        expression=BUDGET_EXPRESSION,
        variables=["budget", "actual_cost"],
    )


@pytest.fixture
def make_kpi(budget_formula):
    def _make_kpi(**kw):
        data = dict(
            id=1,
            name="Budget variance",
            description="Share of the budget left unspent",
            weight=1.0,
            formula=budget_formula,
            raw_data_schema=derive_raw_data_schema(budget_formula),
            scoring_criteria=ScoringCriteria(ranges=BUDGET_RANGES),
        )
        data.update(kw)
        return KPIDefinition(**data)
    return _make_kpi


@pytest.fixture
def save_kpi(kpi_queries, make_kpi):
    def _save_kpi(**kw):
        return kpi_queries.save(make_kpi(**kw))
    return _save_kpi


@pytest.fixture
def submit_raw_data(raw_data_queries, period):
    def _submit(staff_id, kpi_id, values, period=period):
        return raw_data_queries.upsert_entry(
            RawDataRecord(
                staff_id=staff_id,
                kpi_id=kpi_id,
                period_year=period.year,
                period_quarter=period.quarter,
                values=values,
            )
        )
    return _submit
