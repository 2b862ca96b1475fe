import pytest

from kpieval.config import ConfigLoader
from kpieval.db import KPIQueries, RawDataQueries, SummaryQueries, create_schema, get_connection
from kpieval.main import main, parse_period
from kpieval.models import Period, RawDataRecord


@pytest.fixture(autouse=True)
def user_config_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(ConfigLoader, "USER_CONFIG_DIR", tmp_path / "user")


@pytest.fixture
def project(tmp_path, make_kpi):
    """Project directory with a seeded default database."""
    path = tmp_path / "project"
    path.mkdir()
    conn = get_connection(str(path / "kpieval.duckdb"))
    create_schema(conn)
    KPIQueries(conn).save(make_kpi())
    RawDataQueries(conn).upsert_entry(
        RawDataRecord(
            staff_id=7, kpi_id=1, period_year=2024, period_quarter=2,
            values={"budget": 150000, "actual_cost": 142000},
        )
    )
    conn.close()
    return path


def read_summaries(path):
    conn = get_connection(str(path / "kpieval.duckdb"))
    try:
        return SummaryQueries(conn).find_for_period(2024, 2)
    finally:
        conn.close()


@pytest.mark.parametrize("quarter", ["2", "Q2", "q2"])
def test_parse_period(quarter):
    assert parse_period("2024", quarter) == Period(year=2024, quarter=2)


@pytest.mark.parametrize("argv", [[], ["2024"], ["2024", "2", "dir", "extra"]])
def test_usage(argv, capsys):
    assert main(argv) == 2
    assert "usage:" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [["2024", "5"], ["year", "1"], ["2024", "Qx"]])
def test_invalid_period(argv, capsys):
    assert main(argv) == 2
    assert "invalid period" in capsys.readouterr().err


def test_recompute(project):
    assert main(["2024", "Q2", str(project)]) == 0
    summaries = read_summaries(project)
    assert [(s.staff_id, s.percentage_score, s.grade) for s in summaries] == [(7, 80.0, "B")]


def test_recompute_with_failures(project):
    conn = get_connection(str(project / "kpieval.duckdb"))
    RawDataQueries(conn).upsert_entry(
        RawDataRecord(staff_id=8, kpi_id=1, period_year=2024, period_quarter=2, values={"budget": 1})
    )
    conn.close()

    assert main(["2024", "2", str(project)]) == 1
    assert [s.staff_id for s in read_summaries(project)] == [7]
