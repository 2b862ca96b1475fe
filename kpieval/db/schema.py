"""DuckDB schema definitions."""

import duckdb


def get_connection(path: str = ":memory:") -> duckdb.DuckDBPyConnection:
    """Get a DuckDB connection."""
    return duckdb.connect(path)


def create_schema(conn: duckdb.DuckDBPyConnection) -> None:
    """Create DuckDB tables for KPIs, raw data and evaluations."""

    # KPI definitions (formula, schema and criteria stored as JSON)
    conn.execute("""
        CREATE TABLE IF NOT EXISTS kpis (
            id INTEGER PRIMARY KEY,
            name VARCHAR NOT NULL,
            description VARCHAR,
            weight DOUBLE NOT NULL DEFAULT 1.0,
            target_value DOUBLE,
            formula JSON,
            raw_data_schema JSON,
            scoring_criteria JSON,
            active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMP DEFAULT current_timestamp,
            updated_at TIMESTAMP DEFAULT current_timestamp
        )
    """)

    # Raw data submitted per staff member, KPI and quarter
    conn.execute("""
        CREATE TABLE IF NOT EXISTS raw_data_entries (
            staff_id INTEGER NOT NULL,
            kpi_id INTEGER NOT NULL,
            period_year INTEGER NOT NULL,
            period_quarter INTEGER NOT NULL,
            data_values JSON NOT NULL,
            created_at TIMESTAMP DEFAULT current_timestamp,
            updated_at TIMESTAMP DEFAULT current_timestamp,
            PRIMARY KEY(staff_id, kpi_id, period_year, period_quarter)
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS evaluations (
            staff_id INTEGER NOT NULL,
            kpi_id INTEGER NOT NULL,
            period_year INTEGER NOT NULL,
            period_quarter INTEGER NOT NULL,
            calculated_value DOUBLE NOT NULL,
            score INTEGER NOT NULL,
            target_value DOUBLE,
            weight DOUBLE NOT NULL,
            created_at TIMESTAMP DEFAULT current_timestamp,
            updated_at TIMESTAMP DEFAULT current_timestamp,
            PRIMARY KEY(staff_id, kpi_id, period_year, period_quarter)
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS evaluation_summaries (
            staff_id INTEGER NOT NULL,
            period_year INTEGER NOT NULL,
            period_quarter INTEGER NOT NULL,
            total_weighted_score DOUBLE NOT NULL,
            max_possible_score DOUBLE NOT NULL,
            percentage_score DOUBLE NOT NULL,
            grade VARCHAR NOT NULL,
            created_at TIMESTAMP DEFAULT current_timestamp,
            updated_at TIMESTAMP DEFAULT current_timestamp,
            PRIMARY KEY(staff_id, period_year, period_quarter)
        )
    """)


def drop_schema(conn: duckdb.DuckDBPyConnection) -> None:
    """Drop all tables."""
    conn.execute("DROP TABLE IF EXISTS evaluation_summaries")
    conn.execute("DROP TABLE IF EXISTS evaluations")
    conn.execute("DROP TABLE IF EXISTS raw_data_entries")
    conn.execute("DROP TABLE IF EXISTS kpis")
