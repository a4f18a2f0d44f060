"""Tests for the command-line entry point."""

import json
from datetime import date, datetime, timezone

from sqlalchemy import create_engine, inspect

from dbis_warehouse.database.connection import DatabaseConnection
from dbis_warehouse.main import build_parser, main
from dbis_warehouse.utils.helpers import report_date_for
from tests.conftest import add_report


def test_report_date_is_yesterday_in_local_time():
    # 02:00 UTC is still the previous evening at UTC-4
    assert report_date_for(datetime(2025, 1, 16, 2, 0, tzinfo=timezone.utc), -4) == date(2025, 1, 14)
    assert report_date_for(datetime(2025, 1, 16, 12, 0, tzinfo=timezone.utc), -4) == date(2025, 1, 15)


def test_ingest_arguments():
    args = build_parser().parse_args(["ingest", "report.xlsx", "--date", "2025-01-15"])

    assert args.command == "ingest"
    assert args.date == "2025-01-15"


def test_kpi_command_writes_json(tmp_path):
    csv_path = tmp_path / "kpis.csv"
    csv_path.write_text("Date,KPI,Sum of Actual\n2025-01-31,Peak Demand DBIS,210\n", encoding="utf-8")
    output = tmp_path / "out" / "kpis.json"

    assert main(["kpi", str(csv_path), "--output", str(output)]) == 0

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["success"] is True
    assert payload["data"][0]["report_month"] == "2025-01-01"


def test_missing_workbook(tmp_path):
    assert main(["ingest", str(tmp_path / "missing.xlsx"), "--date", "2025-01-15"]) == 1


def test_forecast_with_empty_database(tmp_path):
    database_url = f"sqlite:///{tmp_path / 'history.db'}"

    assert main(["forecast", "--date", "2025-01-15", "--database-url", database_url]) == 1
    # forecasting never creates the warehouse tables
    assert inspect(create_engine(database_url)).get_table_names() == []


def test_forecast_reads_stored_history(tmp_path):
    database_url = f"sqlite:///{tmp_path / 'history.db'}"
    connection = DatabaseConnection(database_url)
    with connection.get_session() as session:
        add_report(session, date(2025, 1, 10), peak=205.0)
        add_report(session, date(2025, 1, 14), peak=210.0)
        session.commit()
    output = tmp_path / "forecasts.json"

    assert main(["forecast", "--date", "2025-01-15", "--database-url", database_url, "--output", str(output)]) == 0

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["reference_date"] == "2025-01-15"
    assert payload["scenario"]["is_fallback"] is True
    assert any(r["is_fallback"] for r in payload["records"])
