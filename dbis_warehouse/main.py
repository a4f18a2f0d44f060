#!/usr/bin/env python3
"""
Command-line entry point for the DBIS generation report warehouse

    dbis-warehouse ingest <workbook.xlsx> [--date YYYY-MM-DD] [--output report.json]
    dbis-warehouse kpi <kpis.csv> [--output kpis.json]
    dbis-warehouse forecast [--date YYYY-MM-DD] [--output forecasts.json]
"""

import argparse
import json
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from dbis_warehouse.config.settings import settings
from dbis_warehouse.database.connection import DatabaseConnection, SqlHistorySource
from dbis_warehouse.exceptions import ForecastingError
from dbis_warehouse.forecasting.analytics_client import HttpAnalyticsBackend
from dbis_warehouse.forecasting.engine import ForecastingEngine
from dbis_warehouse.ingestion import ingest_file
from dbis_warehouse.parsers.kpi_csv_parser import KpiCsvParser
from dbis_warehouse.utils.helpers import report_date_for


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None):
    """Remove any existing handlers and add our own"""
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level or settings.LOG_LEVEL,
    )
    log_file = log_file or settings.LOG_FILE
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            rotation="10 MB",
            retention="7 days",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level="DEBUG",
        )


def resolve_date(value: Optional[str]) -> date:
    """Explicit --date, otherwise yesterday in utility local time"""
    if value:
        return date.fromisoformat(value)
    return report_date_for(datetime.now(timezone.utc))


def write_output(payload: dict, output: Optional[str]):
    text = json.dumps(payload, indent=2, ensure_ascii=False, default=str)
    if output:
        Path(output).parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info(f"Saved output to {output}")
    else:
        print(text)


def run_ingest(args) -> int:
    path = Path(args.file)
    if not path.exists():
        logger.error(f"Workbook not found: {path}")
        return 1

    target_date = resolve_date(args.date)
    logger.info(f"Starting ingestion of {path} for {target_date}")
    result = ingest_file(path, target_date)

    write_output(result.model_dump(mode="json"), args.output)
    if not result.success:
        logger.error(f"Ingestion failed: {result.error}")
        return 1
    return 0


def run_kpi(args) -> int:
    path = Path(args.file)
    if not path.exists():
        logger.error(f"CSV file not found: {path}")
        return 1

    result = KpiCsvParser().parse(path, filename=path.name)
    write_output(result.model_dump(mode="json"), args.output)
    return 0 if result.success else 1


def run_forecast(args) -> int:
    reference_date = resolve_date(args.date)
    connection = DatabaseConnection(args.database_url, create_tables=False)
    backend = HttpAnalyticsBackend() if settings.ANALYTICS_BACKEND_URL else None
    engine = ForecastingEngine(SqlHistorySource(connection), backend=backend)

    try:
        bundle = engine.run_all(reference_date)
    except ForecastingError as e:
        logger.error(f"Forecasting failed: {e}")
        return 1
    except SQLAlchemyError as e:
        logger.error(f"Could not read forecast history: {e}")
        return 1

    payload = bundle.model_dump(mode="json")
    payload["records"] = [r.model_dump(mode="json") for r in bundle.to_records()]
    write_output(payload, args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dbis-warehouse", description="DBIS generation report warehouse")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--log-file", default=None, help="Also log to this file (rotated)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Parse a DBIS workbook for one report date")
    ingest.add_argument("file", help="Path to the .xlsx workbook")
    ingest.add_argument("--date", help="Report date (YYYY-MM-DD); defaults to yesterday, utility local time")
    ingest.add_argument("--output", help="Write the JSON result here instead of stdout")
    ingest.set_defaults(handler=run_ingest)

    kpi = subparsers.add_parser("kpi", help="Parse a monthly KPI CSV export")
    kpi.add_argument("file", help="Path to the CSV file")
    kpi.add_argument("--output", help="Write the JSON result here instead of stdout")
    kpi.set_defaults(handler=run_kpi)

    forecast = subparsers.add_parser("forecast", help="Compute forecasts from stored history")
    forecast.add_argument("--date", help="Reference date (YYYY-MM-DD); defaults to yesterday, utility local time")
    forecast.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    forecast.add_argument("--output", help="Write the JSON result here instead of stdout")
    forecast.set_defaults(handler=run_forecast)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_file)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
