"""Pytest configuration and shared fixtures."""

from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest
from openpyxl import Workbook

from dbis_warehouse.config.layouts import load_layouts
from dbis_warehouse.models.data_models import (
    HistoricalSnapshot,
    MonthlyKpiSnapshot,
    ReportSummary,
    StationAggregate,
    Unit,
    UnitStatus,
)
from dbis_warehouse.models.database_schema import DailyStations, DailySummary, DailyUnits, Uploads
from dbis_warehouse.utils.helpers import add_months

REPORT_DATE = date(2025, 1, 15)

SCHEDULE_WIDTH = 9
STATUS_WIDTH = 11

# (station, engine, unit, MVA, installed MW, derated MW, [13 Jan, 14 Jan, 15 Jan])
SCHEDULE_UNITS = [
    ("SEI", "Wartisla", 1, 5.0, 4.0, 3.5, [3.0, 3.2, 3.3]),
    (None, "Wartsila", 2, 5.0, 4.0, 3.5, [0, 3.0, 0]),
    ("Canefield", "MAN", 1, 10.0, 8.0, 7.5, [7.0, 7.1, 7.2]),
    (None, "MAN", 2, 10.0, 8.0, 7.5, [None, None, None]),
    (None, None, None, None, None, None, [None, None, None]),
    ("garden of eden", "CAT", "3", 2.0, 1.6, 1.5, [1.5, 1.4, "#N/A"]),
]

SCHEDULE_SUMMARY = {
    69: 230.5,
    70: 210.0,
    71: 20.5,
    72: 12.3,
    73: 200.0,
    74: -10.0,
    75: 3.0,
    76: 0.5,
    77: 1.0,
    78: 4.5,
    79: 235.0,
    80: "202.08(225.58)",
    81: "181",
    82: 190.0,
    83: 226.0,
}


def _blank_rows(count: int, width: int) -> List[List[Any]]:
    return [[None] * width for _ in range(count)]


def build_schedule_grid(header_dates: Optional[List[Any]] = None, units=None, summary=None) -> List[List[Any]]:
    """Schedule sheet grid: header on row 4, units from row 5, summary rows 69-83"""
    header_dates = header_dates if header_dates is not None else [
        datetime(2025, 1, 13), datetime(2025, 1, 14), datetime(2025, 1, 15)
    ]
    units = SCHEDULE_UNITS if units is None else units
    summary = SCHEDULE_SUMMARY if summary is None else summary
    width = max(SCHEDULE_WIDTH, 6 + len(header_dates))

    grid = _blank_rows(83, width)
    grid[0][0] = "DBIS GENERATION SCHEDULE"
    grid[3][:6] = ["Station", "Engine", "Unit No.", "MVA", "Installed MW", "Derated MW"]
    for offset, value in enumerate(header_dates):
        grid[3][6 + offset] = value

    for index, (station, engine, unit, mva, mw, derated, daily) in enumerate(units):
        row = grid[4 + index]
        row[:6] = [station, engine, unit, mva, mw, derated]
        for offset, value in enumerate(daily):
            row[6 + offset] = value

    for row_number, value in summary.items():
        grid[row_number - 1][0] = f"Summary row {row_number}"
        grid[row_number - 1][8] = value

    return grid


def build_status_grid() -> List[List[Any]]:
    """Generation Status sheet grid with data rows from row 5"""
    grid = _blank_rows(4, STATUS_WIDTH)
    grid[0][2:5] = ["Unit No.", "Installed Capacity (MVA)", "Installed /derated Capacity (MW)"]
    grid[3][7:11] = ["Reason for Outage", "Expected Completion Date", "Actual Completion Date", "Remarks"]
    grid += [
        ["SEI", "Wartsila", 1, 5.0, 3.5, 3.3, 3.0, None, None, None, None],
        [None, "Wartsila", 2, 5.0, 3.5, 0, 0, "Crankshaft failure", "2025-02-01", None, None],
        ["Canefield", "MAN", 1, 10.0, 7.5, 7.2, 7.0, None, None, None, "Scheduled maintenance next week"],
        ["Total capacity", None, None, None, 18.5, 10.5, None, None, None, None, None],
        [None, "MAN", 2, 10.0, 7.5, None, None, None, None, "2025-01-10", None],
        ["Unknown Plant", "X", None, None, None, None, None, None, None, None, None],
        ["Versailles", "CAT", 1, 2.0, 1.5, 2.0, 1.8, None, None, None, "n/a"],
    ]
    return grid


@pytest.fixture
def layouts():
    """Sheet layouts from the packaged layout file."""
    return load_layouts()


@pytest.fixture
def schedule_grid():
    return build_schedule_grid()


@pytest.fixture
def status_grid():
    return build_status_grid()


@pytest.fixture
def workbook(schedule_grid, status_grid) -> Dict[str, List[List[Any]]]:
    """Both sheets of a DBIS workbook."""
    return {"Schedule": schedule_grid, "Generation Status": status_grid}


def make_unit(station: str, unit_number: str, status: UnitStatus, available: Optional[float] = None,
              derated: float = 5.0, row_number: int = 5) -> Unit:
    return Unit(
        row_number=row_number,
        station=station,
        engine="Wartsila",
        unit_number=unit_number,
        derated_capacity_mw=derated,
        available_mw=available if available is not None else (derated if status == UnitStatus.ONLINE else 0.0),
        status=status,
    )


def make_snapshot(report_date: date, evening_peak: Optional[float] = None, suppressed: Optional[float] = None,
                  capacity: Optional[float] = None, stations=(), units=()) -> HistoricalSnapshot:
    return HistoricalSnapshot(
        report_date=report_date,
        summary=ReportSummary(
            evening_peak_on_bars_mw=evening_peak,
            evening_peak_suppressed_mw=suppressed,
            total_dbis_capacity_mw=capacity,
        ),
        stations=list(stations),
        units=list(units),
    )


def make_station(name: str, units_online: int, total_units: int = 2, utilization: Optional[float] = None) -> StationAggregate:
    return StationAggregate(
        station=name,
        total_units=total_units,
        units_online=units_online,
        units_offline=total_units - units_online,
        station_utilization_pct=utilization,
    )


def daily_series(start: date, values: List[Optional[float]], **kwargs) -> List[HistoricalSnapshot]:
    """One snapshot per day with the given evening on-bars peaks"""
    return [
        make_snapshot(start + timedelta(days=i), evening_peak=value, **kwargs)
        for i, value in enumerate(values)
    ]


def monthly_series(start: date, values: Dict[str, List[Optional[float]]]) -> List[MonthlyKpiSnapshot]:
    """Monthly KPI snapshots; None entries are left out of that month"""
    length = max(len(v) for v in values.values())
    snapshots = []
    for i in range(length):
        month_values = {
            name: series[i]
            for name, series in values.items()
            if i < len(series) and series[i] is not None
        }
        snapshots.append(MonthlyKpiSnapshot(report_month=add_months(start, i), values=month_values))
    return snapshots


def write_workbook(path, sheets: Dict[str, List[List[Any]]]):
    """Save sheet grids as a real .xlsx file"""
    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, grid in sheets.items():
        sheet = workbook.create_sheet(name)
        for row in grid:
            sheet.append(row)
    workbook.save(path)
    return path


def add_report(session, report_date, status="confirmed", peak=200.0):
    upload = Uploads(report_date=report_date, filename=f"{report_date}.xlsx", status=status)
    session.add(upload)
    session.flush()
    session.add_all([
        DailySummary(
            upload_id=upload.id,
            report_date=report_date,
            evening_peak_on_bars_mw=peak,
            evening_peak_suppressed_mw=peak + 20,
            total_dbis_capacity_mw=230.0,
        ),
        DailyStations(
            upload_id=upload.id,
            report_date=report_date,
            station="SEI",
            total_units=2,
            units_online=1,
            units_offline=1,
            total_derated_capacity_mw=7.0,
            total_available_mw=3.3,
            station_utilization_pct=47.14,
        ),
        DailyUnits(
            upload_id=upload.id,
            report_date=report_date,
            row_number=5,
            station="SEI",
            engine="Wartsila",
            unit_number="1",
            derated_capacity_mw=3.5,
            available_mw=3.3,
            status="online",
        ),
    ])
