"""
Schedule sheet parser

The Schedule sheet carries static unit metadata in columns A-F and one
column of available MW per day from column G onwards:
- Header row: date per daily column
- Unit rows: one generating unit per row, station name only on the first
  row of each station block
- Summary rows: system KPIs at fixed row positions
"""

import re
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from dbis_warehouse.exceptions import StructuralError
from dbis_warehouse.models.data_models import (
    DataQualityWarning,
    ReportStats,
    ReportSummary,
    ScheduleData,
    StationAggregate,
    Unit,
    UnitStatus,
    WarningCode,
)
from dbis_warehouse.parsers.base_parser import BaseSheetParser, Grid, cell, forward_fill
from dbis_warehouse.parsers.date_locator import locate_date_column
from dbis_warehouse.utils.helpers import (
    is_blank,
    is_error_cell,
    normalize_identifier,
    parse_number,
    round_or_none,
)

PEAK_PATTERN = re.compile(r"^([\d.]+)\s*\(([\d.]+)\)$")


def parse_peak_demand(value: Any) -> Tuple[Optional[float], Optional[float]]:
    """
    Split a peak demand cell into (on_bars, suppressed).

    "202.08(225.58)" -> (202.08, 225.58); "181" -> (181.0, None); "-" -> (None, None)
    """
    if is_blank(value) or str(value).strip() == "-":
        return None, None

    text = str(value).strip()
    match = PEAK_PATTERN.match(text)
    if match:
        try:
            return float(match.group(1)), float(match.group(2))
        except ValueError:
            return None, None

    return parse_number(value), None


def classify_available(value: Any) -> Tuple[Optional[float], UnitStatus]:
    """Status rule: >0 online, <=0 offline, missing or unparseable no_data"""
    available = parse_number(value)
    if available is None:
        return None, UnitStatus.NO_DATA
    return available, UnitStatus.ONLINE if available > 0 else UnitStatus.OFFLINE


def aggregate_stations(units: List[Unit]) -> List[StationAggregate]:
    """Roll units up by station in first-seen order"""
    stations: Dict[str, StationAggregate] = {}

    for unit in units:
        s = stations.setdefault(unit.station, StationAggregate(station=unit.station))
        s.total_units += 1
        s.total_derated_capacity_mw += unit.derated_capacity_mw or 0

        if unit.status == UnitStatus.ONLINE:
            s.units_online += 1
            s.total_available_mw += unit.available_mw or 0
        elif unit.status == UnitStatus.OFFLINE:
            s.units_offline += 1
        else:
            s.units_no_data += 1

    for s in stations.values():
        if s.total_derated_capacity_mw > 0:
            s.station_utilization_pct = round(s.total_available_mw / s.total_derated_capacity_mw * 100, 2)
        s.total_derated_capacity_mw = round(s.total_derated_capacity_mw, 4)
        s.total_available_mw = round(s.total_available_mw, 4)

    return list(stations.values())


class ScheduleParser(BaseSheetParser):
    """Parser for the wide Schedule sheet"""

    SHEET_TYPE = "Schedule"

    def _parse(self, sheets: Dict[str, Grid], target_date: date) -> ScheduleData:
        layout = self.layouts.schedule

        grid = sheets.get(layout.sheet_name)
        if grid is None:
            raise StructuralError(f"{layout.sheet_name} sheet not found", artifact="sheet")

        logger.info(f"Parsing {layout.sheet_name} sheet: {len(grid)} rows")

        header_index = layout.date_header_row - 1
        if header_index >= len(grid) or not grid[header_index]:
            raise StructuralError(
                f"Date header row (row {layout.date_header_row}) not found", artifact="date_header"
            )

        try:
            location = locate_date_column(
                grid[header_index], target_date, layout.columns.data_start, self.settings.DATE_FORMATS
            )
        except StructuralError as e:
            raise StructuralError(f"{e} (row {layout.date_header_row})", artifact=e.artifact)

        if not location.exact_match:
            self.add_warning(DataQualityWarning(
                type=WarningCode.DATE_MISMATCH,
                message=f"Expected {location.expected_date} but found {location.date}",
                details={"detected_date": location.date.isoformat(), "expected_date": location.expected_date.isoformat()},
            ))

        logger.info(f"Found data column {location.column_letter} for {location.date} (exact match: {location.exact_match})")

        units = self.parse_units(grid, location.column)
        stations = aggregate_stations(units)
        summary = self.parse_summary(grid, location.column, stations)

        online = sum(1 for u in units if u.status == UnitStatus.ONLINE)
        offline = sum(1 for u in units if u.status == UnitStatus.OFFLINE)
        no_data = len(units) - online - offline

        if units and no_data > len(units) * self.settings.HIGH_NO_DATA_RATIO:
            self.add_warning(DataQualityWarning(
                type=WarningCode.HIGH_NO_DATA,
                message=f"{no_data} of {len(units)} units have no data (>{self.settings.HIGH_NO_DATA_RATIO:.0%})",
                details={"count": no_data, "total": len(units)},
            ))

        stats = ReportStats(
            total_units=len(units),
            units_online=online,
            units_offline=offline,
            units_no_data=no_data,
            total_stations=len(stations),
            total_available_mw=round(sum(s.total_available_mw for s in stations), 2),
            total_derated_mw=round(sum(s.total_derated_capacity_mw for s in stations), 2),
            scanned_columns=location.scanned_columns,
        )

        logger.info(f"Parsed {len(units)} units in {len(stations)} stations: {online} online, {offline} offline, {no_data} no data")

        return ScheduleData(
            date=location.date,
            date_column=location.column_letter,
            exact_date_match=location.exact_match,
            expected_date=None if location.exact_match else location.expected_date,
            units=units,
            stations=stations,
            summary=summary,
            stats=stats,
        )

    def parse_units(self, grid: Grid, data_column: int) -> List[Unit]:
        """Parse unit rows, resolving station labels by forward-fill"""
        layout = self.layouts.schedule
        cols = layout.columns
        first = layout.unit_start_row - 1
        rows = grid[first:layout.unit_end_row]

        stations = forward_fill((cell(row, cols.station) for row in rows), self.normalize_station)

        units = []
        error_cells = []
        for offset, (row, station) in enumerate(zip(rows, stations)):
            row_number = first + offset + 1
            unit_number = normalize_identifier(cell(row, cols.unit_number))
            if station is None or unit_number is None:
                continue

            raw_available = cell(row, data_column)
            if is_error_cell(raw_available):
                error_cells.append(row_number)
            available, status = classify_available(raw_available)

            derated = parse_number(cell(row, cols.derated_mw))
            utilization = None
            if available is not None and derated:
                utilization = round(available / derated * 100, 2)

            units.append(Unit(
                row_number=row_number,
                station=station,
                engine=self.normalize_engine(cell(row, cols.engine)),
                unit_number=unit_number,
                installed_capacity_mva=parse_number(cell(row, cols.installed_mva)),
                installed_capacity_mw=parse_number(cell(row, cols.installed_mw)),
                derated_capacity_mw=derated,
                available_mw=available,
                status=status,
                utilization_pct=utilization,
            ))

        if error_cells:
            self.add_warning(DataQualityWarning(
                type=WarningCode.ERROR_CELLS,
                message=f"{len(error_cells)} unit cells hold spreadsheet errors",
                details={"rows": error_cells},
            ))

        return units

    def parse_summary(self, grid: Grid, data_column: int, stations: List[StationAggregate]) -> ReportSummary:
        """Read system KPIs from the fixed summary rows and derive the rest"""
        layout = self.layouts.schedule

        def raw(field: str) -> Any:
            index = layout.summary_rows[field] - 1
            return cell(grid[index], data_column) if index < len(grid) else None

        values: Dict[str, Optional[float]] = {}
        for field in layout.summary_rows:
            if field in layout.peak_rows:
                on_bars, suppressed = parse_peak_demand(raw(field))
                values[f"{field}_on_bars_mw"] = on_bars
                values[f"{field}_suppressed_mw"] = suppressed
            else:
                values[field] = parse_number(raw(field))

        if layout.solar_rows:
            values["total_renewable_mwp"] = sum(values.get(field) or 0 for field in layout.solar_rows)

        total_available = sum(s.total_available_mw for s in stations)
        total_derated = sum(s.total_derated_capacity_mw for s in stations)

        values["system_utilization_pct"] = (
            round(total_available / total_derated * 100, 2) if total_derated > 0 else None
        )
        evening_peak = values.get("evening_peak_on_bars_mw")
        values["reserve_margin_pct"] = (
            round_or_none((total_available - evening_peak) / total_available * 100, 2)
            if evening_peak and total_available > 0 else None
        )

        return ReportSummary(**{k: v for k, v in values.items() if k in ReportSummary.model_fields})
