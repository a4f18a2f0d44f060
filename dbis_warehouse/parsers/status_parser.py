"""
Generation Status sheet parser

Extracts per-unit availability and outage details (reason, expected and
actual completion, remarks) from the 11-column status sheet.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from dbis_warehouse.exceptions import StructuralError
from dbis_warehouse.models.data_models import Outage, StatusData, StatusUnit, UnitStatus
from dbis_warehouse.parsers.base_parser import BaseSheetParser, Grid, cell, forward_fill
from dbis_warehouse.utils.helpers import clean_text, normalize_identifier, parse_excel_date, parse_number


class StatusParser(BaseSheetParser):
    """Parser for the Generation Status sheet"""

    SHEET_TYPE = "Generation Status"

    def find_sheet(self, sheet_names: Sequence[str]) -> Optional[str]:
        """First sheet whose name contains one of the configured names, in priority order"""
        for candidate in self.layouts.status.sheet_names:
            for name in sheet_names:
                if candidate.lower() in name.lower():
                    return name
        return None

    def is_summary_row(self, row: Sequence[Any]) -> bool:
        first = clean_text(cell(row, self.layouts.status.columns.station))
        if first is None:
            return False
        lowered = first.lower()
        return any(keyword in lowered for keyword in self.layouts.status.summary_keywords)

    def contains_outage_text(self, text: Optional[str]) -> bool:
        if not text:
            return False
        lowered = text.lower()
        return any(keyword in lowered for keyword in self.layouts.status.outage_keywords)

    def _parse(self, sheets: Dict[str, Grid], report_date: Optional[date] = None) -> StatusData:
        layout = self.layouts.status
        cols = layout.columns

        sheet_name = self.find_sheet(list(sheets.keys()))
        if sheet_name is None:
            raise StructuralError("Generation Status sheet not found", artifact="sheet")

        grid = sheets[sheet_name]
        if len(grid) < layout.data_start_row:
            raise StructuralError(f"{sheet_name} sheet has insufficient rows", artifact="rows")

        first = layout.data_start_row - 1
        indexed_rows = [
            (index + 1, row)
            for index, row in enumerate(grid[first:min(len(grid), layout.data_end_row)], start=first)
            if row and not self.is_summary_row(row)
        ]
        stations = forward_fill((cell(row, cols.station) for _, row in indexed_rows), self.normalize_station)

        units: List[StatusUnit] = []
        outages: List[Outage] = []

        for (row_number, row), station in zip(indexed_rows, stations):
            unit_number = normalize_identifier(cell(row, cols.unit_number))
            if station is None or unit_number is None:
                continue

            available = parse_number(cell(row, cols.available_mw))
            dispatched = parse_number(cell(row, cols.dispatched_mw))
            reason = clean_text(cell(row, cols.outage_reason))
            remarks = clean_text(cell(row, cols.remarks))
            expected = parse_excel_date(cell(row, cols.expected_completion), self.settings.DATE_FORMATS)
            actual = parse_excel_date(cell(row, cols.actual_completion), self.settings.DATE_FORMATS)
            engine = self.normalize_engine(cell(row, cols.engine))

            is_offline = available is None or available == 0
            remarks_flag = self.contains_outage_text(remarks)
            is_outage = is_offline or reason is not None or remarks_flag

            units.append(StatusUnit(
                row_number=row_number,
                station=station,
                engine=engine,
                unit_number=unit_number,
                installed_capacity_mva=parse_number(cell(row, cols.installed_mva)),
                derated_capacity_mw=parse_number(cell(row, cols.derated_mw)),
                available_mw=available or 0.0,
                dispatched_mw=dispatched or 0.0,
                outage_reason=reason,
                expected_completion=expected,
                actual_completion=actual,
                remarks=remarks,
                status=UnitStatus.OFFLINE if is_offline else UnitStatus.ONLINE,
                is_outage=is_outage,
            ))

            if is_outage:
                outages.append(Outage(
                    station=station,
                    engine=engine,
                    unit_number=unit_number,
                    available_mw=available or 0.0,
                    dispatched_mw=dispatched or 0.0,
                    reason=reason or (remarks if remarks_flag else None),
                    expected_completion=expected,
                    actual_completion=actual,
                    remarks=remarks,
                    is_resolved=actual is not None,
                    report_date=report_date,
                ))

        offline = sum(1 for u in units if u.status == UnitStatus.OFFLINE)
        logger.info(
            f"Parsed {len(units)} status units from '{sheet_name}': "
            f"{len(units) - offline} online, {offline} offline, {len(outages)} outages"
        )

        return StatusData(sheet_name=sheet_name, units=units, outages=outages)
