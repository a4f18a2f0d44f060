"""
Report ingestion: Schedule + Generation Status sheets for one report date

Runs schedule parsing, status parsing, outage matching and report
validation over a workbook given either as grids or as an .xlsx path.
"""

from datetime import date
from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd
from loguru import logger

from dbis_warehouse.config.layouts import SheetLayouts
from dbis_warehouse.config.settings import Settings, settings as default_settings
from dbis_warehouse.models.data_models import (
    DataQualityWarning,
    IngestionResult,
    ParsedReport,
    WarningCode,
)
from dbis_warehouse.parsers.base_parser import Grid
from dbis_warehouse.parsers.outage_matcher import match_outages_to_units
from dbis_warehouse.parsers.parser_factory import ParserFactory
from dbis_warehouse.parsers.schedule_parser import ScheduleParser
from dbis_warehouse.parsers.status_parser import StatusParser
from dbis_warehouse.validation.data_validator import DataValidator


def load_workbook_grids(path: Union[str, Path]) -> Dict[str, Grid]:
    """Read every sheet of a workbook as a raw grid (no header inference)"""
    # Keep "#N/A" and friends as text so error cells can be reported
    frames = pd.read_excel(path, sheet_name=None, header=None, engine="openpyxl", keep_default_na=False)
    grids = {}
    for name, df in frames.items():
        df = df.astype(object)
        df = df.where(pd.notna(df) & (df != ""), None)
        grids[str(name)] = df.values.tolist()
        logger.debug(f"Loaded sheet '{name}': {df.shape[0]} rows x {df.shape[1]} columns")
    return grids


def ingest_workbook(
    sheets: Dict[str, Grid],
    target_date: date,
    layouts: Optional[SheetLayouts] = None,
    config: Optional[Settings] = None,
) -> IngestionResult:
    """
    Parse a DBIS workbook for one report date.

    The Schedule sheet is required; a missing or unreadable Generation
    Status sheet only yields a STATUS_SHEET_MISSING warning.

    Args:
        sheets: Sheet name -> grid of cell values
        target_date: Report date to extract
        layouts: Sheet layouts (defaults to the configured layout file)
        config: Settings override

    Returns:
        IngestionResult with the combined ParsedReport on success
    """
    config = config or default_settings
    factory = ParserFactory(layouts=layouts, config=config)

    logger.info(f"Ingesting workbook with sheets {list(sheets.keys())} for {target_date}")

    schedule = factory.get_parser(ScheduleParser.SHEET_TYPE).parse(sheets, target_date)
    if not schedule.success:
        return IngestionResult(
            success=False,
            error=schedule.error,
            warnings=schedule.warnings,
            available_sheets=schedule.available_sheets,
        )

    schedule_data = schedule.data
    warnings = list(schedule.warnings)

    status = factory.get_parser(StatusParser.SHEET_TYPE).parse(sheets, schedule_data.date)
    outages = []
    if status.success:
        warnings.extend(status.warnings)
        outages = match_outages_to_units(status.data.outages, schedule_data.units)
    else:
        warnings.append(DataQualityWarning(
            type=WarningCode.STATUS_SHEET_MISSING,
            message=f"{status.error}; no outage data extracted",
            details={"available_sheets": list(sheets.keys())},
        ))

    report = ParsedReport(
        date=schedule_data.date,
        date_column=schedule_data.date_column,
        exact_date_match=schedule_data.exact_date_match,
        expected_date=schedule_data.expected_date,
        units=schedule_data.units,
        stations=schedule_data.stations,
        outages=outages,
        summary=schedule_data.summary,
        stats=schedule_data.stats,
    )

    validation = DataValidator(config).validate(report)
    warnings.extend(validation.warnings)
    report = report.model_copy(update={"warnings": warnings})

    if not validation.is_valid:
        logger.error(f"Report validation failed: {validation.errors}")
        return IngestionResult(success=False, error="; ".join(validation.errors), report=report, warnings=warnings)

    logger.info(
        f"Ingested report for {report.date}: {len(report.units)} units, "
        f"{len(report.stations)} stations, {len(report.outages)} outages, {len(warnings)} warnings"
    )
    return IngestionResult(success=True, report=report, warnings=warnings)


def ingest_file(
    path: Union[str, Path],
    target_date: date,
    layouts: Optional[SheetLayouts] = None,
    config: Optional[Settings] = None,
) -> IngestionResult:
    """Ingest a workbook from disk"""
    config = config or default_settings
    suffix = Path(path).suffix.lower()
    if suffix not in config.SUPPORTED_FORMATS:
        return IngestionResult(success=False, error=f"Unsupported file format: {suffix}")

    try:
        sheets = load_workbook_grids(path)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read workbook {path}: {e}")
        return IngestionResult(success=False, error=f"Failed to read workbook: {e}")

    return ingest_workbook(sheets, target_date, layouts=layouts, config=config)
