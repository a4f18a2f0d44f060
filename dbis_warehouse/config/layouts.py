"""
Sheet layout definitions

Row numbers are 1-indexed as they appear in Excel; column indices are
0-indexed. The layout itself lives in sheet_layouts.json so it can be
versioned independently of the parsing code.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, Field, model_validator

from dbis_warehouse.config.settings import settings


class ScheduleColumns(BaseModel):
    station: int = 0
    engine: int = 1
    unit_number: int = 2
    installed_mva: int = 3
    installed_mw: int = 4
    derated_mw: int = 5
    data_start: int = 6


class ScheduleLayout(BaseModel):
    """Layout of the wide 'Schedule' sheet"""
    sheet_name: str = "Schedule"
    date_header_row: int
    unit_start_row: int
    unit_end_row: int
    columns: ScheduleColumns = Field(default_factory=ScheduleColumns)
    summary_rows: Dict[str, int]
    peak_rows: List[str] = []
    solar_rows: List[str] = []

    @model_validator(mode="after")
    def check_rows(self):
        if self.unit_end_row < self.unit_start_row:
            raise ValueError("unit_end_row must not precede unit_start_row")
        unknown = [name for name in self.peak_rows + self.solar_rows if name not in self.summary_rows]
        if unknown:
            raise ValueError(f"Rows referenced but not mapped in summary_rows: {unknown}")
        return self


class StatusColumns(BaseModel):
    station: int = 0
    engine: int = 1
    unit_number: int = 2
    installed_mva: int = 3
    derated_mw: int = 4
    available_mw: int = 5
    dispatched_mw: int = 6
    outage_reason: int = 7
    expected_completion: int = 8
    actual_completion: int = 9
    remarks: int = 10


class StatusLayout(BaseModel):
    """Layout of the 11-column 'Generation Status' sheet"""
    sheet_names: List[str]
    data_start_row: int
    data_end_row: int
    columns: StatusColumns = Field(default_factory=StatusColumns)
    summary_keywords: List[str]
    outage_keywords: List[str]


class SheetLayouts(BaseModel):
    schedule: ScheduleLayout
    status: StatusLayout
    engine_aliases: Dict[str, str] = {}
    station_aliases: Dict[str, str] = {}


_cache: Dict[str, SheetLayouts] = {}


def load_layouts(path: Optional[str] = None) -> SheetLayouts:
    """Load and validate the sheet layout file (cached per path)"""
    layout_path = str(Path(path or settings.LAYOUT_FILE).resolve())
    if layout_path not in _cache:
        with open(layout_path, encoding="utf-8") as fh:
            raw = json.load(fh)
        _cache[layout_path] = SheetLayouts.model_validate(raw)
        logger.debug(f"Loaded sheet layouts from {layout_path}")
    return _cache[layout_path]
