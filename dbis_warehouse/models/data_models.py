"""
Data models for the DBIS Generation Report Warehouse
Defines Pydantic models for parsed sheets and historical snapshots
"""

from datetime import date
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


class UnitStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    NO_DATA = "no_data"


class WarningCode(str, Enum):
    DATE_MISMATCH = "DATE_MISMATCH"
    HIGH_NO_DATA = "HIGH_NO_DATA"
    ERROR_CELLS = "ERROR_CELLS"
    STATUS_SHEET_MISSING = "STATUS_SHEET_MISSING"
    STATION_TOTAL_MISMATCH = "STATION_TOTAL_MISMATCH"
    NEGATIVE_CAPACITY = "NEGATIVE_CAPACITY"
    UNKNOWN_KPI = "UNKNOWN_KPI"
    INVALID_ROW = "INVALID_ROW"


class DataQualityWarning(BaseModel):
    """Non-fatal issue attached to a successful parse"""
    type: WarningCode
    message: str
    details: Dict[str, Any] = {}


class DateLocation(BaseModel):
    """Column resolved for the report date"""
    column: int
    column_letter: str
    date: date
    exact_match: bool
    expected_date: date
    scanned_columns: int


class Unit(BaseModel):
    """Generating unit row from the Schedule sheet"""
    row_number: int
    station: str
    engine: Optional[str] = None
    unit_number: str
    installed_capacity_mva: Optional[float] = None
    installed_capacity_mw: Optional[float] = None
    derated_capacity_mw: Optional[float] = None
    available_mw: Optional[float] = None
    status: UnitStatus
    utilization_pct: Optional[float] = None

    @field_validator("station")
    @classmethod
    def station_not_empty(cls, v):
        if not v.strip():
            raise ValueError("Station is required for a unit")
        return v


class StationAggregate(BaseModel):
    """Station-level rollup of its units"""
    station: str
    total_units: int = 0
    total_derated_capacity_mw: float = 0.0
    total_available_mw: float = 0.0
    units_online: int = 0
    units_offline: int = 0
    units_no_data: int = 0
    station_utilization_pct: Optional[float] = None


class ReportSummary(BaseModel):
    """System-level KPIs read from the fixed summary rows"""
    total_fossil_capacity_mw: Optional[float] = None
    expected_peak_demand_mw: Optional[float] = None
    reserve_capacity_mw: Optional[float] = None
    average_for_pct: Optional[float] = None
    expected_capacity_mw: Optional[float] = None
    expected_reserve_mw: Optional[float] = None
    solar_hampshire_mwp: Optional[float] = None
    solar_prospect_mwp: Optional[float] = None
    solar_trafalgar_mwp: Optional[float] = None
    total_renewable_mwp: Optional[float] = None
    total_dbis_capacity_mw: Optional[float] = None
    evening_peak_on_bars_mw: Optional[float] = None
    evening_peak_suppressed_mw: Optional[float] = None
    day_peak_on_bars_mw: Optional[float] = None
    day_peak_suppressed_mw: Optional[float] = None
    gen_availability_at_suppressed_peak_mw: Optional[float] = None
    approx_suppressed_peak_mw: Optional[float] = None
    system_utilization_pct: Optional[float] = None
    reserve_margin_pct: Optional[float] = None


class ReportStats(BaseModel):
    total_units: int
    units_online: int
    units_offline: int
    units_no_data: int
    total_stations: int
    total_available_mw: float
    total_derated_mw: float
    scanned_columns: int


class StatusUnit(BaseModel):
    """Unit row from the Generation Status sheet"""
    row_number: int
    station: str
    engine: Optional[str] = None
    unit_number: str
    installed_capacity_mva: Optional[float] = None
    derated_capacity_mw: Optional[float] = None
    available_mw: float = 0.0
    dispatched_mw: float = 0.0
    outage_reason: Optional[str] = None
    expected_completion: Optional[date] = None
    actual_completion: Optional[date] = None
    remarks: Optional[str] = None
    status: UnitStatus
    is_outage: bool = False


class Outage(BaseModel):
    """Outage extracted from the Generation Status sheet"""
    station: str
    engine: Optional[str] = None
    unit_number: Optional[str] = None
    available_mw: float = 0.0
    dispatched_mw: float = 0.0
    reason: Optional[str] = None
    expected_completion: Optional[date] = None
    actual_completion: Optional[date] = None
    remarks: Optional[str] = None
    is_resolved: bool = False
    report_date: Optional[date] = None

    # Cross-reference to the Schedule sheet, set by the outage matcher
    matched_unit_row: Optional[int] = None
    schedule_derated_mw: Optional[float] = None
    schedule_available_mw: Optional[float] = None
    schedule_status: Optional[UnitStatus] = None


class ScheduleData(BaseModel):
    date: date
    date_column: str
    exact_date_match: bool
    expected_date: Optional[date] = None
    units: List[Unit] = []
    stations: List[StationAggregate] = []
    summary: ReportSummary
    stats: ReportStats


class StatusData(BaseModel):
    sheet_name: str
    units: List[StatusUnit] = []
    outages: List[Outage] = []


class ParsedReport(BaseModel):
    """Combined ingestion output for one report date"""
    date: date
    date_column: str
    exact_date_match: bool
    expected_date: Optional[date] = None
    units: List[Unit] = []
    stations: List[StationAggregate] = []
    outages: List[Outage] = []
    summary: ReportSummary
    stats: ReportStats
    warnings: List[DataQualityWarning] = []


class ParseResult(BaseModel, Generic[T]):
    """Explicit success/failure result returned at every parser boundary"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    error: Optional[str] = None
    data: Optional[T] = None
    warnings: List[DataQualityWarning] = []
    available_sheets: Optional[List[str]] = None


class IngestionResult(BaseModel):
    """Outcome of ingesting one workbook"""
    success: bool
    error: Optional[str] = None
    report: Optional[ParsedReport] = None
    warnings: List[DataQualityWarning] = []
    available_sheets: Optional[List[str]] = None


class MonthlyKpi(BaseModel):
    """Single row from the monthly KPI export"""
    report_month: date
    kpi_name: str
    value: Optional[float] = None
    raw_value: Optional[str] = None


class MonthlyKpiSnapshot(BaseModel):
    """All KPI values recorded for one month"""
    report_month: date
    values: Dict[str, float] = Field(default_factory=dict)


class KpiPreview(BaseModel):
    filename: str
    total_rows: int
    start_month: Optional[date] = None
    end_month: Optional[date] = None
    months_count: int = 0
    kpis_found: List[str] = []
    known_kpis_count: int = 0
    latest_month: Optional[date] = None
    latest_snapshot: Dict[str, Optional[float]] = {}


class KpiCsvResult(BaseModel):
    """Outcome of parsing a monthly KPI export"""
    success: bool
    filename: str
    error: Optional[str] = None
    data: List[MonthlyKpi] = []
    preview: Optional[KpiPreview] = None
    warnings: List[DataQualityWarning] = []


class HistoricalSnapshot(BaseModel):
    """One persisted daily report, as read back by the forecasting engine"""
    report_date: date
    summary: ReportSummary
    stations: List[StationAggregate] = []
    units: List[Unit] = []
