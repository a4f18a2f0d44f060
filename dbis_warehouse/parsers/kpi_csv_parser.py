"""
Monthly KPI CSV parser

Parses the monthly KPI export (Date,KPI,Sum of Actual) into one row per
month and KPI, normalizing dates to the first of the month.
"""

import io
import re
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd
from loguru import logger

from dbis_warehouse.config.settings import Settings, settings as default_settings
from dbis_warehouse.models.data_models import (
    DataQualityWarning,
    KpiCsvResult,
    KpiPreview,
    MonthlyKpi,
    MonthlyKpiSnapshot,
    WarningCode,
)
from dbis_warehouse.utils.helpers import clean_text, parse_number

COLLECTION_RATE_KPI = "Collection Rate %"

ISO_MONTH = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
US_MONTH = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})")


def parse_month(value: Optional[str]) -> Optional[date]:
    """'2025-12-31 00:00:00' -> 2025-12-01; '12/31/2025' -> 2025-12-01"""
    text = clean_text(value)
    if text is None:
        return None

    for pattern, year_group, month_group in ((ISO_MONTH, 1, 2), (US_MONTH, 3, 1)):
        match = pattern.match(text)
        if match:
            try:
                return date(int(match.group(year_group)), int(match.group(month_group)), 1)
            except ValueError:
                return None

    parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        return None
    return date(parsed.year, parsed.month, 1)


def normalize_kpi_value(kpi_name: str, raw_value: Optional[str]) -> Tuple[Optional[float], Optional[str]]:
    """Numeric value plus the raw text; collection rates given as fractions become percentages"""
    raw = clean_text(raw_value)
    value = parse_number(raw)
    if value is not None and kpi_name == COLLECTION_RATE_KPI and value < 1.5:
        value = value * 100
    return value, raw


def _find_column(columns: List[str], *fragments: str) -> Optional[str]:
    for column in columns:
        lowered = column.lower()
        if any(fragment in lowered for fragment in fragments):
            return column
    return None


class KpiCsvParser:
    """Parser for the monthly KPI CSV export"""

    def __init__(self, config: Optional[Settings] = None):
        self.settings = config or default_settings

    def _read(self, content: Union[str, bytes, Path]) -> pd.DataFrame:
        read_options = dict(dtype=str, keep_default_na=False, skip_blank_lines=True, skipinitialspace=True)
        if isinstance(content, Path):
            return pd.read_csv(content, encoding="utf-8-sig", **read_options)
        if isinstance(content, bytes):
            content = content.decode("utf-8-sig")
        return pd.read_csv(io.StringIO(content.lstrip("\ufeff")), **read_options)

    def parse(self, content: Union[str, bytes, Path], filename: str = "unknown.csv") -> KpiCsvResult:
        """Parse CSV text, bytes or a file path"""
        try:
            df = self._read(content)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
            logger.error(f"Failed to parse KPI CSV {filename}: {e}")
            return KpiCsvResult(success=False, filename=filename, error=f"Failed to parse CSV: {e}")

        if df.empty:
            return KpiCsvResult(success=False, filename=filename, error="CSV file is empty or has no data rows")

        columns = [str(c).strip() for c in df.columns]
        df.columns = columns
        date_col = _find_column(columns, "date")
        kpi_col = _find_column(columns, "kpi")
        value_col = _find_column(columns, "actual", "value")

        for label, column in (("Date", date_col), ("KPI", kpi_col), ("Value/Actual", value_col)):
            if column is None:
                return KpiCsvResult(success=False, filename=filename, error=f"Could not find {label} column in CSV")

        known = set(self.settings.KNOWN_KPIS)
        warnings: List[DataQualityWarning] = []
        rows: List[MonthlyKpi] = []
        unknown: List[str] = []

        for position, record in enumerate(df.to_dict(orient="records")):
            row_number = position + 2
            month = parse_month(record.get(date_col))
            if month is None:
                warnings.append(DataQualityWarning(
                    type=WarningCode.INVALID_ROW,
                    message=f"Row {row_number}: Invalid date \"{record.get(date_col)}\"",
                    details={"row": row_number},
                ))
                continue

            kpi_name = clean_text(record.get(kpi_col))
            if kpi_name is None:
                warnings.append(DataQualityWarning(
                    type=WarningCode.INVALID_ROW,
                    message=f"Row {row_number}: Missing KPI name",
                    details={"row": row_number},
                ))
                continue

            if kpi_name not in known and kpi_name not in unknown:
                unknown.append(kpi_name)

            value, raw = normalize_kpi_value(kpi_name, record.get(value_col))
            rows.append(MonthlyKpi(report_month=month, kpi_name=kpi_name, value=value, raw_value=raw))

        if unknown:
            warnings.append(DataQualityWarning(
                type=WarningCode.UNKNOWN_KPI,
                message=f"Unknown KPI(s) found: {', '.join(unknown)}",
                details={"kpis": unknown},
            ))

        for w in warnings:
            logger.warning(f"[KPI CSV] {w.message}")

        preview = self.build_preview(rows, filename)
        logger.info(f"Parsed {len(rows)} KPI rows, {preview.months_count} months, {len(preview.kpis_found)} KPIs from {filename}")

        return KpiCsvResult(success=True, filename=filename, data=rows, preview=preview, warnings=warnings)

    def build_preview(self, rows: List[MonthlyKpi], filename: str) -> KpiPreview:
        months = sorted({r.report_month for r in rows})
        kpis = sorted({r.kpi_name for r in rows})
        latest = months[-1] if months else None
        return KpiPreview(
            filename=filename,
            total_rows=len(rows),
            start_month=months[0] if months else None,
            end_month=latest,
            months_count=len(months),
            kpis_found=kpis,
            known_kpis_count=sum(1 for k in kpis if k in self.settings.KNOWN_KPIS),
            latest_month=latest,
            latest_snapshot={r.kpi_name: r.value for r in rows if r.report_month == latest},
        )


def to_monthly_series(rows: List[MonthlyKpi]) -> List[MonthlyKpiSnapshot]:
    """Group KPI rows into one snapshot per month, oldest first; empty values are dropped"""
    by_month: Dict[date, Dict[str, float]] = {}
    for row in rows:
        values = by_month.setdefault(row.report_month, {})
        if row.value is not None:
            values[row.kpi_name] = row.value
    return [MonthlyKpiSnapshot(report_month=m, values=by_month[m]) for m in sorted(by_month)]
