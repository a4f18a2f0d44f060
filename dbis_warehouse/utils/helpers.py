"""
Utility functions for the DBIS generation report warehouse
"""

import math
import numbers
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Optional

import pandas as pd

from dbis_warehouse.config.settings import settings

EXCEL_EPOCH = date(1899, 12, 30)

# Native spreadsheet error values as they arrive from openpyxl/pandas
EXCEL_ERROR_VALUES = {"#N/A", "#REF!", "#DIV/0!", "#VALUE!", "#NAME?", "#NUM!", "#NULL!"}


def is_blank(value: Any) -> bool:
    """True for None, NaN/NaT and whitespace-only strings"""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def is_error_cell(value: Any) -> bool:
    return isinstance(value, str) and value.strip().upper() in EXCEL_ERROR_VALUES


def clean_numeric_string(value: str) -> Optional[str]:
    """Clean numeric string for conversion"""
    if not value or value.strip() == "" or value.strip() == "-":
        return None

    # Remove thousands separators and stray whitespace only; anything else is not a number
    cleaned = re.sub(r"[,\s]", "", value.strip())
    return cleaned if cleaned else None


def parse_number(value: Any) -> Optional[float]:
    """Convert a cell to float; None when missing or unparseable"""
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        number = float(value)
        return None if math.isnan(number) else number
    cleaned = clean_numeric_string(str(value))
    if cleaned is None:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def clean_text(value: Any) -> Optional[str]:
    """Trimmed string, or None for blank cells"""
    if is_blank(value):
        return None
    return str(value).strip()


def normalize_identifier(value: Any) -> Optional[str]:
    """Render unit identifiers consistently across sheets (1.0 -> '1')"""
    if is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_excel_date(value: Any, formats: Optional[Iterable[str]] = None) -> Optional[date]:
    """Parse a cell holding a date: native date, Excel day-serial, ISO or locale string"""
    if is_blank(value) or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, numbers.Real):
        if 1 < value < 100000:
            return EXCEL_EPOCH + timedelta(days=int(math.floor(value)))
        return None

    if isinstance(value, str):
        text = value.strip()
        if text.lower() in ("n/a", "-"):
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
        for fmt in formats or settings.DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue

    return None


def column_letter(index: int) -> str:
    """Convert 0-indexed column to Excel column letter (0 -> A, 26 -> AA)"""
    letters = ""
    n = index + 1
    while n > 0:
        n, remainder = divmod(n - 1, 26)
        letters = chr(65 + remainder) + letters
    return letters


def report_date_for(now: datetime, offset_hours: Optional[float] = None) -> date:
    """Yesterday's date in utility local time for the given instant"""
    if offset_hours is None:
        offset_hours = settings.TIMEZONE_OFFSET_HOURS
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(timezone(timedelta(hours=offset_hours)))
    return local.date() - timedelta(days=1)


def add_months(day: date, months: int) -> date:
    """First day of the month `months` after the month of `day`"""
    month_index = day.year * 12 + (day.month - 1) + months
    return date(month_index // 12, month_index % 12 + 1, 1)


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def round_or_none(value: Optional[float], digits: int) -> Optional[float]:
    return None if value is None else round(value, digits)
