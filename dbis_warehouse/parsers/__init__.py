"""
Sheet Parsers Module

Parsers for the fixed-layout sheets of the DBIS workbook and the monthly
KPI CSV export.
"""

from .date_locator import locate_date_column
from .schedule_parser import ScheduleParser, parse_peak_demand
from .status_parser import StatusParser
from .outage_matcher import match_outages_to_units
from .kpi_csv_parser import KpiCsvParser, to_monthly_series
from .parser_factory import ParserFactory

__all__ = [
    'locate_date_column',
    'ScheduleParser',
    'parse_peak_demand',
    'StatusParser',
    'match_outages_to_units',
    'KpiCsvParser',
    'to_monthly_series',
    'ParserFactory',
]
