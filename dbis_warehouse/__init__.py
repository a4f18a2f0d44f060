"""
DBIS Generation Report Warehouse

Ingests the daily DBIS workbook (Schedule and Generation Status sheets) and
computes demand, capacity, reliability and risk forecasts from stored history.
"""

__version__ = "1.0.0"
