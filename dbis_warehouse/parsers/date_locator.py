"""
Date column detection for wide daily sheets

The Schedule sheet grows by one column per day, so the header row can span
thousands of columns. The scan stops at the first exact match; otherwise the
last column holding a parseable date is used and flagged as a mismatch.
"""

from datetime import date
from typing import Any, Iterable, Optional, Sequence

from loguru import logger

from dbis_warehouse.exceptions import StructuralError
from dbis_warehouse.models.data_models import DateLocation
from dbis_warehouse.utils.helpers import column_letter, parse_excel_date


def locate_date_column(
    header_row: Sequence[Any],
    target_date: date,
    start_column: int = 0,
    date_formats: Optional[Iterable[str]] = None,
) -> DateLocation:
    """
    Find the column of `target_date` in a header row.

    Args:
        header_row: Cell values of the header row, indexed from column A
        target_date: Report date being looked for
        start_column: First column (0-indexed) holding daily values
        date_formats: Extra strptime formats accepted for string cells

    Returns:
        DateLocation with exact_match=True on a hit, otherwise the last
        populated date column with exact_match=False

    Raises:
        StructuralError: If no cell from start_column onwards parses as a date
    """
    formats = list(date_formats) if date_formats is not None else None
    last_column = None
    last_date = None
    scanned = 0

    for index in range(start_column, len(header_row)):
        parsed = parse_excel_date(header_row[index], formats)
        if parsed is None:
            continue

        last_column, last_date = index, parsed
        scanned += 1

        if parsed == target_date:
            return DateLocation(
                column=index,
                column_letter=column_letter(index),
                date=parsed,
                exact_match=True,
                expected_date=target_date,
                scanned_columns=scanned,
            )

    if last_column is None:
        raise StructuralError("No date columns found in header row", artifact="date_header")

    logger.warning(f"Expected {target_date} in header row, using last date column {column_letter(last_column)} ({last_date})")
    return DateLocation(
        column=last_column,
        column_letter=column_letter(last_column),
        date=last_date,
        exact_match=False,
        expected_date=target_date,
        scanned_columns=scanned,
    )
