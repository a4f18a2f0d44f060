"""End-to-end ingestion over workbook grids."""

from datetime import date

from dbis_warehouse.ingestion import ingest_file, ingest_workbook, load_workbook_grids
from dbis_warehouse.models.data_models import UnitStatus, WarningCode
from tests.conftest import REPORT_DATE, write_workbook


def test_ingest_combines_both_sheets(workbook, layouts):
    result = ingest_workbook(workbook, REPORT_DATE, layouts=layouts)

    assert result.success, result.error
    report = result.report
    assert report.date == REPORT_DATE
    assert report.date_column == "I"
    assert len(report.units) == 5
    assert len(report.stations) == 3
    assert len(report.outages) == 3
    assert report.stats.total_available_mw == 10.5


def test_outages_are_matched_to_schedule(workbook, layouts):
    report = ingest_workbook(workbook, REPORT_DATE, layouts=layouts).report

    by_key = {(o.station, o.unit_number): o for o in report.outages}
    assert by_key[("SEI", "2")].matched_unit_row == 6
    assert by_key[("Canefield", "1")].matched_unit_row == 7
    assert by_key[("Canefield", "2")].schedule_status == UnitStatus.NO_DATA


def test_ingestion_is_repeatable(workbook, layouts):
    first = ingest_workbook(workbook, REPORT_DATE, layouts=layouts)
    second = ingest_workbook(workbook, REPORT_DATE, layouts=layouts)

    assert first.model_dump() == second.model_dump()


def test_warnings_are_collected_on_report(workbook, layouts):
    result = ingest_workbook(workbook, REPORT_DATE, layouts=layouts)

    codes = {w.type for w in result.warnings}
    assert WarningCode.ERROR_CELLS in codes
    assert result.report.warnings == result.warnings


def test_missing_status_sheet_is_a_warning(schedule_grid, layouts):
    result = ingest_workbook({"Schedule": schedule_grid}, REPORT_DATE, layouts=layouts)

    assert result.success
    assert result.report.outages == []
    assert any(w.type == WarningCode.STATUS_SHEET_MISSING for w in result.warnings)


def test_missing_schedule_sheet_fails(status_grid, layouts):
    result = ingest_workbook({"Generation Status": status_grid}, REPORT_DATE, layouts=layouts)

    assert result.success is False
    assert result.report is None
    assert result.available_sheets == ["Generation Status"]


def test_date_fallback_is_reported(workbook, layouts):
    result = ingest_workbook(workbook, date(2025, 2, 1), layouts=layouts)

    assert result.success
    assert result.report.exact_date_match is False
    assert result.report.expected_date == date(2025, 2, 1)
    assert any(w.type == WarningCode.DATE_MISMATCH for w in result.warnings)


def test_unsupported_file_format(tmp_path):
    path = tmp_path / "report.csv"
    path.write_text("a,b\n")

    result = ingest_file(path, REPORT_DATE)

    assert result.success is False
    assert "Unsupported file format" in result.error


def test_workbook_file_keeps_error_cells(tmp_path, workbook):
    path = write_workbook(tmp_path / "report.xlsx", workbook)

    grids = load_workbook_grids(path)

    assert grids["Schedule"][9][8] == "#N/A"
    assert grids["Schedule"][1][0] is None
    assert grids["Generation Status"][10][10] == "n/a"


def test_workbook_file_matches_grid_ingestion(tmp_path, workbook, layouts):
    path = write_workbook(tmp_path / "report.xlsx", workbook)

    from_file = ingest_file(path, REPORT_DATE, layouts=layouts)
    from_grids = ingest_workbook(workbook, REPORT_DATE, layouts=layouts)

    assert from_file.success, from_file.error
    assert [w.type for w in from_file.warnings] == [w.type for w in from_grids.warnings]
    assert WarningCode.ERROR_CELLS in {w.type for w in from_file.warnings}
    assert from_file.report.exact_date_match is True
    assert [u.unit_number for u in from_file.report.units] == [u.unit_number for u in from_grids.report.units]
    assert len(from_file.report.outages) == 3
