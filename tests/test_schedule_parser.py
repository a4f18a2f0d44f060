"""Tests for the Schedule sheet parser."""

from datetime import date

import pytest

from dbis_warehouse.models.data_models import UnitStatus, WarningCode
from dbis_warehouse.parsers.schedule_parser import ScheduleParser, classify_available, parse_peak_demand
from tests.conftest import REPORT_DATE, build_schedule_grid


@pytest.fixture
def parsed(layouts, schedule_grid):
    result = ScheduleParser(layouts=layouts).parse({"Schedule": schedule_grid}, REPORT_DATE)
    assert result.success, result.error
    return result


class TestPeakDemandFormat:
    def test_on_bars_with_suppressed(self):
        assert parse_peak_demand("202.08(225.58)") == (202.08, 225.58)

    def test_space_before_parenthesis(self):
        assert parse_peak_demand("198.5 (210)") == (198.5, 210.0)

    def test_plain_number(self):
        assert parse_peak_demand("181") == (181.0, None)
        assert parse_peak_demand(181.5) == (181.5, None)

    def test_dash_and_blank(self):
        assert parse_peak_demand("-") == (None, None)
        assert parse_peak_demand(None) == (None, None)


class TestStatusRule:
    def test_positive_is_online(self):
        assert classify_available(3.3) == (3.3, UnitStatus.ONLINE)

    def test_zero_and_negative_are_offline(self):
        assert classify_available(0)[1] == UnitStatus.OFFLINE
        assert classify_available(-1.0)[1] == UnitStatus.OFFLINE

    def test_missing_or_text_is_no_data(self):
        assert classify_available(None) == (None, UnitStatus.NO_DATA)
        assert classify_available("OOS") == (None, UnitStatus.NO_DATA)


def test_units_forward_fill_station(parsed):
    units = parsed.data.units

    assert [(u.station, u.unit_number) for u in units] == [
        ("SEI", "1"),
        ("SEI", "2"),
        ("Canefield", "1"),
        ("Canefield", "2"),
        ("Garden of Eden", "3"),
    ]
    assert all(u.station for u in units)


def test_blank_rows_are_skipped(parsed):
    assert [u.row_number for u in parsed.data.units] == [5, 6, 7, 8, 10]


def test_engine_spelling_normalized(parsed):
    assert parsed.data.units[0].engine == "Wartsila"


def test_unit_status_and_utilization(parsed):
    sei_1, sei_2, cane_1, cane_2, goe = parsed.data.units

    assert sei_1.status == UnitStatus.ONLINE
    assert sei_1.utilization_pct == pytest.approx(94.29)
    assert sei_2.status == UnitStatus.OFFLINE
    assert cane_2.status == UnitStatus.NO_DATA
    assert cane_2.utilization_pct is None
    assert goe.status == UnitStatus.NO_DATA


def test_station_aggregates(parsed):
    stations = {s.station: s for s in parsed.data.stations}

    assert list(stations) == ["SEI", "Canefield", "Garden of Eden"]
    assert stations["SEI"].total_available_mw == pytest.approx(3.3)
    assert stations["SEI"].total_derated_capacity_mw == pytest.approx(7.0)
    assert stations["SEI"].units_online == 1
    assert stations["SEI"].units_offline == 1
    assert stations["SEI"].station_utilization_pct == pytest.approx(47.14)
    assert stations["Canefield"].units_no_data == 1
    assert stations["Garden of Eden"].total_available_mw == 0


def test_station_totals_equal_online_unit_sum(parsed):
    for station in parsed.data.stations:
        online_sum = sum(
            u.available_mw for u in parsed.data.units
            if u.station == station.station and u.status == UnitStatus.ONLINE
        )
        assert station.total_available_mw == pytest.approx(online_sum, abs=0.01)


def test_summary_rows(parsed):
    summary = parsed.data.summary

    assert summary.total_fossil_capacity_mw == 230.5
    assert summary.expected_reserve_mw == -10.0
    assert summary.evening_peak_on_bars_mw == 202.08
    assert summary.evening_peak_suppressed_mw == 225.58
    assert summary.day_peak_on_bars_mw == 181.0
    assert summary.day_peak_suppressed_mw is None
    assert summary.total_renewable_mwp == pytest.approx(4.5)
    assert summary.total_dbis_capacity_mw == 235.0


def test_derived_summary_values(parsed):
    summary = parsed.data.summary

    assert summary.system_utilization_pct == pytest.approx(44.68)
    assert summary.reserve_margin_pct == pytest.approx(round((10.5 - 202.08) / 10.5 * 100, 2))


def test_stats(parsed):
    stats = parsed.data.stats

    assert stats.total_units == 5
    assert stats.units_online == 2
    assert stats.units_offline == 1
    assert stats.units_no_data == 2
    assert stats.total_stations == 3
    assert stats.total_available_mw == pytest.approx(10.5)


def test_error_cells_warning(parsed):
    codes = [w.type for w in parsed.warnings]

    assert WarningCode.ERROR_CELLS in codes
    error_warning = next(w for w in parsed.warnings if w.type == WarningCode.ERROR_CELLS)
    assert error_warning.details["rows"] == [10]
    assert WarningCode.DATE_MISMATCH not in codes


def test_date_mismatch_uses_last_column(layouts, schedule_grid):
    result = ScheduleParser(layouts=layouts).parse({"Schedule": schedule_grid}, date(2025, 1, 20))

    assert result.success
    assert result.data.exact_date_match is False
    assert result.data.date == date(2025, 1, 15)
    assert result.data.expected_date == date(2025, 1, 20)
    assert any(w.type == WarningCode.DATE_MISMATCH for w in result.warnings)


def test_earlier_column_selects_that_day(layouts, schedule_grid):
    result = ScheduleParser(layouts=layouts).parse({"Schedule": schedule_grid}, date(2025, 1, 14))

    assert result.data.date_column == "H"
    units = result.data.units
    assert units[1].status == UnitStatus.ONLINE
    assert units[1].available_mw == 3.0


def test_high_no_data_warning(layouts):
    units = [
        ("SEI", "Wartsila", 1, 5.0, 4.0, 3.5, [None, None, None]),
        (None, "Wartsila", 2, 5.0, 4.0, 3.5, [None, None, "n/a"]),
        (None, "Wartsila", 3, 5.0, 4.0, 3.5, [3.0, 3.0, 3.0]),
    ]
    grid = build_schedule_grid(units=units)

    result = ScheduleParser(layouts=layouts).parse({"Schedule": grid}, REPORT_DATE)

    assert any(w.type == WarningCode.HIGH_NO_DATA for w in result.warnings)


def test_missing_sheet_lists_available_sheets(layouts, status_grid):
    result = ScheduleParser(layouts=layouts).parse({"Generation Status": status_grid}, REPORT_DATE)

    assert result.success is False
    assert "Schedule sheet not found" in result.error
    assert result.available_sheets == ["Generation Status"]
    assert result.data is None


def test_missing_header_row(layouts):
    result = ScheduleParser(layouts=layouts).parse({"Schedule": [["DBIS"], []]}, REPORT_DATE)

    assert result.success is False
    assert "row 4" in result.error


def test_header_without_dates(layouts):
    grid = build_schedule_grid(header_dates=["Mon", "Tue", "Wed"])

    result = ScheduleParser(layouts=layouts).parse({"Schedule": grid}, REPORT_DATE)

    assert result.success is False
    assert "No date columns" in result.error
