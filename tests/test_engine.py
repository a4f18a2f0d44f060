"""Tests for the forecasting engine and flat forecast records."""

from datetime import date

import pytest

from dbis_warehouse.database.history import InMemoryHistory
from dbis_warehouse.exceptions import ForecastingError
from dbis_warehouse.forecasting.engine import ForecastingEngine
from dbis_warehouse.models.data_models import UnitStatus
from tests.conftest import daily_series, make_station, make_unit, monthly_series

REFERENCE = date(2025, 1, 15)


@pytest.fixture
def snapshots():
    return daily_series(
        date(2025, 1, 1),
        [200.0 + i for i in range(10)],
        suppressed=215.0,
        capacity=230.0,
        stations=[make_station("SEI", 1)],
        units=[make_unit("SEI", "1", UnitStatus.ONLINE, 3.3)],
    )


@pytest.fixture
def monthly():
    return monthly_series(date(2024, 10, 1), {
        "Peak Demand Essequibo": [12.0, 12.5, 13.0],
        "Installed Capacity Essequibo": [36.0, 36.0, 36.0],
    })


def test_run_all(snapshots, monthly):
    bundle = ForecastingEngine(InMemoryHistory(snapshots, monthly)).run_all(REFERENCE)

    assert bundle.reference_date == REFERENCE
    assert {d.grid for d in bundle.demand} == {"DBIS", "Essequibo"}
    assert [c.grid for c in bundle.capacity] == ["DBIS", "Essequibo"]
    assert bundle.load_shedding.period_days == 10
    assert bundle.station_reliability[0].station == "SEI"
    assert bundle.unit_risk[0].unit_number == "1"
    assert {k.kpi_name for k in bundle.kpi} == {"Peak Demand Essequibo", "Installed Capacity Essequibo"}
    assert bundle.scenario.is_fallback is True


def test_matches_individual_categories(snapshots, monthly):
    engine = ForecastingEngine(InMemoryHistory(snapshots, monthly))

    bundle = engine.run_all(REFERENCE)

    assert bundle.demand == engine.compute_demand_forecast(REFERENCE)
    assert bundle.capacity == engine.compute_capacity_timeline(REFERENCE)
    assert bundle.kpi == engine.compute_kpi_forecasts(REFERENCE)


def test_history_outside_window_is_ignored(snapshots, monthly):
    bundle = ForecastingEngine(InMemoryHistory(snapshots, monthly)).run_all(date(2028, 1, 1))

    assert [d.grid for d in bundle.demand if d.grid == "DBIS"] == []
    assert bundle.load_shedding.trend == "unknown"


def test_no_history_raises():
    with pytest.raises(ForecastingError):
        ForecastingEngine(InMemoryHistory()).run_all(REFERENCE)


def test_fallback_scenario_without_monthly_kpis(snapshots):
    bundle = ForecastingEngine(InMemoryHistory(snapshots)).run_all(REFERENCE)

    assert bundle.kpi == []
    assert bundle.scenario.is_fallback is True
    assert bundle.scenario.data_period == "N/A - N/A"
    assert bundle.scenario.conservative.grids["DBIS"].current_peak == 200.0

    fallback_records = [r for r in bundle.to_records() if r.is_fallback]
    assert len(fallback_records) == 16


def test_records_cover_every_category(snapshots, monthly):
    records = ForecastingEngine(InMemoryHistory(snapshots, monthly)).run_all(REFERENCE).to_records()

    assert {r.subject_type for r in records} == {"grid", "station", "unit", "kpi"}
    shedding = next(r for r in records if r.subject == "DBIS load shedding")
    assert shedding.projected_period == date(2025, 7, 1)

    scenario_records = [r for r in records if r.is_fallback]
    assert len(scenario_records) == 16
    assert {r.subject for r in scenario_records} == {
        "DBIS conservative", "Essequibo conservative", "DBIS aggressive", "Essequibo aggressive",
    }

    unit = next(r for r in records if r.subject_type == "unit")
    assert unit.subject == "SEI 1"
    # ten clean days: MTBF equals the period, which is still below 15 days
    assert unit.risk_level == "medium"
