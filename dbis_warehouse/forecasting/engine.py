"""
Forecasting engine: reads persisted history once and runs every forecaster
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, timedelta
from typing import List, Optional

from loguru import logger

from dbis_warehouse.config.settings import Settings, settings as default_settings
from dbis_warehouse.database.history import HistorySource
from dbis_warehouse.exceptions import ForecastingError
from dbis_warehouse.forecasting.analytics_client import AnalyticsBackend
from dbis_warehouse.forecasting.capacity import compute_capacity_timeline
from dbis_warehouse.forecasting.demand import forecast_demand
from dbis_warehouse.forecasting.kpi import forecast_kpis
from dbis_warehouse.forecasting.load_shedding import analyze_load_shedding
from dbis_warehouse.forecasting.reliability import compute_station_reliability, compute_unit_risk
from dbis_warehouse.forecasting.scenarios import ScenarioForecaster
from dbis_warehouse.models.data_models import HistoricalSnapshot
from dbis_warehouse.models.forecast_models import (
    CapacityTimeline,
    DemandForecastPoint,
    ForecastBundle,
    KpiForecastPoint,
    LoadSheddingAnalysis,
    ScenarioForecast,
    StationReliability,
    UnitRisk,
)


def within(snapshots: List[HistoricalSnapshot], days: int, reference_date: date) -> List[HistoricalSnapshot]:
    start = reference_date - timedelta(days=days)
    return [s for s in snapshots if start <= s.report_date <= reference_date]


class ForecastingEngine:
    """Runs the forecasters over a HistorySource for a given reference date"""

    def __init__(
        self,
        history: HistorySource,
        config: Optional[Settings] = None,
        backend: Optional[AnalyticsBackend] = None,
        max_workers: int = 5,
    ):
        self.history = history
        self.settings = config or default_settings
        self.scenarios = ScenarioForecaster(backend=backend, config=self.settings)
        self.max_workers = max_workers

    def compute_demand_forecast(self, reference_date: date) -> List[DemandForecastPoint]:
        snapshots = self.history.get_historical_snapshots(self.settings.DEMAND_HISTORY_DAYS, reference_date)
        return forecast_demand(snapshots, self.history.get_monthly_kpi_series(), reference_date, self.settings)

    def compute_capacity_timeline(self, reference_date: date) -> List[CapacityTimeline]:
        snapshots = self.history.get_historical_snapshots(self.settings.LOAD_SHEDDING_DAYS, reference_date)
        monthly = self.history.get_monthly_kpi_series()
        return compute_capacity_timeline(
            snapshots, monthly, self.compute_demand_forecast(reference_date), reference_date, self.settings
        )

    def compute_load_shedding(self, reference_date: date) -> LoadSheddingAnalysis:
        snapshots = self.history.get_historical_snapshots(self.settings.LOAD_SHEDDING_DAYS, reference_date)
        return analyze_load_shedding(snapshots, self.settings)

    def compute_station_reliability(self, reference_date: date) -> List[StationReliability]:
        snapshots = self.history.get_historical_snapshots(self.settings.RELIABILITY_DAYS, reference_date)
        return compute_station_reliability(snapshots, self.settings)

    def compute_unit_risk(self, reference_date: date) -> List[UnitRisk]:
        snapshots = self.history.get_historical_snapshots(self.settings.RELIABILITY_DAYS, reference_date)
        return compute_unit_risk(snapshots, self.settings)

    def compute_kpi_forecasts(self, reference_date: date) -> List[KpiForecastPoint]:
        return forecast_kpis(self.history.get_monthly_kpi_series(), reference_date, self.settings)

    def compute_scenarios(self, reference_date: date) -> ScenarioForecast:
        return self.scenarios.forecast(
            self.history.get_monthly_kpi_series(), reference_date, self.compute_capacity_timeline(reference_date)
        )

    def run_all(self, reference_date: date) -> ForecastBundle:
        """
        Compute every forecast category for `reference_date`.

        History is fetched once; the independent categories run in a
        thread pool and are aggregated after all of them complete.

        Raises:
            ForecastingError: If there is no historical data at all
        """
        logger.info(f"Starting forecast computation for {reference_date}")

        snapshots = self.history.get_historical_snapshots(self.settings.DEMAND_HISTORY_DAYS, reference_date)
        monthly = self.history.get_monthly_kpi_series()
        if not snapshots and not monthly:
            raise ForecastingError("No historical data available for forecasting")

        yearly = within(snapshots, self.settings.LOAD_SHEDDING_DAYS, reference_date)
        recent = within(snapshots, self.settings.RELIABILITY_DAYS, reference_date)

        tasks = {
            "demand": (forecast_demand, snapshots, monthly, reference_date, self.settings),
            "load_shedding": (analyze_load_shedding, yearly, self.settings),
            "station_reliability": (compute_station_reliability, recent, self.settings),
            "unit_risk": (compute_unit_risk, recent, self.settings),
            "kpi": (forecast_kpis, monthly, reference_date, self.settings),
        }

        results = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_name = {
                executor.submit(task[0], *task[1:]): name
                for name, task in tasks.items()
            }
            for future in as_completed(future_to_name):
                name = future_to_name[future]
                try:
                    results[name] = future.result()
                except Exception as e:
                    logger.error(f"Forecast category {name} failed: {e}")
                    raise
                logger.info(f"Completed {name} forecast")

        capacity = compute_capacity_timeline(yearly, monthly, results["demand"], reference_date, self.settings)

        scenario = self.scenarios.forecast(monthly, reference_date, capacity)

        bundle = ForecastBundle(
            reference_date=reference_date,
            demand=results["demand"],
            capacity=capacity,
            load_shedding=results["load_shedding"],
            station_reliability=results["station_reliability"],
            unit_risk=results["unit_risk"],
            kpi=results["kpi"],
            scenario=scenario,
        )

        logger.info(
            f"Forecasts complete: {len(bundle.demand)} demand points, {len(bundle.station_reliability)} stations, "
            f"{len(bundle.unit_risk)} units, {len(bundle.kpi)} KPI points, fallback scenario: {scenario.is_fallback}"
        )
        return bundle
