"""
Peak demand forecasts per grid

DBIS is tracked daily (evening on-bars peak from the Schedule sheet),
Essequibo only through the monthly KPI export.
"""

from datetime import date
from typing import List, Optional

from loguru import logger

from dbis_warehouse.config.settings import Settings, settings as default_settings
from dbis_warehouse.forecasting.regression import linear_regression, mean, std_dev
from dbis_warehouse.models.data_models import HistoricalSnapshot, MonthlyKpiSnapshot
from dbis_warehouse.models.forecast_models import DemandForecastPoint
from dbis_warehouse.utils.helpers import add_months

DBIS = "DBIS"
ESSEQUIBO = "Essequibo"
ESSEQUIBO_PEAK_KPI = "Peak Demand Essequibo"

DAYS_PER_MONTH = 30
MIN_DAILY_POINTS = 7
MIN_MONTHLY_POINTS = 3
DAILY_BAND_WINDOW = 30
MONTHLY_BAND_WINDOW = 6


def monthly_values(monthly: List[MonthlyKpiSnapshot], kpi_name: str) -> List[float]:
    """Non-zero values of one KPI in month order"""
    return [m.values[kpi_name] for m in monthly if m.values.get(kpi_name)]


def forecast_dbis_demand(
    snapshots: List[HistoricalSnapshot],
    reference_date: date,
    config: Optional[Settings] = None,
) -> List[DemandForecastPoint]:
    config = config or default_settings
    peaks = [s.summary.evening_peak_on_bars_mw for s in snapshots if s.summary.evening_peak_on_bars_mw]

    if len(snapshots) < MIN_DAILY_POINTS or len(peaks) < MIN_DAILY_POINTS:
        logger.info(f"DBIS demand forecast skipped: {len(peaks)} daily peaks (need {MIN_DAILY_POINTS})")
        return []

    regression = linear_regression(list(enumerate(peaks)))
    recent = peaks[-DAILY_BAND_WINDOW:]
    band = 2 * std_dev(recent)
    recent_mean = mean(recent)
    growth = regression.slope * DAYS_PER_MONTH / recent_mean * 100 if recent_mean else 0.0

    forecasts = []
    for m in range(1, config.DEMAND_HORIZON_MONTHS + 1):
        projected = regression.predict(len(peaks) + m * DAYS_PER_MONTH)
        forecasts.append(DemandForecastPoint(
            grid=DBIS,
            projected_month=add_months(reference_date, m),
            projected_peak_mw=round(projected, 1),
            confidence_low_mw=round(projected - band, 1),
            confidence_high_mw=round(projected + band, 1),
            growth_rate_pct=round(growth, 2),
            data_source="daily",
        ))

    logger.info(f"DBIS demand: slope {regression.slope:.4f} MW/day, r2 {regression.r2:.3f}, growth {growth:.2f}%/month")
    return forecasts


def forecast_essequibo_demand(
    monthly: List[MonthlyKpiSnapshot],
    reference_date: date,
    config: Optional[Settings] = None,
) -> List[DemandForecastPoint]:
    config = config or default_settings
    peaks = monthly_values(monthly, ESSEQUIBO_PEAK_KPI)

    if len(peaks) < MIN_MONTHLY_POINTS:
        logger.info(f"Essequibo demand forecast skipped: {len(peaks)} monthly peaks (need {MIN_MONTHLY_POINTS})")
        return []

    regression = linear_regression(list(enumerate(peaks)))
    recent = peaks[-MONTHLY_BAND_WINDOW:]
    band = 2 * std_dev(recent)
    recent_mean = mean(recent)
    growth = regression.slope / recent_mean * 100 if recent_mean > 0 else 0.0

    forecasts = []
    for m in range(1, config.DEMAND_HORIZON_MONTHS + 1):
        projected = regression.predict(len(peaks) - 1 + m)
        forecasts.append(DemandForecastPoint(
            grid=ESSEQUIBO,
            projected_month=add_months(reference_date, m),
            projected_peak_mw=round(projected, 1),
            confidence_low_mw=round(projected - band, 1),
            confidence_high_mw=round(projected + band, 1),
            growth_rate_pct=round(growth, 2),
            data_source="monthly",
        ))

    logger.info(f"Essequibo demand: slope {regression.slope:.4f} MW/month, r2 {regression.r2:.3f}")
    return forecasts


def forecast_demand(
    snapshots: List[HistoricalSnapshot],
    monthly: List[MonthlyKpiSnapshot],
    reference_date: date,
    config: Optional[Settings] = None,
) -> List[DemandForecastPoint]:
    """Demand projections for both grids"""
    return (
        forecast_dbis_demand(snapshots, reference_date, config)
        + forecast_essequibo_demand(monthly, reference_date, config)
    )
