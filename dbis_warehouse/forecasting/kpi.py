"""
Trend projections for the monthly KPI catalog
"""

from datetime import date
from typing import List, Optional

from loguru import logger

from dbis_warehouse.config.settings import Settings, settings as default_settings
from dbis_warehouse.forecasting.regression import linear_regression, std_dev
from dbis_warehouse.models.data_models import MonthlyKpiSnapshot
from dbis_warehouse.models.forecast_models import KpiForecastPoint
from dbis_warehouse.utils.helpers import add_months

MIN_POINTS = 3
BAND_WINDOW = 6
TREND_SLOPE = 0.1
NON_NEGATIVE_MARKERS = ("Customers", "Capacity", "Demand")


def clamp_kpi(kpi_name: str, value: float) -> float:
    """Percentages stay within [0, 100]; counts, capacities and demands stay non-negative"""
    if "%" in kpi_name:
        value = max(0.0, min(100.0, value))
    if any(marker in kpi_name for marker in NON_NEGATIVE_MARKERS):
        value = max(0.0, value)
    return value


def forecast_kpis(
    monthly: List[MonthlyKpiSnapshot],
    reference_date: date,
    config: Optional[Settings] = None,
) -> List[KpiForecastPoint]:
    config = config or default_settings

    if len(monthly) < MIN_POINTS:
        logger.info(f"KPI forecasts skipped: {len(monthly)} months of data (need {MIN_POINTS})")
        return []

    forecasts = []
    for kpi_name in config.KNOWN_KPIS:
        # x is the position in the full month axis, so missing months keep their spacing
        points = [(i, m.values[kpi_name]) for i, m in enumerate(monthly) if m.values.get(kpi_name) is not None]
        if len(points) < MIN_POINTS:
            continue

        series = [value for _, value in points]
        regression = linear_regression(points)
        band = 2 * std_dev(series[-BAND_WINDOW:])

        trend = "stable"
        if regression.slope > TREND_SLOPE:
            trend = "increasing"
        elif regression.slope < -TREND_SLOPE:
            trend = "decreasing"

        for m in range(1, config.KPI_HORIZON_MONTHS + 1):
            projected = clamp_kpi(kpi_name, regression.predict(len(monthly) - 1 + m))
            forecasts.append(KpiForecastPoint(
                kpi_name=kpi_name,
                projected_month=add_months(reference_date, m),
                projected_value=round(projected, 2),
                confidence_low=round(projected - band, 2),
                confidence_high=round(projected + band, 2),
                trend=trend,
            ))

        logger.debug(f"KPI {kpi_name}: {len(series)} points, slope {regression.slope:.4f}, trend {trend}")

    logger.info(f"Computed {len(forecasts)} KPI forecast points")
    return forecasts
