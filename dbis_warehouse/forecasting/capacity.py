"""
Capacity adequacy: reserve margin and first projected shortfall per grid
"""

from datetime import date
from typing import List, Optional

from loguru import logger

from dbis_warehouse.config.settings import Settings, settings as default_settings
from dbis_warehouse.forecasting.demand import DBIS, ESSEQUIBO, ESSEQUIBO_PEAK_KPI, monthly_values
from dbis_warehouse.models.data_models import HistoricalSnapshot, MonthlyKpiSnapshot
from dbis_warehouse.models.forecast_models import CapacityTimeline, DemandForecastPoint

ESSEQUIBO_CAPACITY_KPI = "Installed Capacity Essequibo"


def reserve_risk_level(reserve_margin_pct: float, config: Optional[Settings] = None) -> str:
    config = config or default_settings
    if reserve_margin_pct < config.RESERVE_CRITICAL_PCT:
        return "critical"
    if reserve_margin_pct < config.RESERVE_WARNING_PCT:
        return "warning"
    return "safe"


def build_timeline(
    grid: str,
    capacity: float,
    latest_demand: float,
    forecasts: List[DemandForecastPoint],
    reference_date: date,
    config: Optional[Settings] = None,
) -> CapacityTimeline:
    """Capacity is held flat; the shortfall is the first projected month above it"""
    shortfall = next((f for f in forecasts if f.grid == grid and f.projected_peak_mw > capacity), None)
    shortfall_date = shortfall.projected_month if shortfall else None
    months_until = round((shortfall_date - reference_date).days / 30) if shortfall_date else None

    reserve = (capacity - latest_demand) / capacity * 100 if capacity > 0 else 0.0

    return CapacityTimeline(
        grid=grid,
        current_capacity_mw=round(capacity, 1),
        projected_capacity_mw=round(capacity, 1),
        shortfall_date=shortfall_date,
        months_until_shortfall=months_until,
        reserve_margin_pct=round(reserve, 1),
        risk_level=reserve_risk_level(reserve, config),
    )


def compute_capacity_timeline(
    snapshots: List[HistoricalSnapshot],
    monthly: List[MonthlyKpiSnapshot],
    forecasts: List[DemandForecastPoint],
    reference_date: date,
    config: Optional[Settings] = None,
) -> List[CapacityTimeline]:
    latest = snapshots[-1].summary if snapshots else None
    dbis_capacity = (latest.total_dbis_capacity_mw or 0.0) if latest else 0.0
    dbis_demand = (latest.evening_peak_on_bars_mw or 0.0) if latest else 0.0

    esq_capacities = monthly_values(monthly, ESSEQUIBO_CAPACITY_KPI)
    esq_peaks = monthly_values(monthly, ESSEQUIBO_PEAK_KPI)

    timelines = [
        build_timeline(DBIS, dbis_capacity, dbis_demand, forecasts, reference_date, config),
        build_timeline(
            ESSEQUIBO,
            esq_capacities[-1] if esq_capacities else 0.0,
            esq_peaks[-1] if esq_peaks else 0.0,
            forecasts,
            reference_date,
            config,
        ),
    ]

    for t in timelines:
        logger.info(f"{t.grid} capacity {t.current_capacity_mw} MW, reserve {t.reserve_margin_pct}% ({t.risk_level}), shortfall {t.shortfall_date}")
    return timelines
