"""
Conservative / aggressive demand scenarios

The analytical backend provides the primary forecast. With too little
history, no backend, or an unusable backend answer, a deterministic
linear extrapolation is returned instead and flagged is_fallback=True.
"""

import math
from datetime import date
from typing import Dict, List, Optional

from loguru import logger

from dbis_warehouse.config.settings import Settings, settings as default_settings
from dbis_warehouse.exceptions import AnalyticsBackendUnavailable
from dbis_warehouse.forecasting.analytics_client import AnalyticsBackend
from dbis_warehouse.models.data_models import MonthlyKpiSnapshot
from dbis_warehouse.models.forecast_models import (
    CapacityTimeline,
    GridScenario,
    Scenario,
    ScenarioForecast,
    ScenarioInputs,
    ScenarioProjection,
)
from dbis_warehouse.utils.helpers import add_months

MIN_BACKEND_POINTS = 3
SCENARIO_HORIZONS = (6, 12, 18, 24)
PEAK_KPIS = {"DBIS": "Peak Demand DBIS", "Essequibo": "Peak Demand Essequibo"}

CONSERVATIVE_ASSUMPTIONS = [
    "Demand continues at historical average growth rate",
    "No major new industrial connections",
    "Current capacity constraints persist",
    "Normal seasonal variation",
]
AGGRESSIVE_ASSUMPTIONS = [
    "Demand growth accelerates by the aggressive multiplier",
    "New commercial and industrial connections come online",
    "Suppressed demand released as supply improves",
]


def build_inputs(
    monthly: List[MonthlyKpiSnapshot],
    reference_date: date,
    capacity: Optional[List[CapacityTimeline]] = None,
) -> ScenarioInputs:
    capacities = {c.grid: c.current_capacity_mw for c in capacity or [] if c.current_capacity_mw > 0}
    current_peaks = {}
    for grid, kpi in PEAK_KPIS.items():
        values = [m.values[kpi] for m in monthly if m.values.get(kpi)]
        current_peaks[grid] = values[-1] if values else None

    return ScenarioInputs(
        reference_date=reference_date,
        monthly_kpis=[dict(m.values) for m in monthly],
        months=[m.report_month for m in monthly],
        current_capacity_mw=capacities,
        current_peak_mw=current_peaks,
    )


class ScenarioForecaster:
    """Scenario forecasts from the analytical backend, with a deterministic fallback"""

    def __init__(self, backend: Optional[AnalyticsBackend] = None, config: Optional[Settings] = None):
        self.backend = backend
        self.settings = config or default_settings

    def forecast(
        self,
        monthly: List[MonthlyKpiSnapshot],
        reference_date: date,
        capacity: Optional[List[CapacityTimeline]] = None,
    ) -> ScenarioForecast:
        inputs = build_inputs(monthly, reference_date, capacity)

        if len(monthly) < MIN_BACKEND_POINTS:
            logger.info(f"Only {len(monthly)} months of history, using fallback scenario forecast")
            return self.fallback(inputs)

        if self.backend is None:
            logger.info("No analytics backend configured, using fallback scenario forecast")
            return self.fallback(inputs)

        try:
            return self.backend.forecast(inputs)
        except AnalyticsBackendUnavailable as e:
            logger.warning(f"Analytics backend unavailable ({e}), using fallback scenario forecast")
            return self.fallback(inputs)

    def growth_rate(self, grid: str, inputs: ScenarioInputs) -> float:
        """MW/month from the first and last observed peaks, floored per grid"""
        kpi = PEAK_KPIS[grid]
        values = [m.get(kpi) for m in inputs.monthly_kpis if m.get(kpi)]
        if len(inputs.monthly_kpis) >= 2 and values:
            return max(self.settings.FALLBACK_GROWTH_FLOOR[grid], (values[-1] - values[0]) / len(inputs.monthly_kpis))
        return self.settings.FALLBACK_GROWTH[grid]

    def breach_date(
        self, current: float, growth: float, capacity: float, threshold_pct: float, reference_date: date
    ) -> Optional[date]:
        """First month in the horizon when the reserve margin drops below the threshold"""
        target_peak = capacity * (1 - threshold_pct / 100)
        if growth <= 0:
            return None
        months = (target_peak - current) / growth
        if 0 < months <= max(SCENARIO_HORIZONS):
            return add_months(reference_date, math.ceil(months))
        return None

    def grid_scenario(self, grid: str, inputs: ScenarioInputs, multiplier: float) -> GridScenario:
        current = inputs.current_peak_mw.get(grid) or self.settings.FALLBACK_CURRENT_PEAK[grid]
        capacity = inputs.current_capacity_mw.get(grid) or self.settings.FALLBACK_CAPACITY[grid]
        growth = self.growth_rate(grid, inputs) * multiplier

        projections = []
        for months in SCENARIO_HORIZONS:
            peak = current + growth * months
            projections.append(ScenarioProjection(
                months_ahead=months,
                peak_mw=round(peak, 1),
                reserve_margin_pct=round((capacity - peak) / capacity * 100, 1),
                confidence="medium" if months <= 12 else "low",
                reasoning=f"Linear extrapolation: {current:.1f} MW + ({growth:.2f} MW/month x {months} months)",
            ))

        return GridScenario(
            current_peak=current,
            capacity_mw=capacity,
            projections=projections,
            growth_rate_mw_per_month=round(growth, 2),
            safe_threshold_breach_date=self.breach_date(
                current, growth, capacity, self.settings.RESERVE_WARNING_PCT, inputs.reference_date
            ),
            load_shedding_unavoidable_date=self.breach_date(
                current, growth, capacity, self.settings.RESERVE_CRITICAL_PCT, inputs.reference_date
            ),
        )

    def fallback(self, inputs: ScenarioInputs) -> ScenarioForecast:
        """Deterministic two-scenario linear extrapolation"""
        aggressive = self.settings.AGGRESSIVE_MULTIPLIER
        conservative_grids: Dict[str, GridScenario] = {g: self.grid_scenario(g, inputs, 1.0) for g in PEAK_KPIS}
        aggressive_grids: Dict[str, GridScenario] = {g: self.grid_scenario(g, inputs, aggressive) for g in PEAK_KPIS}

        period = f"{inputs.months[0]} - {inputs.months[-1]}" if inputs.months else "N/A - N/A"

        forecast = ScenarioForecast(
            data_period=period,
            methodology_summary="Linear extrapolation based on historical monthly growth rates.",
            conservative=Scenario(label="Conservative Baseline", assumptions=CONSERVATIVE_ASSUMPTIONS, grids=conservative_grids),
            aggressive=Scenario(label="Aggressive Growth", assumptions=AGGRESSIVE_ASSUMPTIONS, grids=aggressive_grids),
            is_fallback=True,
            confidence="low",
            data_points_used=len(inputs.months),
            model="fallback-linear",
        )

        dbis = conservative_grids["DBIS"]
        logger.info(f"Fallback scenarios: DBIS growth {dbis.growth_rate_mw_per_month} MW/month from {len(inputs.months)} months")
        return forecast
