"""
Forecast result models
"""

from datetime import date, timedelta
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from dbis_warehouse.utils.helpers import add_months


class DemandForecastPoint(BaseModel):
    grid: str
    projected_month: date
    projected_peak_mw: float
    confidence_low_mw: float
    confidence_high_mw: float
    growth_rate_pct: float
    data_source: str


class CapacityTimeline(BaseModel):
    grid: str
    current_capacity_mw: float
    projected_capacity_mw: float
    shortfall_date: Optional[date] = None
    months_until_shortfall: Optional[int] = None
    reserve_margin_pct: float
    risk_level: str


class LoadSheddingAnalysis(BaseModel):
    period_days: int
    avg_shed_mw: float = 0.0
    max_shed_mw: float = 0.0
    shed_days_count: int = 0
    trend: str
    projected_avg_6mo: float = 0.0


class StationReliability(BaseModel):
    station: str
    period_days: int
    uptime_pct: float
    avg_utilization_pct: float
    total_units: int
    online_units: int
    offline_units: int
    failure_count: int
    mtbf_days: float
    trend: str
    risk_level: str


class UnitRisk(BaseModel):
    station: str
    engine: Optional[str] = None
    unit_number: str
    derated_mw: float
    uptime_pct_90d: float
    failure_count_90d: int
    mtbf_days: float
    days_since_last_failure: int
    predicted_failure_days: int
    risk_level: str
    risk_score: int
    matched_rules: List[str] = []


class KpiForecastPoint(BaseModel):
    kpi_name: str
    projected_month: date
    projected_value: float
    confidence_low: float
    confidence_high: float
    trend: str


class ScenarioProjection(BaseModel):
    months_ahead: int
    peak_mw: float
    reserve_margin_pct: float
    confidence: str
    reasoning: str = ""


class GridScenario(BaseModel):
    current_peak: float
    capacity_mw: float
    projections: List[ScenarioProjection]
    growth_rate_mw_per_month: float
    safe_threshold_breach_date: Optional[date] = None
    load_shedding_unavoidable_date: Optional[date] = None


class Scenario(BaseModel):
    label: str
    assumptions: List[str] = []
    grids: Dict[str, GridScenario]


class ScenarioForecast(BaseModel):
    """Conservative and aggressive demand scenarios per grid"""
    data_period: str
    methodology_summary: str
    conservative: Scenario
    aggressive: Scenario
    is_fallback: bool = False
    confidence: str = "medium"
    data_points_used: int = 0
    model: str = ""


class ScenarioInputs(BaseModel):
    """History handed to the analytical backend"""
    reference_date: date
    monthly_kpis: List[Dict[str, Optional[float]]]
    months: List[date]
    current_capacity_mw: Dict[str, float]
    current_peak_mw: Dict[str, Optional[float]]


class ForecastRecord(BaseModel):
    """Flat export shape shared by every forecast category"""
    subject_type: str
    subject: str
    projected_period: Optional[date] = None
    projected_value: Optional[float] = None
    confidence_low: Optional[float] = None
    confidence_high: Optional[float] = None
    growth_rate_pct: Optional[float] = None
    risk_level: Optional[str] = None
    is_fallback: bool = False


class ForecastBundle(BaseModel):
    """All forecast categories computed for one reference date"""
    reference_date: date
    demand: List[DemandForecastPoint] = Field(default_factory=list)
    capacity: List[CapacityTimeline] = Field(default_factory=list)
    load_shedding: Optional[LoadSheddingAnalysis] = None
    station_reliability: List[StationReliability] = Field(default_factory=list)
    unit_risk: List[UnitRisk] = Field(default_factory=list)
    kpi: List[KpiForecastPoint] = Field(default_factory=list)
    scenario: Optional[ScenarioForecast] = None

    def to_records(self) -> List[ForecastRecord]:
        """Flatten every category into ForecastRecord rows"""
        records = [
            ForecastRecord(
                subject_type="grid",
                subject=d.grid,
                projected_period=d.projected_month,
                projected_value=d.projected_peak_mw,
                confidence_low=d.confidence_low_mw,
                confidence_high=d.confidence_high_mw,
                growth_rate_pct=d.growth_rate_pct,
            )
            for d in self.demand
        ]

        records += [
            ForecastRecord(
                subject_type="grid",
                subject=c.grid,
                projected_period=c.shortfall_date,
                projected_value=c.projected_capacity_mw,
                risk_level=c.risk_level,
            )
            for c in self.capacity
        ]

        if self.load_shedding is not None:
            records.append(ForecastRecord(
                subject_type="grid",
                subject="DBIS load shedding",
                projected_period=add_months(self.reference_date, 6),
                projected_value=self.load_shedding.projected_avg_6mo,
            ))

        records += [
            ForecastRecord(
                subject_type="station",
                subject=s.station,
                projected_value=s.uptime_pct,
                risk_level=s.risk_level,
            )
            for s in self.station_reliability
        ]

        records += [
            ForecastRecord(
                subject_type="unit",
                subject=f"{u.station} {u.unit_number}",
                projected_period=self.reference_date + timedelta(days=u.predicted_failure_days),
                projected_value=float(u.risk_score),
                risk_level=u.risk_level,
            )
            for u in self.unit_risk
        ]

        records += [
            ForecastRecord(
                subject_type="kpi",
                subject=k.kpi_name,
                projected_period=k.projected_month,
                projected_value=k.projected_value,
                confidence_low=k.confidence_low,
                confidence_high=k.confidence_high,
            )
            for k in self.kpi
        ]

        if self.scenario is not None:
            for name, scenario in (("conservative", self.scenario.conservative), ("aggressive", self.scenario.aggressive)):
                for grid, grid_scenario in scenario.grids.items():
                    records += [
                        ForecastRecord(
                            subject_type="grid",
                            subject=f"{grid} {name}",
                            projected_period=add_months(self.reference_date, p.months_ahead),
                            projected_value=p.peak_mw,
                            growth_rate_pct=(
                                round(grid_scenario.growth_rate_mw_per_month / grid_scenario.current_peak * 100, 2)
                                if grid_scenario.current_peak else None
                            ),
                            is_fallback=self.scenario.is_fallback,
                        )
                        for p in grid_scenario.projections
                    ]

        return records
