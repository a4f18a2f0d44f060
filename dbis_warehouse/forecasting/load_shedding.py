"""
Load shedding: gap between suppressed and on-bars evening peaks
"""

from typing import List, Optional

from loguru import logger

from dbis_warehouse.config.settings import Settings, settings as default_settings
from dbis_warehouse.forecasting.regression import half_split_trend, linear_regression, mean
from dbis_warehouse.models.data_models import HistoricalSnapshot
from dbis_warehouse.models.forecast_models import LoadSheddingAnalysis

PROJECTION_DAYS = 180


def analyze_load_shedding(
    snapshots: List[HistoricalSnapshot],
    config: Optional[Settings] = None,
) -> LoadSheddingAnalysis:
    config = config or default_settings

    if not snapshots:
        return LoadSheddingAnalysis(period_days=0, trend="unknown")

    shed = [
        max(0.0, s.summary.evening_peak_suppressed_mw - s.summary.evening_peak_on_bars_mw)
        for s in snapshots
        if s.summary.evening_peak_suppressed_mw and s.summary.evening_peak_on_bars_mw
    ]

    if not shed:
        return LoadSheddingAnalysis(period_days=len(snapshots), trend="stable")

    trend = half_split_trend(shed, config.LOAD_SHEDDING_TREND_BAND, "increasing", "decreasing")
    regression = linear_regression(list(enumerate(shed)))
    projected = max(0.0, regression.predict(len(shed) + PROJECTION_DAYS))

    analysis = LoadSheddingAnalysis(
        period_days=len(snapshots),
        avg_shed_mw=round(mean(shed), 1),
        max_shed_mw=round(max(shed), 1),
        shed_days_count=sum(1 for value in shed if value > 0),
        trend=trend,
        projected_avg_6mo=round(projected, 1),
    )
    logger.info(f"Load shedding: avg {analysis.avg_shed_mw} MW, {analysis.shed_days_count} days, trend {trend}")
    return analysis
