"""
Forecasting Module

Trend forecasts computed from persisted report history: demand, capacity
timeline, load shedding, station reliability, unit risk, monthly KPIs and
conservative/aggressive demand scenarios.
"""

from .engine import ForecastingEngine
from .scenarios import ScenarioForecaster
from .analytics_client import AnalyticsBackend, HttpAnalyticsBackend

__all__ = [
    'ForecastingEngine',
    'ScenarioForecaster',
    'AnalyticsBackend',
    'HttpAnalyticsBackend',
]
